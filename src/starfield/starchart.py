"""CLI entry point: load a catalog, toggle constellation overlays, save a chart.

    starfield-chart --catalog resources/BSC5 --toggle 0 --toggle "Ursa Major"
    starfield-chart --format bsc5-json --catalog bsc5.json --html sky.html
"""

import argparse
import dataclasses
import sys
from pathlib import Path

from dotenv import load_dotenv

from starfield.config import Settings, configure_logging
from starfield.errors import ConfigError, InvalidConstellationIndex
from starfield.renderers.plotly_3d import render_plotly_chart
from starfield.renderers.scene import SceneRenderer
from starfield.renderers.static import save_static_chart
from starfield.session import SkySession


def _parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="starfield-chart",
        description="Render a star catalog with constellation overlays.",
    )
    p.add_argument("--catalog", type=Path, help="catalog file (default: $STARFIELD_CATALOG)")
    p.add_argument(
        "--format",
        choices=["binary", "bsc5-json", "hyg-json"],
        help="catalog encoding (default: $STARFIELD_FORMAT)",
    )
    p.add_argument(
        "--toggle",
        action="append",
        default=[],
        metavar="CONSTELLATION",
        help="constellation index or name to show; repeatable",
    )
    p.add_argument("--output", type=Path, help="PNG output path (default: results/starfield.png)")
    p.add_argument("--html", type=Path, help="also write an interactive 3D chart")
    p.add_argument("--list", action="store_true", help="list constellations and exit")
    return p


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = _parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env()
    except ConfigError as e:
        parser.error(str(e))
    if args.catalog is not None:
        settings = dataclasses.replace(settings, catalog_path=args.catalog)
    if args.format is not None:
        settings = dataclasses.replace(settings, catalog_format=args.format)
    configure_logging(settings.log_level)

    scene = SceneRenderer()
    session = SkySession.open(settings, scene)
    controller = session.controller

    if args.list:
        for i in range(len(controller.registry)):
            print(f"{i}: {controller.registry[i].name}")
        return 0

    if session.load_error is not None:
        print(f"Catalog not loaded: {session.load_error}", file=sys.stderr)

    for item in args.toggle:
        try:
            if item.isdigit():
                result = controller.apply_toggle(int(item))
            else:
                result = controller.toggle_by_name(item)
        except InvalidConstellationIndex as e:
            parser.error(str(e))
        except KeyError:
            parser.error(f"unknown constellation: {item}")
        name = controller.registry[result.index].name
        print(f"{name}: {result.lines_drawn} lines, {len(result.missing)} missing stars")

    path = save_static_chart(scene, args.output)
    print(f"Saved: {path}")

    if args.html is not None:
        args.html.parent.mkdir(parents=True, exist_ok=True)
        render_plotly_chart(scene).write_html(args.html)
        print(f"Saved: {args.html}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
