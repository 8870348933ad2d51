"""Matplotlib static PNG renderer."""

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402

from starfield.renderers.scene import SceneRenderer, to_radec_deg  # noqa: E402

_ROOT = Path(__file__).parent.parent.parent.parent
_LINE_COLOR = "#7ec8e3"


def render_static_chart(scene: SceneRenderer, chart_size: int = 12) -> Figure:
    """Render a scene as an equirectangular matplotlib chart.

    RA runs along x (increasing to the left, as seen from Earth), Dec along y.

    Args:
        scene: Star visuals and overlay lines to draw.
        chart_size: Figure width in inches. Height is half the width.

    Returns:
        matplotlib Figure object.
    """
    fig, ax = plt.subplots(figsize=(chart_size, chart_size / 2))
    fig.patch.set_facecolor("black")
    ax.set_facecolor("black")

    for start, end in scene.iter_lines():
        ra0, dec0 = to_radec_deg(start)
        ra1, dec1 = to_radec_deg(end)
        # Segments crossing RA 0h would sweep across the whole chart
        if abs(ra1 - ra0) > 180:
            continue
        ax.plot([ra0, ra1], [dec0, dec1], color=_LINE_COLOR, linewidth=0.6, alpha=0.7, zorder=1)

    if scene.stars:
        visuals = list(scene.stars.values())
        radec = np.array([to_radec_deg(v.position) for v in visuals])
        colors = np.array([v.color for v in visuals])
        marker_size = np.array([v.size for v in visuals]) ** 2
        ax.scatter(
            radec[:, 0], radec[:, 1], s=marker_size, c=colors, marker=".", linewidths=0, zorder=2
        )

    ax.set_xlim(360, 0)
    ax.set_ylim(-90, 90)
    ax.axis("off")

    return fig


def save_static_chart(scene: SceneRenderer, output_path: Path | None = None) -> Path:
    """Save a scene as a PNG file.

    Args:
        scene: Star visuals and overlay lines to draw.
        output_path: Destination path. Defaults to results/starfield.png.

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        output_path = _ROOT / "results" / "starfield.png"

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = render_static_chart(scene)
    fig.savefig(output_path, facecolor="black")
    plt.close(fig)
    return output_path
