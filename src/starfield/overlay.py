"""Star placement and the constellation overlay toggle state machine.

The controller never draws anything itself. It talks to a rendering
collaborator through the narrow ``Renderer`` protocol:

  create_star        place a star visual (position, color, display size)
  set_star_color     recolor an existing star visual
  set_star_size      resize an existing star visual
  create_line_group  open a group that owns one constellation's lines
  add_line           add a line segment to a group
  destroy_line_group remove a group and every line in it
"""

import logging
from collections.abc import Hashable
from dataclasses import dataclass
from typing import Protocol

from starfield import astrometry
from starfield.constellations import ConstellationRegistry
from starfield.errors import MissingCatalogEntry
from starfield.index import StarCatalogIndex
from starfield.models import RGB, Star, Vector3

logger = logging.getLogger(__name__)

HIGHLIGHT_COLOR: RGB = astrometry.WHITE
DEFAULT_LINE_INSET = 3.0 / 400.0  # 3 scene units at a 400-unit field radius
DEFAULT_SIZE_MIN = 0.5
DEFAULT_SIZE_MAX = 7.0


class Renderer(Protocol):
    def create_star(self, star: Star, size: float) -> Hashable: ...

    def set_star_color(self, handle: Hashable, color: RGB) -> None: ...

    def set_star_size(self, handle: Hashable, size: float) -> None: ...

    def create_line_group(self, name: str) -> Hashable: ...

    def add_line(self, group: Hashable, start: Vector3, end: Vector3) -> None: ...

    def destroy_line_group(self, group: Hashable) -> None: ...


@dataclass(frozen=True)
class ToggleResult:
    """What a single toggle did."""

    index: int
    visible: bool  # State after the toggle
    recolored: int  # Star visuals recolored
    lines_drawn: int  # 0 when hiding
    missing: tuple[MissingCatalogEntry, ...] = ()


def key_to_index(key: str) -> int | None:
    """Map a digit key ("0".."9") to a constellation index; other keys → None."""
    if len(key) == 1 and key.isdigit():
        return int(key)
    return None


class OverlayController:
    """Places the catalog through a renderer and applies constellation toggles.

    Owns the catalog-number → star-visual map. Toggling only changes the
    renderer's transient visuals; Star records are never modified.
    """

    def __init__(
        self,
        catalog: StarCatalogIndex,
        registry: ConstellationRegistry,
        renderer: Renderer,
        *,
        line_inset: float = DEFAULT_LINE_INSET,
        size_min: float = DEFAULT_SIZE_MIN,
        size_max: float = DEFAULT_SIZE_MAX,
        highlight: RGB = HIGHLIGHT_COLOR,
    ) -> None:
        self.catalog = catalog
        self.registry = registry
        self.renderer = renderer
        self.line_inset = line_inset
        self.size_min = size_min
        self.size_max = size_max
        self.highlight = highlight
        self._visuals: dict[int, Hashable] = {}
        self._placed: list[tuple[Star, Hashable]] = []
        self._is_placed = False

    # --- placement ---

    def place_stars(self) -> int:
        """Create one renderer visual per loaded star. Returns the number placed.

        Raises:
            RuntimeError: Stars were already placed.
        """
        if self._is_placed:
            raise RuntimeError("Stars are already placed")
        for star in self.catalog.all():
            handle = self.renderer.create_star(
                star, astrometry.display_size(star.size, self.size_min, self.size_max)
            )
            self._visuals[star.catalog_number] = handle
            self._placed.append((star, handle))
        self._is_placed = True
        logger.info("Placed %d star visuals", len(self._placed))
        return len(self._placed)

    def rebuild_visual_sizes(self, new_min: float, new_max: float) -> None:
        """Re-derive every placed star's display size from new bounds."""
        self.size_min = new_min
        self.size_max = new_max
        for star, handle in self._placed:
            self.renderer.set_star_size(
                handle, astrometry.display_size(star.size, new_min, new_max)
            )
        logger.debug("Rebuilt %d star sizes for [%s, %s]", len(self._placed), new_min, new_max)

    # --- toggling ---

    def apply_toggle(self, index: int) -> ToggleResult:
        """Flip a constellation between hidden and visible.

        Args:
            index: Constellation index in the registry.

        Returns:
            ToggleResult. Vertices and edges whose catalog numbers are not
            loaded are skipped and listed in ``missing``.

        Raises:
            InvalidConstellationIndex: index outside the registry. No state changes.
            RuntimeError: place_stars() has not run yet.
        """
        if not self.registry.is_visible(index):
            if not self._is_placed:
                raise RuntimeError("place_stars() must run before toggling")
            result = self._show(index)
        else:
            result = self._hide(index)
        for m in result.missing:
            logger.warning("Skipping %s", m)
        logger.debug(
            "Toggled constellation %d (%s) → %s",
            index,
            self.registry[index].name,
            "visible" if result.visible else "hidden",
        )
        return result

    def toggle_by_name(self, name: str) -> ToggleResult:
        """Toggle a constellation by name.

        Raises:
            KeyError: No constellation has that name.
        """
        return self.apply_toggle(self.registry.find(name))

    def _recolor_vertices(
        self, index: int, highlight: bool
    ) -> tuple[int, list[MissingCatalogEntry]]:
        c = self.registry[index]
        count = 0
        missing: list[MissingCatalogEntry] = []
        for hr in c.vertices:
            star = self.catalog.by_catalog_number(hr)
            handle = self._visuals.get(hr)
            if star is None or handle is None:
                missing.append(MissingCatalogEntry(hr, c.name))
                continue
            self.renderer.set_star_color(handle, self.highlight if highlight else star.color)
            count += 1
        return count, missing

    def _show(self, index: int) -> ToggleResult:
        c = self.registry[index]
        segments, edge_missing = self.registry.segments(index, self.catalog, self.line_inset)
        group = self.renderer.create_line_group(c.name)
        try:
            recolored, missing = self._recolor_vertices(index, highlight=True)
            for seg in segments:
                self.renderer.add_line(group, seg.start, seg.end)
        except Exception:
            self.renderer.destroy_line_group(group)
            self._recolor_vertices(index, highlight=False)
            raise
        self.registry.mark_visible(index, group)
        return ToggleResult(
            index=index,
            visible=True,
            recolored=recolored,
            lines_drawn=len(segments),
            missing=tuple(missing) + edge_missing,
        )

    def _hide(self, index: int) -> ToggleResult:
        # Stays visible until the renderer has dropped the group
        self.renderer.destroy_line_group(self.registry.handle(index))
        self.registry.mark_hidden(index)
        recolored, missing = self._recolor_vertices(index, highlight=False)
        return ToggleResult(
            index=index,
            visible=False,
            recolored=recolored,
            lines_drawn=0,
            missing=tuple(missing),
        )

    # --- queries ---

    def is_visible(self, index: int) -> bool:
        return self.registry.is_visible(index)

    def visible_vertex_catalog_numbers(self, index: int) -> tuple[int, ...]:
        """Catalog numbers currently highlighted by a constellation; empty when hidden."""
        if not self.registry.is_visible(index):
            return ()
        return tuple(hr for hr in self.registry[index].vertices if hr in self._visuals)

    def describe_star(self, catalog_number: int) -> str | None:
        """Multi-line info text for a selected star, or None if it is not loaded."""
        star = self.catalog.by_catalog_number(catalog_number)
        if star is None:
            return None
        title = f"HR {star.catalog_number}"
        if star.common_name or star.name:
            title = f"{star.common_name or star.name} ({title})"
        x, y, z = star.position
        r, g, b = star.color
        lines = [
            f"Star Name: {title}",
            f"Position: ({x:.3f}, {y:.3f}, {z:.3f})",
            f"Colour: ({r:.3f}, {g:.3f}, {b:.3f})",
            f"Size: {star.size:.3f}",
        ]
        if star.spectral_type:
            lines.append(f"Spectral Type: {star.spectral_type}")
        if star.apparent_magnitude is not None:
            lines.append(f"Magnitude: {star.apparent_magnitude:.2f}")
        return "\n".join(lines)
