"""In-memory scene state shared by the chart renderers."""

import itertools
import math
from collections.abc import Iterator
from dataclasses import dataclass, field

from starfield.models import RGB, Star, Vector3


@dataclass
class StarVisual:
    catalog_number: int
    position: Vector3
    color: RGB
    size: float


@dataclass
class LineGroup:
    name: str
    lines: list[tuple[Vector3, Vector3]] = field(default_factory=list)


def to_radec_deg(v: Vector3) -> tuple[float, float]:
    """Inverse of the unit-sphere projection: (x, y, z) → (RA°, Dec°), RA in [0, 360)."""
    x, y, z = v
    ra = math.degrees(math.atan2(z, x)) % 360.0
    dec = math.degrees(math.asin(max(-1.0, min(1.0, y))))
    return ra, dec


class SceneRenderer:
    """Renderer that keeps star visuals and line groups in memory, keyed by integer handles.

    The chart functions in this package draw whatever the scene currently holds.
    """

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.stars: dict[int, StarVisual] = {}
        self.groups: dict[int, LineGroup] = {}

    def create_star(self, star: Star, size: float) -> int:
        handle = next(self._ids)
        self.stars[handle] = StarVisual(star.catalog_number, star.position, star.color, size)
        return handle

    def set_star_color(self, handle: int, color: RGB) -> None:
        self.stars[handle].color = color

    def set_star_size(self, handle: int, size: float) -> None:
        self.stars[handle].size = size

    def create_line_group(self, name: str) -> int:
        handle = next(self._ids)
        self.groups[handle] = LineGroup(name)
        return handle

    def add_line(self, group: int, start: Vector3, end: Vector3) -> None:
        self.groups[group].lines.append((start, end))

    def destroy_line_group(self, group: int) -> None:
        del self.groups[group]

    def iter_lines(self) -> Iterator[tuple[Vector3, Vector3]]:
        for g in self.groups.values():
            yield from g.lines
