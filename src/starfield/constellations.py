"""Constellation table and overlay visibility state."""

import logging
from collections.abc import Hashable, Iterable, Sequence

import numpy as np

from starfield.errors import InvalidConstellationIndex, MissingCatalogEntry
from starfield.index import StarCatalogIndex
from starfield.models import Constellation, LineSegment, Vector3

logger = logging.getLogger(__name__)


def _pairs(flat: Sequence[int]) -> tuple[tuple[int, int], ...]:
    """Consecutive HR numbers form individual line segments."""
    return tuple((flat[i], flat[i + 1]) for i in range(0, len(flat) - 1, 2))


def constellation(name: str, vertices: Sequence[int], line_hrs: Sequence[int]) -> Constellation:
    """Build a Constellation from a vertex list and a flat ``HR1 HR2 HR3 HR4 ...`` edge list."""
    return Constellation(name=name, vertices=tuple(vertices), edges=_pairs(line_hrs))


# fmt: off
DEFAULT_CONSTELLATIONS: tuple[Constellation, ...] = (
    constellation(
        "Orion",
        [1948, 1903, 1852, 2004, 1713, 2061, 1790, 1907, 2124,
         2199, 2135, 2047, 2159, 1543, 1544, 1570, 1552, 1567],
        [1713, 2004, 1713, 1852, 1852, 1790, 1852, 1903, 1903, 1948,
         1948, 2061, 1948, 2004, 1790, 1907, 1907, 2061, 2061, 2124,
         2124, 2199, 2199, 2135, 2199, 2159, 2159, 2047, 1790, 1543,
         1543, 1544, 1544, 1570, 1543, 1552, 1552, 1567, 2135, 2047],
    ),
    constellation(
        "Monoceros",
        [2970, 3188, 2714, 2356, 2227, 2506, 2298, 2385, 2456, 2479],
        [2970, 3188, 3188, 2714, 2714, 2356, 2356, 2227, 2714, 2506,
         2506, 2298, 2298, 2385, 2385, 2456, 2479, 2506, 2479, 2385],
    ),
    constellation(
        "Gemini",
        [2890, 2891, 2990, 2421, 2777, 2473, 2650, 2216, 2895,
         2343, 2484, 2286, 2134, 2763, 2697, 2540, 2821, 2905, 2985],
        [2890, 2697, 2990, 2905, 2697, 2473, 2905, 2777, 2777, 2650,
         2650, 2421, 2473, 2286, 2286, 2216, 2473, 2343, 2216, 2134,
         2763, 2484, 2763, 2777, 2697, 2540, 2697, 2821, 2821, 2905, 2905, 2985],
    ),
    constellation(
        "Cancer",
        [3475, 3449, 3461, 3572, 3249],
        [3475, 3449, 3449, 3461, 3461, 3572, 3461, 3249],
    ),
    constellation(
        "Leo",
        [3982, 4534, 4057, 4357, 3873, 4031, 4359, 3975, 4399, 4386, 3905, 3773, 3731],
        [4534, 4357, 4534, 4359, 4357, 4359, 4357, 4057, 4057, 4031,
         4057, 3975, 3975, 3982, 3975, 4359, 4359, 4399, 4399, 4386,
         4031, 3905, 3905, 3873, 3873, 3975, 3873, 3773, 3773, 3731, 3731, 3905],
    ),
    constellation(
        "Leo Minor",
        [3800, 3974, 4100, 4247, 4090],
        [3800, 3974, 3974, 4100, 4100, 4247, 4247, 4090, 4090, 3974],
    ),
    constellation(
        "Lynx",
        [3705, 3690, 3612, 3579, 3275, 2818, 2560, 2238],
        [3705, 3690, 3690, 3612, 3612, 3579, 3579, 3275, 3275, 2818,
         2818, 2560, 2560, 2238],
    ),
    constellation(
        "Ursa Major",
        [3569, 3594, 3775, 3888, 3323, 3757, 4301, 4295, 4554, 4660,
         4905, 5054, 5191, 4518, 4335, 4069, 4033, 4377, 4375],
        [3569, 3594, 3594, 3775, 3775, 3888, 3888, 3323, 3323, 3757,
         3757, 3888, 3757, 4301, 4301, 4295, 4295, 3888, 4295, 4554,
         4554, 4660, 4660, 4301, 4660, 4905, 4905, 5054, 5054, 5191,
         4554, 4518, 4518, 4335, 4335, 4069, 4069, 4033, 4518, 4377, 4377, 4375],
    ),
)
# fmt: on


def inset_segment(start: Vector3, end: Vector3, margin: float) -> tuple[Vector3, Vector3]:
    """Pull both endpoints toward each other by ``margin`` along the line.

    The margin is capped at half the segment length so the ends never cross.
    A zero-length segment is returned unchanged.
    """
    p0 = np.asarray(start, dtype=float)
    p1 = np.asarray(end, dtype=float)
    delta = p1 - p0
    length = float(np.linalg.norm(delta))
    if length == 0.0:
        return start, end
    offset = delta / length * min(margin, length / 2.0)
    a, b = p0 + offset, p1 - offset
    return (float(a[0]), float(a[1]), float(a[2])), (float(b[0]), float(b[1]), float(b[2]))


class ConstellationRegistry:
    """Fixed constellation table plus the set of currently visible overlays.

    Visibility maps a constellation index to the renderer's line-group handle;
    an index is visible exactly while it has an entry.
    """

    def __init__(self, constellations: Iterable[Constellation] = DEFAULT_CONSTELLATIONS) -> None:
        self._constellations: tuple[Constellation, ...] = tuple(constellations)
        self._visible: dict[int, Hashable] = {}

    def __len__(self) -> int:
        return len(self._constellations)

    def __getitem__(self, index: int) -> Constellation:
        self._check(index)
        return self._constellations[index]

    def _check(self, index: int) -> None:
        if not 0 <= index < len(self._constellations):
            raise InvalidConstellationIndex(index, len(self._constellations))

    def find(self, name: str) -> int:
        """Index of the constellation with this name (case-insensitive).

        Raises:
            KeyError: No constellation has that name.
        """
        wanted = name.casefold()
        for i, c in enumerate(self._constellations):
            if c.name.casefold() == wanted:
                return i
        raise KeyError(name)

    def is_visible(self, index: int) -> bool:
        self._check(index)
        return index in self._visible

    def visible_indices(self) -> tuple[int, ...]:
        return tuple(sorted(self._visible))

    def handle(self, index: int) -> Hashable | None:
        """Line-group handle of a visible constellation, None when hidden."""
        self._check(index)
        return self._visible.get(index)

    def mark_visible(self, index: int, handle: Hashable) -> None:
        self._check(index)
        if index in self._visible:
            raise ValueError(f"Constellation {index} is already visible")
        self._visible[index] = handle

    def mark_hidden(self, index: int) -> Hashable:
        """Drop the visible entry and return its line-group handle."""
        self._check(index)
        try:
            return self._visible.pop(index)
        except KeyError:
            raise ValueError(f"Constellation {index} is not visible") from None

    def segments(
        self, index: int, catalog: StarCatalogIndex, inset: float
    ) -> tuple[tuple[LineSegment, ...], tuple[MissingCatalogEntry, ...]]:
        """Resolve a constellation's edges against the loaded catalog.

        Args:
            index: Constellation index.
            catalog: Loaded stars used to resolve edge endpoints.
            inset: Distance trimmed from each end of every segment.

        Returns:
            (segments, missing): drawable segments, and one MissingCatalogEntry
            per unresolved endpoint. An edge with any unresolved endpoint is skipped.
        """
        c = self[index]
        segments: list[LineSegment] = []
        missing: list[MissingCatalogEntry] = []
        for hr_from, hr_to in c.edges:
            s0 = catalog.by_catalog_number(hr_from)
            s1 = catalog.by_catalog_number(hr_to)
            if s0 is None or s1 is None:
                for hr, star in ((hr_from, s0), (hr_to, s1)):
                    if star is None:
                        missing.append(MissingCatalogEntry(hr, c.name))
                continue
            start, end = inset_segment(s0.position, s1.position, inset)
            segments.append(LineSegment(hr_from=hr_from, hr_to=hr_to, start=start, end=end))
        return tuple(segments), tuple(missing)
