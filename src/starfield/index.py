"""Read-only star collection keyed by catalog number."""

from collections.abc import Iterable, Iterator

from starfield.models import Star


class StarCatalogIndex:
    """Owns a loaded star collection. Built once; reload builds a new index.

    Duplicate catalog numbers are kept in ``all()``; lookups resolve to the
    last star loaded with that number.
    """

    __slots__ = ("_stars", "_by_number")

    def __init__(self, stars: Iterable[Star]) -> None:
        self._stars: tuple[Star, ...] = tuple(stars)
        self._by_number: dict[int, Star] = {s.catalog_number: s for s in self._stars}

    @classmethod
    def empty(cls) -> "StarCatalogIndex":
        return cls(())

    def by_catalog_number(self, catalog_number: int) -> Star | None:
        return self._by_number.get(catalog_number)

    def all(self) -> tuple[Star, ...]:
        """Stars in load order."""
        return self._stars

    def __len__(self) -> int:
        return len(self._stars)

    def __iter__(self) -> Iterator[Star]:
        return iter(self._stars)

    def __contains__(self, catalog_number: object) -> bool:
        return catalog_number in self._by_number

    def __repr__(self) -> str:
        return f"StarCatalogIndex({len(self._stars)} stars)"
