"""Exception taxonomy for catalog loading and overlay toggling."""


class StarfieldError(Exception):
    """Base class for all starfield errors."""


class ConfigError(StarfieldError, ValueError):
    """An environment setting has an invalid value."""


class CatalogError(StarfieldError):
    """Catalog loading failure."""


class SourceUnavailable(CatalogError):
    """The catalog file cannot be located or opened."""

    def __init__(self, source: str, reason: str = "") -> None:
        self.source = source
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Catalog source unavailable: {source}{detail}")


class MalformedEnvelope(CatalogError):
    """The outer container of the catalog cannot be parsed as a whole."""


class MalformedRecord(CatalogError):
    """A single record lacks a required field. The record is skipped."""

    def __init__(self, position: int, reason: str) -> None:
        self.position = position
        self.reason = reason
        super().__init__(f"Record {position}: {reason}")


class TruncatedBinaryData(CatalogError):
    """The binary header announces more records than the data holds."""

    def __init__(self, expected: int, available: int) -> None:
        self.expected = expected
        self.available = available
        super().__init__(
            f"Binary catalog truncated: header announces {expected} records, "
            f"{available} complete records present"
        )


class InvalidConstellationIndex(StarfieldError, IndexError):
    """Toggle request outside the registry's valid range."""

    def __init__(self, index: int, size: int) -> None:
        self.index = index
        self.size = size
        super().__init__(f"Constellation index {index} out of range [0, {size})")


class MissingCatalogEntry(StarfieldError, KeyError):
    """A constellation references a catalog number with no loaded star."""

    def __init__(self, catalog_number: int, constellation: str) -> None:
        self.catalog_number = catalog_number
        self.constellation = constellation
        super().__init__(catalog_number, constellation)

    def __str__(self) -> str:
        return f"HR {self.catalog_number} not in catalog (constellation {self.constellation})"
