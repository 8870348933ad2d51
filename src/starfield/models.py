"""Data model definitions — explicit boundaries between catalog, index, and overlay layers."""

from dataclasses import dataclass
from enum import Enum

Vector3 = tuple[float, float, float]
RGB = tuple[float, float, float]


class MagnitudeProfile(Enum):
    """Magnitude scale of a catalog field, as (brightest, faintest) bounds."""

    HUNDREDTHS = (-146.0, 796.0)  # Binary BSC5: magnitude × 100 stored as int16
    DECIMAL = (-1.46, 7.96)  # JSON catalogs: plain decimal magnitude

    @property
    def brightest(self) -> float:
        return self.value[0]

    @property
    def faintest(self) -> float:
        return self.value[1]

    @property
    def scale(self) -> float:
        """Stored units per magnitude."""
        return 100.0 if self is MagnitudeProfile.HUNDREDTHS else 1.0


class SchemaVersion(Enum):
    """Key layout of a JSON star catalog."""

    BSC5 = "bsc5"  # RAh/RAm/RAs, DE-/DEd/DEm/DEs, Vmag, SpType, HR ...
    HYG = "hyg"  # ra (hours), dec (degrees), mag, spect, hr ...


@dataclass(frozen=True)
class BinaryFixedRecord:
    """Little-endian BSC5 binary: 28-byte header, 32-byte records."""

    profile: MagnitudeProfile = MagnitudeProfile.HUNDREDTHS


@dataclass(frozen=True)
class StructuredText:
    """JSON array of per-star objects."""

    schema: SchemaVersion = SchemaVersion.BSC5
    profile: MagnitudeProfile = MagnitudeProfile.DECIMAL


CatalogFormat = BinaryFixedRecord | StructuredText


@dataclass(frozen=True)
class RawStar:
    """Parsed catalog fields before derivation. Angles already in radians."""

    catalog_number: int
    right_ascension: float
    declination: float
    proper_motion_ra: float = 0.0
    proper_motion_dec: float = 0.0
    spectral_class: str | None = None
    spectral_subclass_fraction: float = 0.0
    magnitude: float | None = None
    spectral_type: str | None = None  # Raw SpType string, when the source has one
    name: str | None = None
    constellation: str | None = None
    common_name: str | None = None
    flamsteed: str | None = None
    hd: str | None = None
    temperature: float | None = None  # Kelvin


@dataclass(frozen=True)
class Star:
    """A loaded catalog star with its derived display attributes."""

    catalog_number: int  # Harvard Revised number (HR)
    right_ascension: float  # Radians
    declination: float  # Radians
    proper_motion_ra: float  # Retained, never applied (fixed epoch)
    proper_motion_dec: float
    spectral_class: str | None  # "O", "B", ... or None when unknown
    spectral_subclass_fraction: float  # Sub-class digit / 10, in [0, 1]
    magnitude: float | None  # Native scale of the source (see MagnitudeProfile)
    position: Vector3  # Unit vector on the celestial sphere
    color: RGB  # Intrinsic spectral color, channels in [0, 1]
    size: float  # Normalized visual size in [0, 1]
    spectral_type: str | None = None
    name: str | None = None
    constellation: str | None = None
    common_name: str | None = None
    flamsteed: str | None = None
    hd: str | None = None
    temperature: float | None = None
    magnitude_profile: MagnitudeProfile = MagnitudeProfile.DECIMAL

    @property
    def apparent_magnitude(self) -> float | None:
        """Magnitude in ordinary units, whatever scale the source stored."""
        if self.magnitude is None:
            return None
        return self.magnitude / self.magnitude_profile.scale


@dataclass(frozen=True)
class Constellation:
    """A named star grouping. Edges join catalog numbers, never array positions."""

    name: str
    vertices: tuple[int, ...]  # Catalog numbers highlighted when visible
    edges: tuple[tuple[int, int], ...]  # (catalog_number, catalog_number) pairs


@dataclass(frozen=True)
class LineSegment:
    """A single overlay line, already inset from both star markers."""

    hr_from: int
    hr_to: int
    start: Vector3
    end: Vector3
