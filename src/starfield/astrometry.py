"""Pure astrometry helpers: sexagesimal conversion, projection, spectral color, and size."""

import math
import re

from starfield.models import RGB, MagnitudeProfile, Vector3

WHITE: RGB = (1.0, 1.0, 1.0)
UNKNOWN_MAGNITUDE_SIZE = 0.1

_SPECTRAL_CLASSES = "OBAFGKM"


def _hex_rgb(value: int) -> RGB:
    return ((value >> 16 & 0xFF) / 255, (value >> 8 & 0xFF) / 255, (value & 0xFF) / 255)


# OBAFGKM boundary colors (arXiv:2101.06254): O1, B0.5, A0, F0, G1, K0, M0, M9.5
SPECTRAL_COLORS: tuple[RGB, ...] = tuple(
    _hex_rgb(v)
    for v in (0x5C7CFF, 0x5D7EFF, 0x7996FF, 0xB8C5FF, 0xFFEFED, 0xFFDEC0, 0xFFA25A, 0xFF7D24)
)

_SPTYPE_RE = re.compile(r"([A-Z])(\d+(?:\.\d+)?)?")


def clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else hi if x > hi else x


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def inverse_lerp(a: float, b: float, value: float) -> float:
    """Position of value between a and b, clamped to [0, 1]. Degenerate range → 0."""
    if a == b:
        return 0.0
    return clamp((value - a) / (b - a), 0.0, 1.0)


def hms_to_radians(hours: float, minutes: float = 0.0, seconds: float = 0.0) -> float:
    """Right ascension in hours/minutes/seconds → radians (1h = 15°)."""
    return math.radians((hours + minutes / 60.0 + seconds / 3600.0) * 15.0)


def dms_to_radians(
    degrees: float, minutes: float = 0.0, seconds: float = 0.0, negative: bool = False
) -> float:
    """Declination in degrees/arcminutes/arcseconds → signed radians."""
    value = math.radians(abs(degrees) + minutes / 60.0 + seconds / 3600.0)
    return -value if negative else value


def project(ra: float, dec: float) -> Vector3:
    """Map (RA, Dec) in radians onto the unit sphere.

    Dec is elevation along +y; RA is azimuth in the x/z plane, starting at +x.

    Args:
        ra: Right ascension (radians).
        dec: Declination (radians).

    Returns:
        Unit vector (x, y, z).
    """
    cos_dec = math.cos(dec)
    return (math.cos(ra) * cos_dec, math.sin(dec), math.sin(ra) * cos_dec)


def spectral_color(spectral_class: str | None, fraction: float = 0.0) -> RGB:
    """Interpolate a star color from its spectral class and sub-class fraction.

    Args:
        spectral_class: One of O, B, A, F, G, K, M. Anything else yields white.
        fraction: Sub-class position in [0, 1] (digit / 10). Clamped.

    Returns:
        RGB triple with channels in [0, 1].
    """
    if not spectral_class or spectral_class not in _SPECTRAL_CLASSES:
        return WHITE
    idx = _SPECTRAL_CLASSES.index(spectral_class)
    t = clamp(fraction, 0.0, 1.0)
    lo, hi = SPECTRAL_COLORS[idx], SPECTRAL_COLORS[idx + 1]
    return (lerp(lo[0], hi[0], t), lerp(lo[1], hi[1], t), lerp(lo[2], hi[2], t))


def magnitude_size(magnitude: float | None, profile: MagnitudeProfile) -> float:
    """Map apparent magnitude to a normalized size; brighter = larger.

    Args:
        magnitude: Apparent magnitude in the profile's scale, or None if unknown.
        profile: Scale of the magnitude field (hundredths or decimal).

    Returns:
        Size in [0, 1]. Unknown magnitudes get a small non-zero default.
    """
    if magnitude is None or math.isnan(magnitude):
        return UNKNOWN_MAGNITUDE_SIZE
    return 1.0 - inverse_lerp(profile.brightest, profile.faintest, magnitude)


def subclass_fraction(code: float) -> float:
    """Sub-class digit (0-9, may be fractional) → fraction in [0, 1]."""
    return clamp(code / 10.0, 0.0, 1.0)


def parse_spectral_type(sptype: str | None) -> tuple[str | None, float]:
    """Split an MK spectral type string into (class letter, sub-class fraction).

    The first uppercase letter is the class, so luminosity prefixes such as
    the "g" in "gG9" are skipped. "B0.5Ia" → ("B", 0.05). No digit → fraction 0.
    """
    if not sptype:
        return None, 0.0
    m = _SPTYPE_RE.search(sptype)
    if m is None:
        return None, 0.0
    digits = m.group(2)
    return m.group(1), subclass_fraction(float(digits)) if digits else 0.0


def display_size(size: float, size_min: float, size_max: float) -> float:
    """Normalized size → renderer size between the configured bounds."""
    return lerp(size_min, size_max, size)
