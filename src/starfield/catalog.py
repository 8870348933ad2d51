"""Catalog ingestion: BSC5 binary and JSON star catalogs into immutable Star records."""

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np

from starfield import astrometry
from starfield.errors import (
    CatalogError,
    MalformedEnvelope,
    MalformedRecord,
    SourceUnavailable,
    TruncatedBinaryData,
)
from starfield.models import (
    BinaryFixedRecord,
    CatalogFormat,
    MagnitudeProfile,
    RawStar,
    SchemaVersion,
    Star,
    StructuredText,
)

logger = logging.getLogger(__name__)

# seq_offset, start_index, neg_count, numbering_mode, pm_flag, mag_count, record_size
_HEADER = np.dtype("<i4")
_HEADER_FIELDS = 7
HEADER_SIZE = _HEADER.itemsize * _HEADER_FIELDS

RECORD = np.dtype(
    [
        ("catalog_number", "<f4"),
        ("ra", "<f8"),
        ("dec", "<f8"),
        ("spectral_class", "u1"),
        ("spectral_index", "u1"),
        ("magnitude", "<i2"),  # Magnitude × 100
        ("pm_ra", "<f4"),
        ("pm_dec", "<f4"),
    ]
)


@dataclass(frozen=True)
class CatalogLoadResult:
    """Outcome of a bulk load: the stars plus recoverable diagnostics."""

    stars: tuple[Star, ...]
    diagnostics: tuple[CatalogError, ...] = ()

    @property
    def skipped(self) -> int:
        """Number of records dropped as malformed."""
        return sum(isinstance(d, MalformedRecord) for d in self.diagnostics)

    @property
    def truncated(self) -> bool:
        return any(isinstance(d, TruncatedBinaryData) for d in self.diagnostics)


def build_star(raw: RawStar, profile: MagnitudeProfile) -> Star:
    """Derive position, color, and size for a parsed record.

    Args:
        raw: Parsed catalog fields, angles in radians.
        profile: Scale of ``raw.magnitude``.

    Returns:
        Immutable Star.
    """
    return Star(
        catalog_number=raw.catalog_number,
        right_ascension=raw.right_ascension,
        declination=raw.declination,
        proper_motion_ra=raw.proper_motion_ra,
        proper_motion_dec=raw.proper_motion_dec,
        spectral_class=raw.spectral_class,
        spectral_subclass_fraction=raw.spectral_subclass_fraction,
        magnitude=raw.magnitude,
        position=astrometry.project(raw.right_ascension, raw.declination),
        color=astrometry.spectral_color(
            raw.spectral_class, raw.spectral_subclass_fraction
        ),
        size=astrometry.magnitude_size(raw.magnitude, profile),
        spectral_type=raw.spectral_type,
        name=raw.name,
        constellation=raw.constellation,
        common_name=raw.common_name,
        flamsteed=raw.flamsteed,
        hd=raw.hd,
        temperature=raw.temperature,
        magnitude_profile=profile,
    )


# --- Binary fixed-record format ---


def _read_binary(data: bytes) -> tuple[list[RawStar], list[CatalogError]]:
    if len(data) < HEADER_SIZE:
        raise MalformedEnvelope(
            f"Binary header needs {HEADER_SIZE} bytes, got {len(data)}"
        )
    header = np.frombuffer(data, dtype=_HEADER, count=_HEADER_FIELDS)
    count = -int(header[2])
    if count < 0:
        raise MalformedEnvelope(
            f"Header star count field must be negative, got {int(header[2])}"
        )

    diagnostics: list[CatalogError] = []
    available = (len(data) - HEADER_SIZE) // RECORD.itemsize
    if available < count:
        diagnostics.append(TruncatedBinaryData(expected=count, available=available))
    n = min(count, available)
    if n > 0:
        records = np.frombuffer(data, dtype=RECORD, count=n, offset=HEADER_SIZE)
    else:
        records = np.empty(0, dtype=RECORD)

    raws: list[RawStar] = []
    for i, rec in enumerate(records):
        ra, dec = float(rec["ra"]), float(rec["dec"])
        number = float(rec["catalog_number"])
        if not (math.isfinite(ra) and math.isfinite(dec) and math.isfinite(number)):
            diagnostics.append(MalformedRecord(i, "non-finite RA, Dec or catalog number"))
            continue
        class_code = int(rec["spectral_class"])
        spectral_class = chr(class_code) if 0x41 <= class_code <= 0x5A else None
        raws.append(
            RawStar(
                catalog_number=int(round(number)),
                right_ascension=ra,
                declination=dec,
                proper_motion_ra=float(rec["pm_ra"]),
                proper_motion_dec=float(rec["pm_dec"]),
                spectral_class=spectral_class,
                spectral_subclass_fraction=astrometry.subclass_fraction(
                    int(rec["spectral_index"]) - 0x30
                ),
                magnitude=float(rec["magnitude"]),
            )
        )
    return raws, diagnostics


# --- Structured-text (JSON) format ---


def _value(rec: dict[str, Any], key: str) -> Any:
    """Field value, or None when missing, null, or an empty/blank string."""
    v = rec.get(key)
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


def _required_float(rec: dict[str, Any], key: str) -> float:
    v = _value(rec, key)
    if v is None:
        raise KeyError(key)
    f = float(v)
    if not math.isfinite(f):
        raise ValueError(f"{key} is not finite: {v!r}")
    return f


def _optional_float(rec: dict[str, Any], key: str, default: float | None = None) -> float | None:
    v = _value(rec, key)
    if v is None:
        return default
    try:
        return float(v)
    except (TypeError, ValueError):
        return default


def _optional_str(rec: dict[str, Any], key: str) -> str | None:
    v = _value(rec, key)
    return None if v is None else str(v)


def _catalog_number(rec: dict[str, Any], key: str) -> int:
    f = _required_float(rec, key)
    if not f.is_integer():
        raise ValueError(f"{key} is not an integer: {f}")
    return int(f)


def _parse_bsc5(rec: dict[str, Any]) -> RawStar:
    ra = astrometry.hms_to_radians(
        _required_float(rec, "RAh"),
        _required_float(rec, "RAm"),
        _required_float(rec, "RAs"),
    )
    dec = astrometry.dms_to_radians(
        _required_float(rec, "DEd"),
        _required_float(rec, "DEm"),
        _required_float(rec, "DEs"),
        negative=_value(rec, "DE-") == "-",
    )
    sptype = _optional_str(rec, "SpType")
    spectral_class, fraction = astrometry.parse_spectral_type(sptype)
    return RawStar(
        catalog_number=_catalog_number(rec, "HR"),
        right_ascension=ra,
        declination=dec,
        proper_motion_ra=_optional_float(rec, "pmRA", 0.0),
        proper_motion_dec=_optional_float(rec, "pmDE", 0.0),
        spectral_class=spectral_class,
        spectral_subclass_fraction=fraction,
        magnitude=_optional_float(rec, "Vmag"),
        spectral_type=sptype,
        name=_optional_str(rec, "Name"),
        constellation=_optional_str(rec, "Constellation"),
        common_name=_optional_str(rec, "Common"),
        flamsteed=_optional_str(rec, "FlamsteedF"),
        hd=_optional_str(rec, "HD"),
        temperature=_optional_float(rec, "K"),
    )


def _parse_hyg(rec: dict[str, Any]) -> RawStar:
    # HYG stores RA in decimal HOURS and Dec in signed decimal degrees
    ra = astrometry.hms_to_radians(_required_float(rec, "ra"))
    dec = math.radians(_required_float(rec, "dec"))
    sptype = _optional_str(rec, "spect")
    spectral_class, fraction = astrometry.parse_spectral_type(sptype)
    return RawStar(
        catalog_number=_catalog_number(rec, "hr"),
        right_ascension=ra,
        declination=dec,
        proper_motion_ra=_optional_float(rec, "pmra", 0.0),
        proper_motion_dec=_optional_float(rec, "pmdec", 0.0),
        spectral_class=spectral_class,
        spectral_subclass_fraction=fraction,
        magnitude=_optional_float(rec, "mag"),
        spectral_type=sptype,
        name=_optional_str(rec, "proper"),
        constellation=_optional_str(rec, "con"),
        hd=_optional_str(rec, "hd"),
    )


_SCHEMA_PARSERS = {
    SchemaVersion.BSC5: _parse_bsc5,
    SchemaVersion.HYG: _parse_hyg,
}


def _read_json(
    data: bytes | str, schema: SchemaVersion
) -> tuple[list[RawStar], list[CatalogError]]:
    try:
        envelope = json.loads(data)
    except ValueError as e:
        raise MalformedEnvelope(f"Catalog is not valid JSON: {e}") from e
    if not isinstance(envelope, list):
        raise MalformedEnvelope(
            f"Catalog must be a JSON array of star objects, got {type(envelope).__name__}"
        )

    parse = _SCHEMA_PARSERS[schema]
    raws: list[RawStar] = []
    diagnostics: list[CatalogError] = []
    for i, rec in enumerate(envelope):
        if not isinstance(rec, dict):
            diagnostics.append(MalformedRecord(i, f"not an object: {type(rec).__name__}"))
            continue
        try:
            raws.append(parse(rec))
        except KeyError as e:
            diagnostics.append(MalformedRecord(i, f"missing field {e.args[0]}"))
        except (TypeError, ValueError) as e:
            diagnostics.append(MalformedRecord(i, str(e)))
    return raws, diagnostics


class CatalogLoader:
    """Parse a raw catalog into Star records, using an explicitly configured format."""

    def __init__(self, fmt: CatalogFormat) -> None:
        self.fmt = fmt

    def load(self, data: bytes | str) -> CatalogLoadResult:
        """Parse a whole catalog in one pass.

        Malformed records are skipped and reported in ``diagnostics``. A
        truncated binary catalog yields every complete record.

        Args:
            data: Raw catalog content. Binary catalogs require bytes.

        Returns:
            CatalogLoadResult with stars in input order.

        Raises:
            MalformedEnvelope: The container itself cannot be parsed.
        """
        if isinstance(self.fmt, BinaryFixedRecord):
            if isinstance(data, str):
                raise MalformedEnvelope("Binary catalog requires bytes, got str")
            raws, diagnostics = _read_binary(data)
        else:
            raws, diagnostics = _read_json(data, self.fmt.schema)

        stars = tuple(build_star(raw, self.fmt.profile) for raw in raws)
        for d in diagnostics:
            if isinstance(d, TruncatedBinaryData):
                logger.warning("%s", d)
            else:
                logger.debug("Skipping record: %s", d)
        result = CatalogLoadResult(stars=stars, diagnostics=tuple(diagnostics))
        if result.skipped:
            logger.warning("Skipped %d malformed catalog records", result.skipped)
        logger.info("Loaded %d stars", len(stars))
        return result

    def load_path(self, path: str | Path) -> CatalogLoadResult:
        """Read and parse a catalog file.

        Raises:
            SourceUnavailable: The file cannot be opened or read.
            MalformedEnvelope: The container itself cannot be parsed.
        """
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise SourceUnavailable(str(path), e.strerror or str(e)) from e
        logger.info("Read catalog %s (%d bytes)", path, len(data))
        return self.load(data)


def format_from_name(name: str) -> CatalogFormat:
    """Resolve a configuration name to a CatalogFormat.

    Raises:
        ValueError: Unknown format name.
    """
    formats: dict[str, CatalogFormat] = {
        "binary": BinaryFixedRecord(),
        "bsc5-json": StructuredText(schema=SchemaVersion.BSC5),
        "hyg-json": StructuredText(schema=SchemaVersion.HYG),
    }
    try:
        return formats[name]
    except KeyError:
        raise ValueError(
            f"Unknown catalog format {name!r}. Must be one of {sorted(formats)}"
        ) from None
