"""Runtime settings read from the environment (and a .env file at entry points)."""

import logging
import math
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from starfield.catalog import format_from_name
from starfield.errors import ConfigError
from starfield.models import CatalogFormat
from starfield.overlay import DEFAULT_LINE_INSET, DEFAULT_SIZE_MAX, DEFAULT_SIZE_MIN

_ROOT = Path(__file__).parent.parent.parent


@dataclass(frozen=True)
class Settings:
    """Session configuration. Build with ``Settings.from_env()``."""

    catalog_path: Path = _ROOT / "resources" / "BSC5"
    catalog_format: str = "binary"  # "binary" | "bsc5-json" | "hyg-json"
    star_size_min: float = DEFAULT_SIZE_MIN
    star_size_max: float = DEFAULT_SIZE_MAX
    line_inset: float = DEFAULT_LINE_INSET
    log_level: str = "INFO"

    @property
    def format(self) -> CatalogFormat:
        return format_from_name(self.catalog_format)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Read STARFIELD_* variables, falling back to defaults.

        Raises:
            ConfigError: A variable has an invalid value.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        def number(key: str, default: float) -> float:
            raw = env.get(key)
            if raw is None or not raw.strip():
                return default
            try:
                value = float(raw)
            except ValueError:
                raise ConfigError(f"{key} must be a number, got {raw!r}") from None
            if not math.isfinite(value):
                raise ConfigError(f"{key} must be finite, got {raw!r}")
            return value

        catalog_format = env.get("STARFIELD_FORMAT", defaults.catalog_format).strip()
        try:
            format_from_name(catalog_format)
        except ValueError as e:
            raise ConfigError(f"STARFIELD_FORMAT: {e}") from None

        log_level = env.get("STARFIELD_LOG_LEVEL", defaults.log_level).strip().upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigError(f"STARFIELD_LOG_LEVEL: unknown level {log_level!r}")

        settings = cls(
            catalog_path=Path(env.get("STARFIELD_CATALOG") or defaults.catalog_path),
            catalog_format=catalog_format,
            star_size_min=number("STARFIELD_STAR_SIZE_MIN", defaults.star_size_min),
            star_size_max=number("STARFIELD_STAR_SIZE_MAX", defaults.star_size_max),
            line_inset=number("STARFIELD_LINE_INSET", defaults.line_inset),
            log_level=log_level,
        )
        if settings.star_size_min > settings.star_size_max:
            raise ConfigError(
                f"STARFIELD_STAR_SIZE_MIN ({settings.star_size_min}) exceeds "
                f"STARFIELD_STAR_SIZE_MAX ({settings.star_size_max})"
            )
        if settings.line_inset < 0:
            raise ConfigError(f"STARFIELD_LINE_INSET must be >= 0, got {settings.line_inset}")
        return settings


def configure_logging(level: str = "INFO") -> None:
    """Install a plain stderr handler on the root logger."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
