"""Validated settings.json for the death trigger, plus the generated readme."""

from deathshock.config.errors import (
    ConfigError,
    ConfigErrorKind,
    InvalidIntensityError,
    InvalidRangeError,
    MalformedJsonError,
    MissingFileError,
    MissingRequiredFieldError,
)
from deathshock.config.loader import ConfigLoader, write_readme
from deathshock.config.models import DEFAULT_ENDPOINT_DOMAIN, DurationWindow, IntensityWindow, ShockConfig

__all__ = [
    "ConfigError",
    "ConfigErrorKind",
    "ConfigLoader",
    "DEFAULT_ENDPOINT_DOMAIN",
    "DurationWindow",
    "IntensityWindow",
    "InvalidIntensityError",
    "InvalidRangeError",
    "MalformedJsonError",
    "MissingFileError",
    "MissingRequiredFieldError",
    "ShockConfig",
    "write_readme",
]
