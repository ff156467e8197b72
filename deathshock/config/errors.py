from __future__ import annotations

from enum import StrEnum

_README_HINT = "Read readme.txt in the mod's config folder."


class ConfigErrorKind(StrEnum):
    missing_file = "missing_file"
    malformed_json = "malformed_json"
    missing_required_field = "missing_required_field"
    invalid_range = "invalid_range"
    invalid_intensity = "invalid_intensity"


class ConfigError(RuntimeError):
    """Base class for settings.json problems.

    `user_message` is what the player sees in the popup; the exception text itself
    carries the diagnostic detail that goes to the log.
    """

    kind: ConfigErrorKind
    user_message: str = f"Error: Invalid config file! {_README_HINT}"


class MissingFileError(ConfigError):
    kind = ConfigErrorKind.missing_file
    user_message = f"Error: Missing config file! {_README_HINT}"


class MalformedJsonError(ConfigError):
    kind = ConfigErrorKind.malformed_json


class MissingRequiredFieldError(ConfigError):
    kind = ConfigErrorKind.missing_required_field
    user_message = f"Error: Missing required fields in config file! {_README_HINT}"

    def __init__(self, fields: tuple[str, ...]) -> None:
        self.fields = fields
        super().__init__(f"Missing required fields in config: {', '.join(fields)}")


class InvalidRangeError(ConfigError):
    """Duration window violated (minDuration/maxDuration)."""

    kind = ConfigErrorKind.invalid_range


class InvalidIntensityError(ConfigError):
    kind = ConfigErrorKind.invalid_intensity
