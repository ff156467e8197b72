from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from deathshock.config.errors import (
    InvalidIntensityError,
    InvalidRangeError,
    MalformedJsonError,
    MissingFileError,
    MissingRequiredFieldError,
)
from deathshock.config.models import (
    DEFAULT_ENDPOINT_DOMAIN,
    DURATION_CEILING_MS,
    DURATION_FLOOR_MS,
    INTENSITY_CEILING,
    INTENSITY_FLOOR,
    DurationWindow,
    IntensityWindow,
    ShockConfig,
)

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "settings.json"
README_FILENAME = "readme.txt"

REQUIRED_FIELDS: tuple[str, ...] = ("shockerID", "OpenShockToken", "customName")


def readme_text() -> str:
    """Documentation shipped next to this module and copied into the config dir."""

    return (Path(__file__).resolve().parent / README_FILENAME).read_text(encoding="utf-8")


def write_readme(config_dir: Path) -> bool:
    """Write readme.txt into `config_dir`, overwriting any previous copy.

    Returns False (after logging) if the file could not be written.
    """

    path = config_dir / README_FILENAME
    try:
        config_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(readme_text(), encoding="utf-8")
    except OSError as e:
        logger.error("Failed to write %s: %s", path, e)
        return False
    return True


def _missing_required(raw: dict[str, Any]) -> tuple[str, ...]:
    return tuple(k for k in REQUIRED_FIELDS if not isinstance(raw.get(k), str) or not raw[k])


class ConfigLoader:
    """Reads and validates `<config_dir>/settings.json`.

    The file is read again on every `load()` so edits apply without a restart.
    """

    def __init__(self, config_dir: Path) -> None:
        self.config_dir = Path(config_dir)

    @property
    def settings_path(self) -> Path:
        return self.config_dir / SETTINGS_FILENAME

    def load(self) -> ShockConfig:
        write_readme(self.config_dir)

        raw = self._read_json()

        missing = _missing_required(raw)
        if missing:
            logger.error("Missing required fields in JSON configuration: %s", ", ".join(missing))
            raise MissingRequiredFieldError(missing)

        try:
            duration = DurationWindow.model_validate(raw)
        except ValidationError as e:
            min_d = raw.get("minDuration", DURATION_FLOOR_MS)
            max_d = raw.get("maxDuration", DURATION_CEILING_MS)
            logger.error(
                "Invalid duration range in config: minDuration=%r, maxDuration=%r (allowed %d..%d)",
                min_d,
                max_d,
                DURATION_FLOOR_MS,
                DURATION_CEILING_MS,
            )
            raise InvalidRangeError(
                f"Invalid duration range: minDuration={min_d!r}, maxDuration={max_d!r} "
                f"({e.error_count()} problem(s))"
            ) from e

        try:
            intensity = IntensityWindow.model_validate(raw)
        except ValidationError as e:
            min_i = raw.get("minIntensity", INTENSITY_FLOOR)
            max_i = raw.get("maxIntensity", INTENSITY_CEILING)
            logger.error(
                "Invalid intensity range in config: minIntensity=%r, maxIntensity=%r (allowed %d..%d)",
                min_i,
                max_i,
                INTENSITY_FLOOR,
                INTENSITY_CEILING,
            )
            raise InvalidIntensityError(
                f"Invalid intensity range: minIntensity={min_i!r}, maxIntensity={max_i!r} "
                f"({e.error_count()} problem(s))"
            ) from e

        domain = raw.get("endpointDomain")
        if not isinstance(domain, str) or not domain:
            domain = DEFAULT_ENDPOINT_DOMAIN

        return ShockConfig(
            shocker_id=raw["shockerID"],
            api_token=raw["OpenShockToken"],
            custom_name=raw["customName"],
            duration=duration,
            intensity=intensity,
            endpoint_domain=domain,
        )

    def _read_json(self) -> dict[str, Any]:
        path = self.settings_path
        try:
            payload = path.read_bytes()
        except OSError as e:
            logger.error("Failed to open %s in config directory: %s", SETTINGS_FILENAME, e)
            raise MissingFileError(f"Cannot open {path}") from e

        try:
            data = json.loads(payload)
        except ValueError as e:
            # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors.
            logger.error("Error parsing JSON file: %s", e)
            raise MalformedJsonError(f"Invalid JSON in {path}: {e}") from e

        if not isinstance(data, dict):
            logger.error("Error parsing JSON file: top-level value is %s, not an object", type(data).__name__)
            raise MalformedJsonError(f"{path} must contain a JSON object")
        return data
