from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class BridgeSettings:
    config_dir: Path
    http_timeout: float
    log_level: str


def default_config_dir() -> Path:
    return Path.home() / ".config" / "deathshock"


def settings_from_env() -> BridgeSettings:
    config_dir = os.environ.get("DEATHSHOCK_CONFIG_DIR")
    return BridgeSettings(
        config_dir=Path(config_dir).expanduser() if config_dir else default_config_dir(),
        http_timeout=float(os.environ.get("DEATHSHOCK_HTTP_TIMEOUT", "10.0")),
        log_level=os.environ.get("DEATHSHOCK_LOG_LEVEL", "INFO").upper(),
    )
