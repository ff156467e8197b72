from __future__ import annotations

import json
import os
from collections.abc import Callable
from concurrent.futures import Future
from pathlib import Path
from typing import Any

import pytest

from deathshock.dispatch import DispatchEvent, DispatchHandle, Listener
from deathshock.shock_request import ShockRequest


@pytest.fixture(scope="session", autouse=True)
def _load_dotenv_for_tests() -> None:
    """Load repo .env for local runs.

    This makes DEATHSHOCK_LIVE_CONFIG_DIR available to the live integration test
    without exporting it in your shell.

    In CI, we *don't* auto-load `.env` by default, so the live test stays skipped
    unless explicitly opted-in with DEATHSHOCK_LOAD_DOTENV_FOR_TESTS=1.
    """

    if os.environ.get("CI") and os.environ.get("DEATHSHOCK_LOAD_DOTENV_FOR_TESTS") != "1":
        return

    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)


@pytest.fixture()
def config_dir(tmp_path: Path) -> Path:
    d = tmp_path / "config"
    d.mkdir()
    return d


@pytest.fixture()
def write_settings(config_dir: Path) -> Callable[..., Path]:
    """Write settings.json into `config_dir`.

    Pass `raw=` to write text verbatim, otherwise keyword fields are dumped as JSON
    on top of a minimal valid document.
    """

    def _write(*, raw: str | None = None, **fields: Any) -> Path:
        path = config_dir / "settings.json"
        if raw is not None:
            path.write_text(raw, encoding="utf-8")
            return path
        doc: dict[str, Any] = {"shockerID": "abc", "OpenShockToken": "tok", "customName": "X"}
        doc.update(fields)
        path.write_text(json.dumps(doc), encoding="utf-8")
        return path

    return _write


class RecordingNotifier:
    def __init__(self, log: list[str] | None = None) -> None:
        self.messages: list[str] = []
        self.progress_values: list[float] = []
        self.log = log if log is not None else []

    def show(self, message: str) -> None:
        self.messages.append(message)
        self.log.append(f"show:{message}")

    def progress(self, percent: float) -> None:
        self.progress_values.append(percent)
        self.log.append("progress")


class RecordingPauser:
    def __init__(self, log: list[str] | None = None) -> None:
        self.calls = 0
        self.log = log if log is not None else []

    def pause(self) -> None:
        self.calls += 1
        self.log.append("pause")


class FakeDispatcher:
    """Captures requests; tests play the outcome stream through `emit`."""

    def __init__(self) -> None:
        self.sent: list[tuple[ShockRequest, Listener]] = []

    def send(self, request: ShockRequest, listener: Listener) -> DispatchHandle:
        self.sent.append((request, listener))
        return DispatchHandle(Future())

    def emit(self, event: DispatchEvent, *, index: int = -1) -> None:
        _, listener = self.sent[index]
        listener(event)


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def pauser() -> RecordingPauser:
    return RecordingPauser()


@pytest.fixture()
def dispatcher() -> FakeDispatcher:
    return FakeDispatcher()
