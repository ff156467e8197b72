from __future__ import annotations

import os
from pathlib import Path

import pytest

from conftest import RecordingNotifier, RecordingPauser
from deathshock.config import ConfigLoader
from deathshock.controller import TriggerController
from deathshock.dispatch import HttpxDispatcher
from deathshock.fsm import TriggerPhase


def test_live_trigger_env_gated() -> None:
    """Integration test: send one real shock through the OpenShock API.

    Required env vars:
      - DEATHSHOCK_LIVE_CONFIG_DIR=<dir containing a real settings.json>

    Use a low intensity/duration window in that settings.json.
    """

    live_dir = os.environ.get("DEATHSHOCK_LIVE_CONFIG_DIR")
    if not live_dir:
        pytest.skip("DEATHSHOCK_LIVE_CONFIG_DIR not set")

    dispatcher = HttpxDispatcher(timeout=15.0)
    notifier = RecordingNotifier()
    try:
        controller = TriggerController(
            loader=ConfigLoader(Path(live_dir)),
            dispatcher=dispatcher,
            notifier=notifier,
            pauser=RecordingPauser(),
        )
        handle = controller.trigger()
        assert handle.wait(30)
    finally:
        dispatcher.close()

    assert handle.state in {TriggerPhase.succeeded, TriggerPhase.failed}
    assert notifier.messages[0] == "Shocking..."
    assert notifier.messages[1].startswith("Duration: ")
    assert handle.message
