from __future__ import annotations

import logging
import random
import threading
from collections import OrderedDict
from functools import partial
from typing import Protocol
from uuid import uuid4

from deathshock.config.errors import ConfigError, ConfigErrorKind
from deathshock.config.models import ShockConfig
from deathshock.dispatch import DispatchEvent, DispatchHandle, Dispatcher
from deathshock.fsm import TriggerFSM, TriggerPhase
from deathshock.shock_request import ShockRequest, build_request

logger = logging.getLogger(__name__)

SHOCKING_TEXT = "Shocking..."
NO_RESPONSE_TEXT = "No response from the server"
CANCELLED_TEXT = "Request was cancelled."
GENERIC_ERROR_TEXT = ConfigError.user_message


class Notifier(Protocol):
    """Popup sink on the game side."""

    def show(self, message: str) -> None:  # pragma: no cover
        ...

    def progress(self, percent: float) -> None:  # pragma: no cover
        ...


class Pauser(Protocol):
    def pause(self) -> None:  # pragma: no cover
        ...


class ConfigSource(Protocol):
    def load(self) -> ShockConfig:  # pragma: no cover
        ...


def in_progress_message(request: ShockRequest) -> str:
    return f"Duration: {request.duration_ms // 1000}s     Intensity: {request.intensity}"


class TriggerHandle:
    """Tracks one death trigger from pause to its terminal popup."""

    def __init__(self, trigger_id: str) -> None:
        self.trigger_id = trigger_id
        self.fsm = TriggerFSM()

        self.intensity: int | None = None
        self.duration_ms: int | None = None
        self.status_code: int | None = None
        self.error_kind: ConfigErrorKind | None = None
        self.message: str | None = None
        self.dispatch: DispatchHandle | None = None

        self._lock = threading.Lock()
        self._finished = threading.Event()

    @property
    def state(self) -> TriggerPhase:
        return self.fsm.phase

    @property
    def terminal(self) -> bool:
        return self.fsm.terminal

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the trigger reached a terminal state. Returns False on timeout."""

        return self._finished.wait(timeout)

    def advance(self, event: str) -> bool:
        """Apply an FSM event unless the trigger already finished."""

        with self._lock:
            if self.fsm.terminal:
                return False
            self.fsm.send(event)
            if self.fsm.terminal:
                self._finished.set()
            return True


class TriggerController:
    """Runs pause -> load -> build -> dispatch for each death event.

    Triggers are independent: each gets its own handle, FSM and listener, and
    overlapping triggers are all allowed to run to completion.
    """

    def __init__(
        self,
        *,
        loader: ConfigSource,
        dispatcher: Dispatcher,
        notifier: Notifier,
        pauser: Pauser,
        rng: random.Random | None = None,
        history: int = 64,
    ) -> None:
        self.loader = loader
        self.dispatcher = dispatcher
        self.notifier = notifier
        self.pauser = pauser
        self.rng = rng or random.SystemRandom()

        self._history = history
        self._recent: OrderedDict[str, TriggerHandle] = OrderedDict()
        self._recent_lock = threading.Lock()

    def get(self, trigger_id: str) -> TriggerHandle | None:
        with self._recent_lock:
            return self._recent.get(trigger_id)

    def _remember(self, handle: TriggerHandle) -> None:
        with self._recent_lock:
            self._recent[handle.trigger_id] = handle
            while len(self._recent) > self._history:
                self._recent.popitem(last=False)

    def _show(self, message: str) -> None:
        try:
            self.notifier.show(message)
        except Exception:
            logger.exception("Notifier failed to show popup")

    def _finish(self, handle: TriggerHandle, event: str, message: str) -> None:
        if not handle.advance(event):
            logger.debug("Trigger %s already %s; ignoring %s", handle.trigger_id, handle.state, event)
            return
        handle.message = message
        self._show(message)

    def trigger(self) -> TriggerHandle:
        """Handle one death event. Never raises and never waits on the network."""

        handle = TriggerHandle(trigger_id=uuid4().hex)
        self._remember(handle)

        try:
            self.pauser.pause()
        except Exception:
            logger.exception("Failed to pause the game for trigger %s", handle.trigger_id)
        self._show(SHOCKING_TEXT)

        handle.advance("load")
        try:
            config = self.loader.load()
        except ConfigError as e:
            logger.error("Trigger %s: config rejected (%s): %s", handle.trigger_id, e.kind.value, e)
            handle.error_kind = e.kind
            self._finish(handle, "fail", e.user_message)
            return handle
        except Exception:
            logger.exception("Trigger %s: unexpected error while loading config", handle.trigger_id)
            self._finish(handle, "fail", GENERIC_ERROR_TEXT)
            return handle

        handle.advance("config_loaded")
        try:
            request = build_request(config, rng=self.rng)
        except Exception:
            logger.exception("Trigger %s: unexpected error while building request", handle.trigger_id)
            self._finish(handle, "fail", GENERIC_ERROR_TEXT)
            return handle

        handle.intensity = request.intensity
        handle.duration_ms = request.duration_ms
        handle.advance("request_built")

        # Shown before sending so it always precedes the terminal popup.
        self._show(in_progress_message(request))
        logger.info(
            "Trigger %s: sending shock intensity=%d duration=%dms to %s",
            handle.trigger_id,
            request.intensity,
            request.duration_ms,
            request.url,
        )

        try:
            handle.dispatch = self.dispatcher.send(request, partial(self._on_event, handle))
        except Exception:
            logger.exception("Trigger %s: dispatcher rejected the request", handle.trigger_id)
            self._finish(handle, "fail", NO_RESPONSE_TEXT)
        return handle

    def _on_event(self, handle: TriggerHandle, event: DispatchEvent) -> None:
        if event.type == "progress":
            percent = event.percent or 0.0
            logger.info("Request in progress... Download progress: %.0f%%", percent)
            if not handle.terminal:
                try:
                    self.notifier.progress(percent)
                except Exception:
                    logger.exception("Notifier failed to show progress")
            return

        if event.type == "response":
            handle.status_code = event.status_code
            self._finish(handle, "respond", event.text or NO_RESPONSE_TEXT)
        elif event.type == "cancelled":
            self._finish(handle, "cancel", CANCELLED_TEXT)
        elif event.type == "error":
            self._finish(handle, "fail", event.text or NO_RESPONSE_TEXT)
