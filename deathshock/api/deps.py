from __future__ import annotations

import asyncio

from deathshock.config.loader import ConfigLoader
from deathshock.controller import TriggerController
from deathshock.dispatch import HttpxDispatcher
from deathshock.settings import BridgeSettings
from deathshock.websocket_hub import HubNotifier, hub

_CONTROLLER: TriggerController | None = None
_DISPATCHER: HttpxDispatcher | None = None


def init_controller(*, settings: BridgeSettings, loop: asyncio.AbstractEventLoop) -> TriggerController:
    """Build the bridge controller on the server loop.

    Safe to call multiple times; subsequent calls return the existing controller.
    """

    global _CONTROLLER, _DISPATCHER
    if _CONTROLLER is None:
        _DISPATCHER = HttpxDispatcher(loop=loop, timeout=settings.http_timeout)
        notifier = HubNotifier(hub=hub, loop=loop)
        _CONTROLLER = TriggerController(
            loader=ConfigLoader(settings.config_dir),
            dispatcher=_DISPATCHER,
            notifier=notifier,
            pauser=notifier,
        )
    return _CONTROLLER


async def shutdown_controller() -> None:
    global _CONTROLLER, _DISPATCHER
    if _DISPATCHER is not None:
        await _DISPATCHER.aclose()
    _CONTROLLER = None
    _DISPATCHER = None


def get_controller() -> TriggerController:
    if _CONTROLLER is None:
        raise RuntimeError("Controller not initialized. Call init_controller() at startup.")
    return _CONTROLLER
