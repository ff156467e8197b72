from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Future

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class PopupWebSocketHub:
    """In-process WebSocket fan-out to the game-side mod.

    Every connected client gets every frame; there is one player per bridge.
    Frames are JSON dicts with a `type` of `pause`, `popup` or `progress`.
    """

    def __init__(self) -> None:
        self._conns: set[WebSocket] = set()
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> None:
        # Accept under the lock so a publish racing the handshake still sees this socket.
        async with self._lock:
            await websocket.accept()
            self._conns.add(websocket)

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._conns.discard(websocket)

    async def publish(self, frame: dict[str, object]) -> int:
        """Send `frame` to every client concurrently. Returns how many received it."""

        async with self._lock:
            targets = tuple(self._conns)

        results = await asyncio.gather(*(ws.send_json(frame) for ws in targets), return_exceptions=True)
        stale = [ws for ws, res in zip(targets, results) if isinstance(res, Exception)]
        if stale:
            logger.info("Dropping %d closed popup connection(s)", len(stale))
            async with self._lock:
                self._conns.difference_update(stale)
        return len(targets) - len(stale)


hub = PopupWebSocketHub()


class HubNotifier:
    """Notifier and pauser that turn controller calls into hub frames.

    Callable from any thread; frames are published on `loop` in call order.
    """

    def __init__(self, *, hub: PopupWebSocketHub, loop: asyncio.AbstractEventLoop) -> None:
        self.hub = hub
        self.loop = loop
        self._order = asyncio.Lock()

    async def _publish(self, payload: dict[str, object]) -> None:
        async with self._order:
            delivered = await self.hub.publish(payload)
        if not delivered:
            logger.debug("No popup client connected for %s frame", payload["type"])

    def _submit(self, payload: dict[str, object]) -> Future[None]:
        logger.debug("Publishing %s frame", payload["type"])
        return asyncio.run_coroutine_threadsafe(self._publish(payload), self.loop)

    def pause(self) -> None:
        self._submit({"type": "pause"})

    def show(self, message: str) -> None:
        self._submit({"type": "popup", "message": message})

    def progress(self, percent: float) -> None:
        self._submit({"type": "progress", "percent": percent})
