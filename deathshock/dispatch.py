from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, wait
from dataclasses import dataclass
from typing import Literal, Protocol

import httpx

from deathshock.shock_request import ShockRequest

logger = logging.getLogger(__name__)

DispatchEventType = Literal["progress", "response", "cancelled", "error"]

_TERMINAL: frozenset[str] = frozenset({"response", "cancelled", "error"})


@dataclass(frozen=True, slots=True)
class DispatchEvent:
    """One item of a request's outcome stream.

    `progress` may occur any number of times; exactly one of `response`,
    `cancelled` or `error` ends the stream.
    """

    type: DispatchEventType
    percent: float | None = None
    status_code: int | None = None
    text: str | None = None

    @property
    def terminal(self) -> bool:
        return self.type in _TERMINAL

    @staticmethod
    def for_progress(percent: float) -> "DispatchEvent":
        return DispatchEvent(type="progress", percent=percent)

    @staticmethod
    def for_response(*, status_code: int, text: str | None) -> "DispatchEvent":
        return DispatchEvent(type="response", status_code=status_code, text=text)

    @staticmethod
    def for_cancelled() -> "DispatchEvent":
        return DispatchEvent(type="cancelled")

    @staticmethod
    def for_error(text: str | None) -> "DispatchEvent":
        return DispatchEvent(type="error", text=text)


Listener = Callable[[DispatchEvent], None]


class DispatchHandle:
    """Host-side view of one in-flight request."""

    def __init__(self, future: Future[None]) -> None:
        self._future = future

    def done(self) -> bool:
        return self._future.done()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the request finished (for hosts and tests, never the core).

        Returns False on timeout. The outcome itself is delivered to the listener.
        """

        done, _ = wait([self._future], timeout=timeout)
        return bool(done)

    def cancel(self) -> bool:
        return self._future.cancel()


class Dispatcher(Protocol):
    def send(self, request: ShockRequest, listener: Listener) -> DispatchHandle:  # pragma: no cover
        ...


class _Delivery:
    """Forwards events to a listener and guarantees a single terminal event."""

    def __init__(self, listener: Listener) -> None:
        self._listener = listener
        self._lock = threading.Lock()
        self._finished = False

    def emit(self, event: DispatchEvent) -> None:
        with self._lock:
            if self._finished:
                return
            if event.terminal:
                self._finished = True
        try:
            self._listener(event)
        except Exception:
            logger.exception("Dispatch listener failed on %s event", event.type)

    def on_future_done(self, future: Future[None]) -> None:
        # Covers cancellation before the coroutine got a chance to run, and
        # anything the coroutine let escape.
        if future.cancelled():
            self.emit(DispatchEvent.for_cancelled())
        elif future.exception() is not None:
            self.emit(DispatchEvent.for_error(None))


def _content_length(headers: httpx.Headers) -> int:
    """Declared body size, or 0 when absent or unparseable."""

    try:
        return max(0, int(headers.get("Content-Length") or 0))
    except ValueError:
        return 0


def _decode(body: bytes, encoding: str | None) -> str | None:
    try:
        return body.decode(encoding or "utf-8")
    except (LookupError, UnicodeDecodeError):
        return None


class HttpxDispatcher:
    """Sends shock requests with `httpx.AsyncClient` without blocking the caller.

    With no `loop`, the dispatcher runs its own event loop on a daemon thread and
    `close()` tears it down. With a `loop` (e.g. the bridge server's), requests run
    there and the owner must `await aclose()`.

    Timeouts are the httpx client's; nothing is retried.
    """

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._transport = transport
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None
        self._thread: threading.Thread | None = None

        if loop is None:
            loop = asyncio.new_event_loop()
            self._thread = threading.Thread(target=loop.run_forever, name="deathshock-dispatch", daemon=True)
            self._thread.start()
        self._loop = loop

    @property
    def owns_loop(self) -> bool:
        return self._thread is not None

    def send(self, request: ShockRequest, listener: Listener) -> DispatchHandle:
        delivery = _Delivery(listener)
        future = asyncio.run_coroutine_threadsafe(self._run(request, delivery), self._loop)
        future.add_done_callback(delivery.on_future_done)
        return DispatchHandle(future)

    def _get_client(self) -> httpx.AsyncClient:
        # Created on the dispatch loop; httpx clients must not hop between loops.
        if self._client is None:
            self._client = httpx.AsyncClient(transport=self._transport, timeout=self._timeout)
        return self._client

    async def _run(self, request: ShockRequest, delivery: _Delivery) -> None:
        try:
            client = self._get_client()
            response = await client.send(request.to_httpx(), stream=True)
            try:
                total = _content_length(response.headers)
                chunks: list[bytes] = []
                async for chunk in response.aiter_bytes():
                    chunks.append(chunk)
                    if total > 0:
                        percent = min(100.0, response.num_bytes_downloaded * 100.0 / total)
                        delivery.emit(DispatchEvent.for_progress(percent))
                text = _decode(b"".join(chunks), response.encoding)
            finally:
                await response.aclose()
        except asyncio.CancelledError:
            logger.info("Shock request to %s was cancelled", request.url)
            delivery.emit(DispatchEvent.for_cancelled())
            raise
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Shock request to %s failed: %s", request.url, e)
            delivery.emit(DispatchEvent.for_error(str(e) or None))
            return
        except Exception:
            # e.g. a token httpx cannot encode as a header value.
            logger.exception("Shock request to %s could not be sent", request.url)
            delivery.emit(DispatchEvent.for_error(None))
            return

        logger.info("Shock request to %s finished with HTTP %d", request.url, response.status_code)
        delivery.emit(DispatchEvent.for_response(status_code=response.status_code, text=text))

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def close(self) -> None:
        """Close the client and stop the private loop. Only for an owned loop."""

        if not self.owns_loop:
            raise RuntimeError("Dispatcher runs on a shared loop; use `await aclose()` instead")

        asyncio.run_coroutine_threadsafe(self.aclose(), self._loop).result(timeout=5)
        self._loop.call_soon_threadsafe(self._loop.stop)
        assert self._thread is not None
        self._thread.join(timeout=5)
        self._loop.close()
