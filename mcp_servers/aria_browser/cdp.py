"""
Asyncio CDP connection over a page target's WebSocket.

One reader task per connection routes command responses to waiting futures (by
message id) and CDP events to registered listeners. Listeners run on the event
loop and must not block.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

import websockets

from .http_client import HttpClientError

logger = logging.getLogger("mcp.aria_browser.cdp")

EventListener = Callable[[dict[str, Any]], None]


class CdpConnection:
    """Low-level CDP WebSocket connection."""

    def __init__(self, ws: Any, *, ws_url: str, timeout: float = 10.0) -> None:
        self.ws = ws
        self.ws_url = ws_url
        self.timeout = timeout
        self._next_id = 1
        self._pending: dict[int, asyncio.Future] = {}
        self._listeners: dict[str, list[EventListener]] = defaultdict(list)
        self._close_callbacks: list[Callable[[], None]] = []
        self._reader: asyncio.Task | None = None
        self._closed = False

    @classmethod
    async def connect(cls, ws_url: str, *, timeout: float = 10.0) -> CdpConnection:
        try:
            ws = await asyncio.wait_for(
                websockets.connect(ws_url, max_size=None, ping_interval=None),
                timeout=timeout,
            )
        except (OSError, asyncio.TimeoutError, websockets.exceptions.WebSocketException) as exc:
            raise HttpClientError(f"CDP connect failed ({ws_url}): {exc}") from exc
        conn = cls(ws, ws_url=ws_url, timeout=timeout)
        conn._reader = asyncio.create_task(conn._read_loop())
        return conn

    @property
    def closed(self) -> bool:
        return self._closed

    def on(self, method: str, listener: EventListener) -> None:
        self._listeners[method].append(listener)

    def on_close(self, callback: Callable[[], None]) -> None:
        self._close_callbacks.append(callback)

    async def send(self, method: str, params: dict[str, Any] | None = None, *, timeout: float | None = None) -> dict[str, Any]:
        """Send CDP command and wait for response."""
        if self._closed:
            raise HttpClientError(f"CDP connection closed ({method})")

        msg_id = self._next_id
        self._next_id += 1
        msg: dict[str, Any] = {"id": msg_id, "method": method}
        if params:
            msg["params"] = params

        fut: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[msg_id] = fut
        try:
            try:
                await self.ws.send(json.dumps(msg))
            except websockets.exceptions.WebSocketException as exc:
                raise HttpClientError(f"CDP send failed ({method}): {exc}") from exc
            try:
                return await asyncio.wait_for(fut, timeout=self.timeout if timeout is None else timeout)
            except asyncio.TimeoutError as exc:
                raise HttpClientError(f"CDP response timed out ({method})") from exc
        finally:
            self._pending.pop(msg_id, None)

    async def _read_loop(self) -> None:
        try:
            async for raw in self.ws:
                try:
                    data = json.loads(raw)
                except json.JSONDecodeError:
                    continue
                if not isinstance(data, dict):
                    continue
                if "id" in data:
                    self._resolve(data)
                elif isinstance(data.get("method"), str):
                    self._emit(data)
        except websockets.exceptions.ConnectionClosed:
            pass
        finally:
            self._mark_closed()

    def _resolve(self, data: dict[str, Any]) -> None:
        fut = self._pending.get(data.get("id"))  # type: ignore[arg-type]
        if fut is None or fut.done():
            return
        if "error" in data:
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            fut.set_exception(HttpClientError(str(message)))
        else:
            result = data.get("result")
            fut.set_result(result if isinstance(result, dict) else {})

    def _emit(self, event: dict[str, Any]) -> None:
        params = event.get("params")
        params = params if isinstance(params, dict) else {}
        for listener in list(self._listeners.get(event["method"], ())):
            try:
                listener(params)
            except Exception:
                logger.exception("cdp_listener_failed method=%s", event["method"])

    def _mark_closed(self) -> None:
        if self._closed:
            return
        self._closed = True
        for fut in self._pending.values():
            if not fut.done():
                fut.set_exception(HttpClientError("CDP connection closed"))
        self._pending.clear()
        for callback in self._close_callbacks:
            try:
                callback()
            except Exception:
                logger.exception("cdp_close_callback_failed")

    async def close(self) -> None:
        """Close the WebSocket connection and stop the reader."""
        with contextlib.suppress(Exception):
            await self.ws.close()
        if self._reader is not None and not self._reader.done():
            self._reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reader
        self._mark_closed()


__all__ = ["CdpConnection", "EventListener"]
