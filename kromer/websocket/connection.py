"""Lifecycle of exactly one physical WebSocket."""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import Any
from collections.abc import Callable, Awaitable

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedError

from kromer.state.connection import CloseInfo, ConnectionState
from kromer.errors import NotConnected, ConnectFailed, ConnectionLost, TransportError
from kromer.config.websocket import WS_CLOSE_CLIENT_REQUEST_CODE, WS_CLOSE_CLIENT_REQUEST_REASON

from .endpoint import EndpointResolver

logger = logging.getLogger(__name__)

ConnectFn = Callable[..., Awaitable[Any]]
MessageCallback = Callable[[str], None]
CloseCallback = Callable[[CloseInfo], None]
ErrorCallback = Callable[[TransportError], None]


class Connection:
    """Own one socket: open it, pump its frames, send, close.

    Exactly one of `on_close`/`on_error` is invoked per physical socket, from
    the reader task, after the last `on_message`. A clean close (either side)
    reports `on_close`; anything else reports `on_error`.
    """

    def __init__(
        self,
        *,
        on_message: MessageCallback,
        on_close: CloseCallback,
        on_error: ErrorCallback,
        connect_fn: ConnectFn | None = None,
        ws_options: dict[str, Any] | None = None,
    ) -> None:
        self._on_message = on_message
        self._on_close = on_close
        self._on_error = on_error
        self._connect_fn = connect_fn or websockets.connect
        self._ws_options = dict(ws_options or {})
        self._ws: Any = None
        self._reader: asyncio.Task | None = None
        self._state: ConnectionState = "disconnected"
        self.url: str | None = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state == "connected"

    async def open(self, resolve_endpoint: EndpointResolver) -> None:
        if self._state != "disconnected":
            raise ConnectFailed(f"connection already {self._state}")
        self._state = "connecting"
        try:
            endpoint = await resolve_endpoint()
            self.url = endpoint.url
            self._ws = await self._connect_fn(endpoint.url, **self._ws_options)
        except asyncio.CancelledError:
            self._state = "disconnected"
            raise
        except Exception as exc:
            self._state = "disconnected"
            self._ws = None
            raise ConnectFailed(f"could not open socket: {exc}") from exc

        self._state = "connected"
        self._reader = asyncio.create_task(self._read_loop(self._ws))
        logger.info("WebSocket opened url=%s", self.url)

    async def send(self, frame: str) -> None:
        ws = self._ws
        if ws is None or self._state != "connected":
            raise NotConnected("socket not open")
        try:
            await ws.send(frame)
        except ConnectionClosed as exc:
            raise ConnectionLost(f"socket closed while sending: {exc}") from exc
        except Exception as exc:
            raise ConnectionLost(f"send failed: {exc}") from exc

    async def close(
        self,
        *,
        code: int = WS_CLOSE_CLIENT_REQUEST_CODE,
        reason: str = WS_CLOSE_CLIENT_REQUEST_REASON,
    ) -> None:
        ws, reader = self._ws, self._reader
        if ws is None:
            return
        with contextlib.suppress(Exception):
            await ws.close(code=code, reason=reason)
        if reader is not None and reader is not asyncio.current_task():
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await reader
        self._ws = None
        self._reader = None
        self._state = "disconnected"

    async def _read_loop(self, ws: Any) -> None:
        try:
            async for raw in ws:
                if isinstance(raw, bytes):
                    raw = raw.decode("utf-8", errors="replace")
                self._on_message(raw)
        except asyncio.CancelledError:
            self._state = "disconnected"
            raise
        except ConnectionClosedError as exc:
            self._state = "disconnected"
            logger.info("WebSocket closed abnormally: %s", exc)
            self._on_error(ConnectionLost(str(exc)))
            return
        except Exception as exc:
            self._state = "disconnected"
            logger.info("WebSocket failed: %s", exc)
            self._on_error(ConnectionLost(str(exc) or type(exc).__name__))
            return

        self._state = "disconnected"
        info = CloseInfo(code=getattr(ws, "close_code", None), reason=getattr(ws, "close_reason", None) or "")
        logger.info("WebSocket closed code=%s reason=%s", info.code, info.reason)
        self._on_close(info)


__all__ = ["Connection", "ConnectFn"]
