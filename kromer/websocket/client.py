"""Kromer WebSocket protocol engine.

Wires one `Connection`, a `RequestCorrelator`, an `EventDispatcher` and the
subscription reconciler together behind a request/await + event surface:

    client = SocketClient(subscriptions=["transactions"])
    client.on("transaction", print)
    await client.connect()

Lifecycle: idle -> connecting -> connected -> (closing | faulted) -> idle.
A faulted engine reconnects after a fixed delay until `disconnect()`.
Requests in flight when the socket drops are not rejected early; they end
with `RequestTimedOut`. `disconnect()` rejects whatever is still pending
with `ConnectionLost`.
"""

from __future__ import annotations

import asyncio
import logging
import functools
import contextlib
from typing import Any
from collections.abc import Callable, Iterable

from kromer.state.hello import MeInfo, HelloState
from kromer.state.settings import SocketSettings
from kromer.runtime.settings import load_settings
from kromer.config.subscriptions import SUBSCRIPTION_LEVELS
from kromer.state.connection import CloseInfo, EngineState
from kromer.errors import NotConnected, ConnectFailed, ProtocolError, ConnectionLost, TransportError, MalformedFrame
from kromer.state.frames import Frame, HelloFrame, ReplyFrame, PushEventFrame, KeepaliveFrame, UnrecognizedFrame
from kromer.config.events import (
    EVENT_CLOSE,
    EVENT_ERROR,
    EVENT_READY,
    EVENT_KEEPALIVE,
    EVENT_TRANSACTION,
    EventKind,
)
from kromer.config.websocket import (
    WS_TYPE_ME,
    WS_TYPE_LOGIN,
    WS_TYPE_LOGOUT,
    WS_TYPE_ADDRESS,
    WS_TYPE_SUBSCRIBE,
    WS_TYPE_UNSUBSCRIBE,
    WS_ERROR_INVALID_RESPONSE,
    WS_TYPE_GET_SUBSCRIPTION_LEVEL,
    WS_TYPE_GET_VALID_SUBSCRIPTION_LEVELS,
)

from .options import get_ws_options
from .parser import decode_frame, build_request
from .endpoint import EndpointResolver, static_endpoint
from .reconnect import ReconnectScheduler
from .connection import ConnectFn, Connection
from .correlator import RequestCorrelator
from .dispatcher import Handler, ListenerToken, EventDispatcher
from .reconciler import ReconcileResult, reconcile_subscriptions

logger = logging.getLogger(__name__)

EnrichFn = Callable[[dict[str, Any]], Any]


def _copy_transaction(transaction: dict[str, Any]) -> dict[str, Any]:
    return dict(transaction)


def _validate_level(level: str) -> str:
    if level not in SUBSCRIPTION_LEVELS:
        raise ValueError(f"unknown subscription level '{level}'; expected one of {list(SUBSCRIPTION_LEVELS)}")
    return level


def _levels(reply: dict[str, Any], key: str) -> list[str]:
    value = reply.get(key)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ProtocolError(
            error=WS_ERROR_INVALID_RESPONSE,
            message=f"reply missing list field '{key}'",
            payload=reply,
        )
    return list(value)


def _me(reply: dict[str, Any]) -> MeInfo:
    address = reply.get("address")
    return MeInfo(
        is_guest=bool(reply.get("isGuest", address is None)),
        address=address if isinstance(address, dict) else None,
    )


class SocketClient:
    def __init__(
        self,
        *,
        subscriptions: Iterable[str] = (),
        settings: SocketSettings | None = None,
        resolve_endpoint: EndpointResolver | None = None,
        connect_fn: ConnectFn | None = None,
        enrich_push: EnrichFn | None = None,
    ) -> None:
        self._settings = settings or load_settings()
        self._desired = tuple(dict.fromkeys(_validate_level(level) for level in subscriptions))
        self._resolve_endpoint = resolve_endpoint or static_endpoint(self._settings.url)
        self._connect_fn = connect_fn
        self._enrich_push = enrich_push or _copy_transaction

        self._events = EventDispatcher()
        self._correlator = RequestCorrelator(self._send, timeout_s=self._settings.request_timeout_s)
        self._reconnect = ReconnectScheduler(
            self._reconnect_attempt,
            delay_s=self._settings.reconnect_delay_s,
            max_attempts=self._settings.reconnect_max_attempts,
        )

        self._state: EngineState = "idle"
        self._connection: Connection | None = None
        # Bumped whenever a socket is replaced; stale callbacks compare against it.
        self._generation = 0
        self._hello: HelloState | None = None
        self._handshake: asyncio.Future[HelloState] | None = None
        self._session_task: asyncio.Task | None = None
        self.last_reconciliation: ReconcileResult | None = None

        self._frame_handlers: dict[type, Callable[[Any], None]] = {
            ReplyFrame: self._handle_reply,
            HelloFrame: self._handle_hello,
            KeepaliveFrame: self._handle_keepalive,
            PushEventFrame: self._handle_push_event,
            UnrecognizedFrame: self._handle_unrecognized,
        }

    async def __aenter__(self) -> SocketClient:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.disconnect()

    @property
    def status(self) -> HelloState | None:
        return self._hello

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def desired_subscriptions(self) -> tuple[str, ...]:
        return self._desired

    @property
    def pending_requests(self) -> int:
        return self._correlator.pending_count

    def on(self, kind: EventKind, handler: Handler) -> ListenerToken:
        return self._events.on(kind, handler)

    def off(self, token: ListenerToken) -> bool:
        return self._events.off(token)

    async def connect(self) -> HelloState:
        if self._state in ("connecting", "connected", "closing"):
            raise RuntimeError(f"client already {self._state}")
        await self._reconnect.stop()
        return await self._open_session()

    async def disconnect(self) -> None:
        self._state = "closing"
        await self._reconnect.stop()
        await self._cancel_session_task()

        connection = self._connection
        if connection is not None:
            await connection.close()
        self._generation += 1
        self._connection = None
        self._fail_handshake(ConnectionLost("disconnected"))

        rejected = self._correlator.reject_all(ConnectionLost("disconnected"))
        if rejected:
            logger.info("rejected %s pending request(s) on disconnect", rejected)
        self._hello = None
        self._state = "idle"

    async def subscribe(self, level: str) -> list[str]:
        reply = await self._request(WS_TYPE_SUBSCRIBE, event=_validate_level(level))
        return _levels(reply, "subscription_level")

    async def unsubscribe(self, level: str) -> list[str]:
        reply = await self._request(WS_TYPE_UNSUBSCRIBE, event=_validate_level(level))
        return _levels(reply, "subscription_level")

    async def get_subscriptions(self) -> list[str]:
        reply = await self._request(WS_TYPE_GET_SUBSCRIPTION_LEVEL)
        return _levels(reply, "subscription_level")

    async def get_valid_subscription_levels(self) -> list[str]:
        reply = await self._request(WS_TYPE_GET_VALID_SUBSCRIPTION_LEVELS)
        return _levels(reply, "valid_subscription_levels")

    async def whoami(self) -> MeInfo:
        return _me(await self._request(WS_TYPE_ME))

    async def login(self, privatekey: str) -> MeInfo:
        if not privatekey:
            raise ValueError("privatekey must be non-empty")
        return _me(await self._request(WS_TYPE_LOGIN, privatekey=privatekey))

    async def logout(self) -> None:
        await self._request(WS_TYPE_LOGOUT)

    async def resolve_address(self, address: str) -> dict[str, Any]:
        reply = await self._request(WS_TYPE_ADDRESS, address=address)
        record = reply.get("address")
        if not isinstance(record, dict):
            raise ProtocolError(
                error=WS_ERROR_INVALID_RESPONSE,
                message="reply missing object field 'address'",
                payload=reply,
            )
        return record

    async def _request(self, msg_type: str, **fields: Any) -> dict[str, Any]:
        return await self._correlator.issue(build_request(msg_type, **fields))

    async def _send(self, frame: str) -> None:
        connection = self._connection
        if connection is None:
            raise NotConnected("socket not open")
        await connection.send(frame)

    async def _open_session(self, *, failed_state: EngineState = "idle") -> HelloState:
        self._state = "connecting"
        self._generation += 1
        generation = self._generation
        self._handshake = asyncio.get_running_loop().create_future()
        handshake = self._handshake

        connection = Connection(
            on_message=functools.partial(self._on_message, generation),
            on_close=functools.partial(self._on_close, generation),
            on_error=functools.partial(self._on_error, generation),
            connect_fn=self._connect_fn,
            ws_options=get_ws_options(self._settings),
        )
        self._connection = connection
        try:
            await connection.open(self._resolve_endpoint)
        except ConnectFailed:
            if generation == self._generation:
                self._connection = None
                self._state = failed_state
            raise

        if generation != self._generation:
            # disconnect() ran while the socket was opening.
            await connection.close()
            raise ConnectionLost("disconnected while connecting")

        try:
            return await asyncio.wait_for(asyncio.shield(handshake), timeout=self._settings.handshake_timeout_s)
        except TimeoutError:
            if generation == self._generation:
                self._generation += 1
                self._connection = None
                self._state = failed_state
            await connection.close()
            raise ConnectFailed("no hello received from server") from None

    async def _reconnect_attempt(self) -> None:
        if self._state != "faulted":
            return
        logger.info("reconnecting")
        try:
            await self._open_session(failed_state="faulted")
        except ConnectFailed as exc:
            self._events.fire(EVENT_ERROR, exc)
            raise

    def _on_message(self, generation: int, raw: str) -> None:
        # Frames still queued behind a disconnect() must not revive the session.
        if generation != self._generation or self._state == "closing":
            return
        try:
            frame = decode_frame(raw)
        except MalformedFrame as exc:
            logger.warning("dropping malformed frame: %s", exc)
            return
        self._dispatch_frame(frame)

    def _dispatch_frame(self, frame: Frame) -> None:
        handler = self._frame_handlers[type(frame)]
        try:
            handler(frame)
        except Exception:
            logger.exception("failed to handle %s", type(frame).__name__)

    def _handle_reply(self, frame: ReplyFrame) -> None:
        self._correlator.resolve(frame)

    def _handle_hello(self, frame: HelloFrame) -> None:
        self._hello = frame.hello
        self._state = "connected"
        if self._handshake is not None and not self._handshake.done():
            self._handshake.set_result(frame.hello)
        if self._session_task is not None and not self._session_task.done():
            self._session_task.cancel()
        self._session_task = asyncio.create_task(self._prepare_session(frame.hello))

    def _handle_keepalive(self, frame: KeepaliveFrame) -> None:
        self._events.fire(EVENT_KEEPALIVE, frame.server_time)

    def _handle_push_event(self, frame: PushEventFrame) -> None:
        try:
            enriched = self._enrich_push(frame.payload)
        except Exception:
            logger.warning("dropping %s event that failed enrichment", frame.event, exc_info=True)
            return
        self._events.fire(EVENT_TRANSACTION, enriched)

    def _handle_unrecognized(self, frame: UnrecognizedFrame) -> None:
        logger.info("unhandled push frame type=%s event=%s", frame.type, frame.event)

    async def _prepare_session(self, hello: HelloState) -> None:
        try:
            actual = await self.get_subscriptions()
        except Exception as exc:
            logger.warning("could not read subscriptions; skipping reconciliation: %s", exc)
        else:
            self.last_reconciliation = await reconcile_subscriptions(
                self._desired,
                actual,
                subscribe=self._add_subscription,
                unsubscribe=self._remove_subscription,
            )
        self._events.fire(EVENT_READY, hello)

    # Levels reported by the server are sent back as-is, known or not.
    async def _add_subscription(self, level: str) -> None:
        await self._request(WS_TYPE_SUBSCRIBE, event=level)

    async def _remove_subscription(self, level: str) -> None:
        await self._request(WS_TYPE_UNSUBSCRIBE, event=level)

    def _on_close(self, generation: int, info: CloseInfo) -> None:
        if generation != self._generation:
            return
        self._transport_down(EVENT_CLOSE, info, ConnectionLost(info.reason or "socket closed"))

    def _on_error(self, generation: int, exc: TransportError) -> None:
        if generation != self._generation:
            return
        self._transport_down(EVENT_ERROR, exc, exc)

    def _transport_down(self, kind: EventKind, payload: Any, exc: TransportError) -> None:
        closing = self._state == "closing"
        self._connection = None
        if not closing:
            self._state = "faulted"
        if self._session_task is not None and not self._session_task.done():
            self._session_task.cancel()
        self._fail_handshake(exc)
        self._events.fire(kind, payload)

        if closing or not self._settings.reconnect_enabled:
            if not closing:
                self._state = "idle"
            return
        if self._reconnect.schedule():
            logger.info("connection lost; reconnecting in %.1fs", self._settings.reconnect_delay_s)

    def _fail_handshake(self, exc: TransportError) -> None:
        handshake = self._handshake
        if handshake is not None and not handshake.done():
            handshake.set_exception(exc)
            # Nobody may be awaiting it.
            handshake.exception()

    async def _cancel_session_task(self) -> None:
        task, self._session_task = self._session_task, None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task


__all__ = ["EnrichFn", "SocketClient"]
