"""Frame encoding/decoding for the Kromer WebSocket protocol."""

from __future__ import annotations

from typing import Any
from datetime import datetime

import orjson

from kromer.errors import MalformedFrame
from kromer.state.hello import HelloState
from kromer.state.frames import (
    Frame,
    HelloFrame,
    ReplyFrame,
    PushEventFrame,
    KeepaliveFrame,
    UnrecognizedFrame,
)
from kromer.config.websocket import (
    WS_KEY_ID,
    WS_KEY_OK,
    WS_KEY_TYPE,
    WS_KEY_EVENT,
    WS_TYPE_EVENT,
    WS_TYPE_HELLO,
    WS_KEY_SERVER_TIME,
    WS_KEY_TRANSACTION,
    WS_EVENT_TRANSACTION,
    WS_TYPE_KEEPALIVE_ALIASES,
)


def _parse_time(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        return None


def _dict_or_empty(value: Any) -> dict[str, Any]:
    return dict(value) if isinstance(value, dict) else {}


def parse_hello(msg: dict[str, Any]) -> HelloState:
    return HelloState(
        server_time=_parse_time(msg.get(WS_KEY_SERVER_TIME)),
        motd=str(msg.get("motd") or ""),
        motd_set=msg.get("motd_set") if isinstance(msg.get("motd_set"), str) else None,
        public_url=str(msg.get("public_url") or ""),
        public_ws_url=str(msg.get("public_ws_url") or ""),
        mining_enabled=bool(msg.get("mining_enabled", False)),
        transactions_enabled=bool(msg.get("transactions_enabled", False)),
        debug_mode=bool(msg.get("debug_mode", False)),
        notice=str(msg.get("notice") or ""),
        package=_dict_or_empty(msg.get("package")),
        constants=_dict_or_empty(msg.get("constants")),
        currency=_dict_or_empty(msg.get("currency")),
        raw=msg,
    )


def _is_request_id(value: Any) -> bool:
    # bool is an int subclass; a literal `true` is never a request id.
    return isinstance(value, int) and not isinstance(value, bool)


def _decode_push(msg: dict[str, Any], raw: str) -> Frame:
    msg_type = msg.get(WS_KEY_TYPE)
    if not isinstance(msg_type, str) or not msg_type.strip():
        raise MalformedFrame("frame missing non-empty 'type'", raw)
    msg_type = msg_type.strip()

    if msg_type == WS_TYPE_HELLO:
        return HelloFrame(hello=parse_hello(msg))

    if msg_type in WS_TYPE_KEEPALIVE_ALIASES:
        server_time = _parse_time(msg.get(WS_KEY_SERVER_TIME))
        if server_time is None:
            raise MalformedFrame("keepalive missing valid 'server_time'", raw)
        return KeepaliveFrame(server_time=server_time)

    event = msg.get(WS_KEY_EVENT)
    event = event if isinstance(event, str) else None
    if msg_type == WS_TYPE_EVENT and event == WS_EVENT_TRANSACTION:
        payload = msg.get(WS_KEY_TRANSACTION)
        if not isinstance(payload, dict):
            raise MalformedFrame("transaction event missing 'transaction' object", raw)
        return PushEventFrame(event=event, payload=payload)

    return UnrecognizedFrame(type=msg_type, event=event, body=msg)


def decode_frame(raw: str | bytes) -> Frame:
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    try:
        msg = orjson.loads(text)
    except orjson.JSONDecodeError as exc:
        raise MalformedFrame(f"invalid JSON: {exc}", text) from exc

    if not isinstance(msg, dict):
        raise MalformedFrame("frame must be a JSON object", text)

    request_id = msg.get(WS_KEY_ID)
    if request_id is not None:
        if not _is_request_id(request_id):
            raise MalformedFrame("frame 'id' must be an integer", text)
        return ReplyFrame(id=request_id, ok=msg.get(WS_KEY_OK) is True, body=msg)

    return _decode_push(msg, text)


def build_request(msg_type: str, **fields: Any) -> dict[str, Any]:
    request = {key: value for key, value in fields.items() if value is not None}
    request[WS_KEY_TYPE] = msg_type
    return request


def encode_frame(frame: dict[str, Any]) -> str:
    return orjson.dumps(frame).decode("utf-8")


__all__ = ["build_request", "decode_frame", "encode_frame", "parse_hello"]
