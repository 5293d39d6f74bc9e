"""WebSocket protocol configuration and constants (env-resolved)."""

from __future__ import annotations

import os

_DISABLED_VALUES = {"0", "none", "null", "disabled", "disable", "off"}
_ENABLED_VALUES = {"1", "true", "yes", "on", "enabled", "enable"}


def _env_float(name: str, default: float, *, allow_disable: bool = False) -> float | None:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    if allow_disable and raw.lower() in _DISABLED_VALUES:
        return None
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    try:
        value = int(raw) if raw else default
    except ValueError:
        return default
    return max(0, value)


def _env_bool(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    if raw in _ENABLED_VALUES:
        return True
    if raw in _DISABLED_VALUES or raw in {"false", "no"}:
        return False
    return default


# Endpoint used when the caller does not supply a resolver.
WS_DEFAULT_URL = (os.getenv("KROMER_WS_URL") or "wss://kromer.reconnected.cc/api/krist/ws").strip()

# Envelope keys
WS_KEY_ID = "id"
WS_KEY_TYPE = "type"
WS_KEY_OK = "ok"
WS_KEY_ERROR = "error"
WS_KEY_MESSAGE = "message"
WS_KEY_EVENT = "event"
WS_KEY_SERVER_TIME = "server_time"
WS_KEY_TRANSACTION = "transaction"

# Push frame types
WS_TYPE_HELLO = "hello"
WS_TYPE_KEEPALIVE_ALIASES = frozenset({"keepalive", "keep_alive"})
WS_TYPE_EVENT = "event"
WS_EVENT_TRANSACTION = "transaction"

# Correlated request types
WS_TYPE_SUBSCRIBE = "subscribe"
WS_TYPE_UNSUBSCRIBE = "unsubscribe"
WS_TYPE_GET_SUBSCRIPTION_LEVEL = "get_subscription_level"
WS_TYPE_GET_VALID_SUBSCRIPTION_LEVELS = "get_valid_subscription_levels"
WS_TYPE_ME = "me"
WS_TYPE_LOGIN = "login"
WS_TYPE_LOGOUT = "logout"
WS_TYPE_ADDRESS = "address"

# Errors (error code values)
WS_ERROR_REQUEST_TIMED_OUT = "request_timed_out"
WS_ERROR_UNKNOWN = "unknown_error"
WS_ERROR_INVALID_RESPONSE = "invalid_response"

# Close codes
WS_CLOSE_CLIENT_REQUEST_CODE = 1000
WS_CLOSE_CLIENT_REQUEST_REASON = "client disconnect"

# Request correlation
WS_REQUEST_TIMEOUT_S = _env_float("KROMER_WS_REQUEST_TIMEOUT_S", 3.0)
WS_HANDSHAKE_TIMEOUT_S = _env_float("KROMER_WS_HANDSHAKE_TIMEOUT_S", 10.0)

# Reconnection (fixed delay; 0 attempts = retry forever)
WS_RECONNECT_ENABLED = _env_bool("KROMER_WS_RECONNECT_ENABLED", True)
WS_RECONNECT_DELAY_S = _env_float("KROMER_WS_RECONNECT_DELAY_S", 3.0)
WS_RECONNECT_MAX_ATTEMPTS = _env_int("KROMER_WS_RECONNECT_MAX_ATTEMPTS", 0)

# Transport
WS_PING_INTERVAL_S = _env_float("KROMER_WS_PING_INTERVAL_S", 20.0, allow_disable=True)
WS_PING_TIMEOUT_S = _env_float("KROMER_WS_PING_TIMEOUT_S", 20.0, allow_disable=True)
WS_MAX_MESSAGE_BYTES = _env_int("KROMER_WS_MAX_MESSAGE_BYTES", 8 * 1024 * 1024)
WS_CLOSE_TIMEOUT_S = _env_float("KROMER_WS_CLOSE_TIMEOUT_S", 5.0)

__all__ = [
    "WS_DEFAULT_URL",
    "WS_KEY_ID",
    "WS_KEY_TYPE",
    "WS_KEY_OK",
    "WS_KEY_ERROR",
    "WS_KEY_MESSAGE",
    "WS_KEY_EVENT",
    "WS_KEY_SERVER_TIME",
    "WS_KEY_TRANSACTION",
    "WS_TYPE_HELLO",
    "WS_TYPE_KEEPALIVE_ALIASES",
    "WS_TYPE_EVENT",
    "WS_EVENT_TRANSACTION",
    "WS_TYPE_SUBSCRIBE",
    "WS_TYPE_UNSUBSCRIBE",
    "WS_TYPE_GET_SUBSCRIPTION_LEVEL",
    "WS_TYPE_GET_VALID_SUBSCRIPTION_LEVELS",
    "WS_TYPE_ME",
    "WS_TYPE_LOGIN",
    "WS_TYPE_LOGOUT",
    "WS_TYPE_ADDRESS",
    "WS_ERROR_REQUEST_TIMED_OUT",
    "WS_ERROR_UNKNOWN",
    "WS_ERROR_INVALID_RESPONSE",
    "WS_CLOSE_CLIENT_REQUEST_CODE",
    "WS_CLOSE_CLIENT_REQUEST_REASON",
    "WS_REQUEST_TIMEOUT_S",
    "WS_HANDSHAKE_TIMEOUT_S",
    "WS_RECONNECT_ENABLED",
    "WS_RECONNECT_DELAY_S",
    "WS_RECONNECT_MAX_ATTEMPTS",
    "WS_PING_INTERVAL_S",
    "WS_PING_TIMEOUT_S",
    "WS_MAX_MESSAGE_BYTES",
    "WS_CLOSE_TIMEOUT_S",
]
