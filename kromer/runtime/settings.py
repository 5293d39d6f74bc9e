"""Load runtime settings.

Configuration values are resolved from the environment in `kromer/config/*` and
exposed here as a structured dataclass for the rest of the client.
"""

from __future__ import annotations

from dataclasses import replace

from kromer.state.settings import SocketSettings
from kromer.config.websocket import (
    WS_DEFAULT_URL,
    WS_PING_TIMEOUT_S,
    WS_CLOSE_TIMEOUT_S,
    WS_PING_INTERVAL_S,
    WS_RECONNECT_ENABLED,
    WS_REQUEST_TIMEOUT_S,
    WS_RECONNECT_DELAY_S,
    WS_MAX_MESSAGE_BYTES,
    WS_HANDSHAKE_TIMEOUT_S,
    WS_RECONNECT_MAX_ATTEMPTS,
)


def load_settings(**overrides) -> SocketSettings:
    settings = SocketSettings(
        url=WS_DEFAULT_URL,
        request_timeout_s=float(WS_REQUEST_TIMEOUT_S),
        handshake_timeout_s=float(WS_HANDSHAKE_TIMEOUT_S),
        reconnect_enabled=WS_RECONNECT_ENABLED,
        reconnect_delay_s=float(WS_RECONNECT_DELAY_S),
        reconnect_max_attempts=WS_RECONNECT_MAX_ATTEMPTS,
        ping_interval_s=WS_PING_INTERVAL_S,
        ping_timeout_s=WS_PING_TIMEOUT_S,
        max_message_bytes=WS_MAX_MESSAGE_BYTES,
        close_timeout_s=float(WS_CLOSE_TIMEOUT_S),
    )
    if overrides:
        settings = replace(settings, **overrides)
    return settings


__all__ = ["load_settings"]
