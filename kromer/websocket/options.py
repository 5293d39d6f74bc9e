"""websockets client options derived from settings."""

from __future__ import annotations

from typing import Any

from kromer.state.settings import SocketSettings


def get_ws_options(settings: SocketSettings) -> dict[str, Any]:
    return {
        "ping_interval": settings.ping_interval_s,
        "ping_timeout": settings.ping_timeout_s,
        "max_size": settings.max_message_bytes or None,
        "close_timeout": settings.close_timeout_s,
    }


__all__ = ["get_ws_options"]
