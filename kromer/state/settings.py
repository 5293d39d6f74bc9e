"""Runtime settings (dataclasses only)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SocketSettings:
    url: str
    request_timeout_s: float
    handshake_timeout_s: float
    reconnect_enabled: bool
    reconnect_delay_s: float
    reconnect_max_attempts: int
    ping_interval_s: float | None
    ping_timeout_s: float | None
    max_message_bytes: int
    close_timeout_s: float


__all__ = ["SocketSettings"]
