"""Event kinds exposed to listeners."""

from __future__ import annotations

from typing import Literal

EventKind = Literal["ready", "keepalive", "error", "close", "transaction"]

EVENT_READY = "ready"
EVENT_KEEPALIVE = "keepalive"
EVENT_ERROR = "error"
EVENT_CLOSE = "close"
EVENT_TRANSACTION = "transaction"

EVENT_KINDS = frozenset({EVENT_READY, EVENT_KEEPALIVE, EVENT_ERROR, EVENT_CLOSE, EVENT_TRANSACTION})

__all__ = [
    "EventKind",
    "EVENT_READY",
    "EVENT_KEEPALIVE",
    "EVENT_ERROR",
    "EVENT_CLOSE",
    "EVENT_TRANSACTION",
    "EVENT_KINDS",
]
