"""Configuration module exports (env-resolved constants only)."""

from .events import EVENT_KINDS, EventKind
from .subscriptions import SUBSCRIPTION_LEVELS, SubscriptionLevel
from .websocket import (
    WS_DEFAULT_URL,
    WS_REQUEST_TIMEOUT_S,
    WS_RECONNECT_DELAY_S,
)

__all__ = [
    "EVENT_KINDS",
    "EventKind",
    "SUBSCRIPTION_LEVELS",
    "SubscriptionLevel",
    "WS_DEFAULT_URL",
    "WS_REQUEST_TIMEOUT_S",
    "WS_RECONNECT_DELAY_S",
]
