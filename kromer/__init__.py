"""Kromer economy WebSocket client."""

from .websocket import Endpoint, SocketClient, ListenerToken, static_endpoint
from .state import MeInfo, CloseInfo, HelloState
from .errors import (
    NotConnected,
    ConnectFailed,
    ProtocolError,
    ConnectionLost,
    MalformedFrame,
    TransportError,
    RequestTimedOut,
)
from .runtime import load_settings, configure_logging

__all__ = [
    "CloseInfo",
    "ConnectFailed",
    "ConnectionLost",
    "Endpoint",
    "HelloState",
    "ListenerToken",
    "MalformedFrame",
    "MeInfo",
    "NotConnected",
    "ProtocolError",
    "RequestTimedOut",
    "SocketClient",
    "TransportError",
    "configure_logging",
    "load_settings",
    "static_endpoint",
]
