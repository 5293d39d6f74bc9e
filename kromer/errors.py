"""Shared error types for the Kromer socket client."""

from __future__ import annotations

from typing import Any
from dataclasses import dataclass, field

from kromer.config.websocket import WS_ERROR_REQUEST_TIMED_OUT


@dataclass(frozen=True, slots=True)
class TransportError(Exception):
    """The socket could not be opened or maintained."""

    reason: str = ""

    def __str__(self) -> str:
        return self.reason or type(self).__name__


@dataclass(frozen=True, slots=True)
class ConnectFailed(TransportError):
    """Raised when the transport (or its handshake) cannot be established."""


@dataclass(frozen=True, slots=True)
class NotConnected(TransportError):
    """Raised when sending without an open socket."""


@dataclass(frozen=True, slots=True)
class ConnectionLost(TransportError):
    """The open socket went away underneath a caller."""


@dataclass(frozen=True, slots=True)
class RequestTimedOut(Exception):
    """A correlated request received no reply in time."""

    request_id: int
    request_type: str | None
    timeout_s: float
    error: str = WS_ERROR_REQUEST_TIMED_OUT

    def __str__(self) -> str:
        return f"request {self.request_id} ({self.request_type}) timed out after {self.timeout_s:.3f}s"


@dataclass(frozen=True, slots=True)
class ProtocolError(Exception):
    """The server answered a correlated request with ``ok: false``."""

    error: str
    message: str
    payload: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"{self.error}: {self.message}" if self.message else self.error


@dataclass(frozen=True, slots=True)
class MalformedFrame(Exception):
    """A received frame failed to parse or lacks expected fields."""

    reason: str
    raw: str = ""

    def __str__(self) -> str:
        return self.reason


__all__ = [
    "TransportError",
    "ConnectFailed",
    "NotConnected",
    "ConnectionLost",
    "RequestTimedOut",
    "ProtocolError",
    "MalformedFrame",
]
