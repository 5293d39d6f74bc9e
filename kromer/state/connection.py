"""Connection and engine lifecycle states."""

from __future__ import annotations

from typing import Literal
from dataclasses import dataclass

# One physical socket.
ConnectionState = Literal["disconnected", "connecting", "connected"]

# The protocol engine wrapping it. "faulted" is left on the next connect attempt.
EngineState = Literal["idle", "connecting", "connected", "closing", "faulted"]


@dataclass(frozen=True, slots=True)
class CloseInfo:
    """Payload of the ``close`` event."""

    code: int | None
    reason: str = ""


__all__ = ["CloseInfo", "ConnectionState", "EngineState"]
