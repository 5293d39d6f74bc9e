from .hello import MeInfo, HelloState
from .pending import PendingRequest
from .settings import SocketSettings
from .connection import CloseInfo, EngineState, ConnectionState

__all__ = [
    "CloseInfo",
    "ConnectionState",
    "EngineState",
    "HelloState",
    "MeInfo",
    "PendingRequest",
    "SocketSettings",
]
