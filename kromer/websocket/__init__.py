from .client import EnrichFn, SocketClient
from .endpoint import Endpoint, EndpointResolver, static_endpoint
from .connection import Connection
from .correlator import RequestCorrelator
from .dispatcher import ListenerToken, EventDispatcher
from .reconciler import ReconcileResult, reconcile_subscriptions

__all__ = [
    "Connection",
    "EnrichFn",
    "Endpoint",
    "EndpointResolver",
    "EventDispatcher",
    "ListenerToken",
    "ReconcileResult",
    "RequestCorrelator",
    "SocketClient",
    "reconcile_subscriptions",
    "static_endpoint",
]
