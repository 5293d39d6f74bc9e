"""Typed publish/subscribe registry for push events."""

from __future__ import annotations

import logging
from typing import Any
from collections.abc import Callable
from dataclasses import dataclass, field

from kromer.config.events import EVENT_KINDS, EventKind

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]


@dataclass(frozen=True, slots=True, eq=False)
class ListenerToken:
    """Opaque handle for exactly one registration; compared by identity."""

    kind: str
    handler: Handler
    _registry: EventDispatcher | None = field(default=None, repr=False)

    def unsubscribe(self) -> bool:
        if self._registry is None:
            return False
        return self._registry.off(self)


class EventDispatcher:
    """Fan out push payloads to handlers registered per event kind.

    Handlers run synchronously, in registration order. A failing handler is
    logged and does not stop delivery to the ones after it.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, dict[ListenerToken, Handler]] = {}

    def on(self, kind: EventKind, handler: Handler) -> ListenerToken:
        if kind not in EVENT_KINDS:
            raise ValueError(f"unknown event kind '{kind}'; expected one of {sorted(EVENT_KINDS)}")
        if not callable(handler):
            raise TypeError("handler must be callable")
        token = ListenerToken(kind=kind, handler=handler, _registry=self)
        self._listeners.setdefault(kind, {})[token] = handler
        return token

    def off(self, token: ListenerToken) -> bool:
        """Remove one registration. Removing it again is a no-op."""
        bucket = self._listeners.get(token.kind)
        if bucket is None or bucket.pop(token, None) is None:
            return False
        if not bucket:
            del self._listeners[token.kind]
        return True

    def fire(self, kind: EventKind, payload: Any = None) -> int:
        bucket = self._listeners.get(kind)
        if not bucket:
            return 0
        # Snapshot: handlers (un)registering during dispatch don't change this round.
        handlers = list(bucket.values())
        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                logger.exception("event handler for '%s' raised", kind)
        return len(handlers)

    def listener_count(self, kind: EventKind | None = None) -> int:
        if kind is not None:
            return len(self._listeners.get(kind, ()))
        return sum(len(bucket) for bucket in self._listeners.values())


__all__ = ["EventDispatcher", "Handler", "ListenerToken"]
