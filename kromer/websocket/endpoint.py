"""Socket endpoint resolution."""

from __future__ import annotations

from datetime import datetime
from dataclasses import dataclass
from collections.abc import Callable, Awaitable


@dataclass(frozen=True, slots=True)
class Endpoint:
    url: str
    expires: datetime | None = None


EndpointResolver = Callable[[], Awaitable[Endpoint]]


def static_endpoint(url: str) -> EndpointResolver:
    """Resolver that always hands out the same URL."""
    url = (url or "").strip()
    if not url:
        raise ValueError("endpoint url must be non-empty")

    async def _resolve() -> Endpoint:
        return Endpoint(url=url)

    return _resolve


__all__ = ["Endpoint", "EndpointResolver", "static_endpoint"]
