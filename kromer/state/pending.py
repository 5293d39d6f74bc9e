"""Outstanding correlated request bookkeeping."""

from __future__ import annotations

import asyncio
from typing import Any
from dataclasses import dataclass


@dataclass(slots=True)
class PendingRequest:
    id: int
    request_type: str | None
    future: asyncio.Future[dict[str, Any]]
    timeout_handle: asyncio.TimerHandle


__all__ = ["PendingRequest"]
