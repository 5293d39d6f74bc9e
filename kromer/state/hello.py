"""Handshake state reported by the server on every (re)connect."""

from __future__ import annotations

from typing import Any
from datetime import datetime
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class HelloState:
    server_time: datetime | None
    motd: str = ""
    motd_set: str | None = None
    public_url: str = ""
    public_ws_url: str = ""
    mining_enabled: bool = False
    transactions_enabled: bool = False
    debug_mode: bool = False
    notice: str = ""
    package: dict[str, Any] = field(default_factory=dict)
    constants: dict[str, Any] = field(default_factory=dict)
    currency: dict[str, Any] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class MeInfo:
    """Session identity as reported by ``me``/``login``."""

    is_guest: bool
    address: dict[str, Any] | None = None


__all__ = ["HelloState", "MeInfo"]
