"""Decoded incoming frames (closed set of variants)."""

from __future__ import annotations

from typing import Any
from datetime import datetime
from dataclasses import dataclass, field

from .hello import HelloState


@dataclass(frozen=True, slots=True)
class ReplyFrame:
    id: int
    ok: bool
    body: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class HelloFrame:
    hello: HelloState


@dataclass(frozen=True, slots=True)
class KeepaliveFrame:
    server_time: datetime


@dataclass(frozen=True, slots=True)
class PushEventFrame:
    event: str
    payload: dict[str, Any]


@dataclass(frozen=True, slots=True)
class UnrecognizedFrame:
    type: str
    event: str | None
    body: dict[str, Any] = field(default_factory=dict)


Frame = ReplyFrame | HelloFrame | KeepaliveFrame | PushEventFrame | UnrecognizedFrame

__all__ = ["Frame", "ReplyFrame", "HelloFrame", "KeepaliveFrame", "PushEventFrame", "UnrecognizedFrame"]
