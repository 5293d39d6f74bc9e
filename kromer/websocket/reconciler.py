"""Converge the server's subscription set to the one the caller declared."""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from dataclasses import dataclass, field
from collections.abc import Callable, Iterable, Awaitable

logger = logging.getLogger(__name__)

SubscriptionOp = Callable[[str], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    added: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()
    failures: dict[str, BaseException] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


def plan_reconciliation(desired: Iterable[str], actual: Iterable[str]) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Return (to_add, to_remove), keeping the input order of each side."""
    desired = tuple(dict.fromkeys(desired))
    actual = tuple(dict.fromkeys(actual))
    to_add = tuple(level for level in desired if level not in actual)
    to_remove = tuple(level for level in actual if level not in desired)
    return to_add, to_remove


async def reconcile_subscriptions(
    desired: Iterable[str],
    actual: Iterable[str],
    *,
    subscribe: SubscriptionOp,
    unsubscribe: SubscriptionOp,
) -> ReconcileResult:
    to_add, to_remove = plan_reconciliation(desired, actual)
    if not to_add and not to_remove:
        return ReconcileResult()

    ops = [subscribe(level) for level in to_add] + [unsubscribe(level) for level in to_remove]
    outcomes = await asyncio.gather(*ops, return_exceptions=True)

    labels = [f"+{level}" for level in to_add] + [f"-{level}" for level in to_remove]
    failures: dict[str, BaseException] = {}
    for label, outcome in zip(labels, outcomes):
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        if isinstance(outcome, BaseException):
            logger.warning("subscription change %s failed: %s", label, outcome)
            failures[label] = outcome

    added = tuple(level for level in to_add if f"+{level}" not in failures)
    removed = tuple(level for level in to_remove if f"-{level}" not in failures)
    logger.info("subscriptions reconciled added=%s removed=%s failed=%s", added, removed, sorted(failures))
    return ReconcileResult(added=added, removed=removed, failures=failures)


__all__ = ["ReconcileResult", "SubscriptionOp", "plan_reconciliation", "reconcile_subscriptions"]
