"""Subscription levels a session may opt into."""

from __future__ import annotations

from typing import Literal

SubscriptionLevel = Literal["transactions", "ownTransactions", "names", "ownNames", "motd"]

SUBSCRIPTION_LEVELS: tuple[str, ...] = (
    "transactions",
    "ownTransactions",
    "names",
    "ownNames",
    "motd",
)

__all__ = ["SUBSCRIPTION_LEVELS", "SubscriptionLevel"]
