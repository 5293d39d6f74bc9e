from __future__ import annotations

import asyncio

import pytest

from kromer.errors import ProtocolError, RequestTimedOut
from kromer.websocket.reconciler import plan_reconciliation, reconcile_subscriptions


class _Recorder:
    def __init__(self, *, failing: set[str] | None = None) -> None:
        self.subscribed: list[str] = []
        self.unsubscribed: list[str] = []
        self.failing = failing or set()

    async def subscribe(self, level: str) -> list[str]:
        await asyncio.sleep(0)
        if level in self.failing:
            raise ProtocolError(error="invalid_parameter", message=level)
        self.subscribed.append(level)
        return []

    async def unsubscribe(self, level: str) -> list[str]:
        await asyncio.sleep(0)
        if level in self.failing:
            raise RequestTimedOut(request_id=9, request_type="unsubscribe", timeout_s=3.0)
        self.unsubscribed.append(level)
        return []


def test_plan_reconciliation() -> None:
    to_add, to_remove = plan_reconciliation(["transactions", "names"], ["names", "motd"])
    assert to_add == ("transactions",)
    assert to_remove == ("motd",)


@pytest.mark.asyncio
async def test_subscribes_missing_levels_only() -> None:
    rec = _Recorder()
    result = await reconcile_subscriptions(
        ["transactions"], [], subscribe=rec.subscribe, unsubscribe=rec.unsubscribe
    )
    assert rec.subscribed == ["transactions"]
    assert rec.unsubscribed == []
    assert result.added == ("transactions",)
    assert result.ok


@pytest.mark.asyncio
async def test_adds_and_removes_to_converge() -> None:
    rec = _Recorder()
    result = await reconcile_subscriptions(
        ["transactions", "ownNames"],
        ["ownNames", "motd", "names"],
        subscribe=rec.subscribe,
        unsubscribe=rec.unsubscribe,
    )
    assert rec.subscribed == ["transactions"]
    assert sorted(rec.unsubscribed) == ["motd", "names"]
    assert result.removed == ("motd", "names")


@pytest.mark.asyncio
async def test_equal_sets_issue_nothing() -> None:
    rec = _Recorder()
    result = await reconcile_subscriptions(
        ["motd", "transactions"], ["transactions", "motd"], subscribe=rec.subscribe, unsubscribe=rec.unsubscribe
    )
    assert rec.subscribed == [] and rec.unsubscribed == []
    assert result.added == () and result.removed == ()


@pytest.mark.asyncio
async def test_one_failure_does_not_block_siblings() -> None:
    rec = _Recorder(failing={"names", "motd"})
    result = await reconcile_subscriptions(
        ["transactions", "names"],
        ["motd", "ownNames"],
        subscribe=rec.subscribe,
        unsubscribe=rec.unsubscribe,
    )
    assert rec.subscribed == ["transactions"]
    assert rec.unsubscribed == ["ownNames"]
    assert not result.ok
    assert set(result.failures) == {"+names", "-motd"}
    assert isinstance(result.failures["+names"], ProtocolError)
    assert isinstance(result.failures["-motd"], RequestTimedOut)
