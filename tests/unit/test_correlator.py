from __future__ import annotations

import asyncio
from typing import Any

import orjson
import pytest

from kromer.state.frames import ReplyFrame
from kromer.websocket.correlator import RequestCorrelator
from kromer.errors import NotConnected, ProtocolError, ConnectionLost, RequestTimedOut


class _Wire:
    def __init__(self, *, fail: bool = False) -> None:
        self.frames: list[dict[str, Any]] = []
        self.fail = fail

    async def send(self, text: str) -> None:
        if self.fail:
            raise NotConnected("socket not open")
        self.frames.append(orjson.loads(text))


async def _wait_sent(wire: _Wire, count: int) -> None:
    for _ in range(100):
        if len(wire.frames) >= count:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"expected {count} frames, got {len(wire.frames)}")


@pytest.mark.asyncio
async def test_ids_are_distinct_and_increasing() -> None:
    wire = _Wire()
    correlator = RequestCorrelator(wire.send, timeout_s=1.0)

    tasks = [asyncio.create_task(correlator.issue({"type": "me"})) for _ in range(5)]
    await _wait_sent(wire, 5)

    ids = [frame["id"] for frame in wire.frames]
    assert ids == [1, 2, 3, 4, 5]
    assert correlator.pending_count == 5

    for request_id in reversed(ids):
        correlator.resolve(ReplyFrame(id=request_id, ok=True, body={"id": request_id, "ok": True}))
    results = await asyncio.gather(*tasks)
    assert [r["id"] for r in results] == ids
    assert correlator.pending_count == 0


@pytest.mark.asyncio
async def test_reply_resolves_matching_request_only() -> None:
    wire = _Wire()
    correlator = RequestCorrelator(wire.send, timeout_s=1.0)

    first = asyncio.create_task(correlator.issue({"type": "me"}))
    second = asyncio.create_task(correlator.issue({"type": "get_subscription_level"}))
    await _wait_sent(wire, 2)

    assert wire.frames[1]["type"] == "get_subscription_level"
    correlator.resolve(ReplyFrame(id=2, ok=True, body={"subscription_level": []}))
    assert await second == {"subscription_level": []}
    assert not first.done()

    correlator.resolve(ReplyFrame(id=1, ok=True, body={"isGuest": True}))
    assert await first == {"isGuest": True}


@pytest.mark.asyncio
async def test_failed_reply_rejects_with_server_error() -> None:
    wire = _Wire()
    correlator = RequestCorrelator(wire.send, timeout_s=1.0)

    task = asyncio.create_task(correlator.issue({"type": "address", "address": "nobody"}))
    await _wait_sent(wire, 1)
    body = {"id": 1, "ok": False, "error": "address_not_found", "message": "Address not found"}
    correlator.resolve(ReplyFrame(id=1, ok=False, body=body))

    with pytest.raises(ProtocolError) as exc:
        await task
    assert exc.value.error == "address_not_found"
    assert exc.value.message == "Address not found"
    assert exc.value.payload == body


@pytest.mark.asyncio
async def test_timeout_rejects_and_late_reply_is_ignored() -> None:
    wire = _Wire()
    correlator = RequestCorrelator(wire.send, timeout_s=0.05)

    with pytest.raises(RequestTimedOut) as exc:
        await correlator.issue({"type": "me"})
    assert exc.value.request_id == 1
    assert exc.value.request_type == "me"
    assert exc.value.error == "request_timed_out"
    assert correlator.pending_count == 0

    assert correlator.resolve(ReplyFrame(id=1, ok=True, body={})) is False


@pytest.mark.asyncio
async def test_reply_then_timeout_settles_once() -> None:
    wire = _Wire()
    correlator = RequestCorrelator(wire.send, timeout_s=0.05)

    task = asyncio.create_task(correlator.issue({"type": "me"}))
    await _wait_sent(wire, 1)
    assert correlator.resolve(ReplyFrame(id=1, ok=True, body={"isGuest": True})) is True
    assert await task == {"isGuest": True}

    # Outlive the original timeout; nothing else happens.
    await asyncio.sleep(0.1)
    assert correlator.resolve(ReplyFrame(id=1, ok=True, body={})) is False


@pytest.mark.asyncio
async def test_unsent_request_is_left_to_time_out() -> None:
    correlator = RequestCorrelator(_Wire(fail=True).send, timeout_s=0.05)
    with pytest.raises(RequestTimedOut):
        await correlator.issue({"type": "me"})
    assert correlator.pending_count == 0


@pytest.mark.asyncio
async def test_reject_all_fails_outstanding_requests() -> None:
    wire = _Wire()
    correlator = RequestCorrelator(wire.send, timeout_s=1.0)

    tasks = [asyncio.create_task(correlator.issue({"type": "me"})) for _ in range(3)]
    await _wait_sent(wire, 3)
    assert correlator.reject_all(ConnectionLost("disconnected")) == 3

    results = await asyncio.gather(*tasks, return_exceptions=True)
    assert all(isinstance(r, ConnectionLost) for r in results)
    assert correlator.pending_count == 0


@pytest.mark.asyncio
async def test_cancelled_caller_releases_pending_entry() -> None:
    wire = _Wire()
    correlator = RequestCorrelator(wire.send, timeout_s=1.0)

    task = asyncio.create_task(correlator.issue({"type": "me"}))
    await _wait_sent(wire, 1)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert correlator.pending_count == 0
    assert correlator.resolve(ReplyFrame(id=1, ok=True, body={})) is False


@pytest.mark.asyncio
async def test_ids_keep_increasing_after_timeouts() -> None:
    wire = _Wire()
    correlator = RequestCorrelator(wire.send, timeout_s=0.02)

    with pytest.raises(RequestTimedOut):
        await correlator.issue({"type": "me"})
    task = asyncio.create_task(correlator.issue({"type": "me"}))
    await _wait_sent(wire, 2)
    assert wire.frames[1]["id"] == 2
    correlator.resolve(ReplyFrame(id=2, ok=True, body={}))
    await task
