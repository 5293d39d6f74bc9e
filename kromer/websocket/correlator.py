"""Correlate request frames with their replies over one multiplexed socket."""

from __future__ import annotations

import asyncio
import logging
import itertools
from typing import Any
from collections.abc import Callable, Awaitable

from kromer.state.frames import ReplyFrame
from kromer.state.pending import PendingRequest
from kromer.errors import ProtocolError, TransportError, RequestTimedOut
from kromer.config.websocket import (
    WS_KEY_ID,
    WS_KEY_TYPE,
    WS_KEY_ERROR,
    WS_ERROR_UNKNOWN,
    WS_KEY_MESSAGE,
    WS_REQUEST_TIMEOUT_S,
)

from .parser import encode_frame

logger = logging.getLogger(__name__)

SendFn = Callable[[str], Awaitable[None]]


class RequestCorrelator:
    """Assign request ids, track one pending future per id, enforce timeouts.

    Ids start at 1 and are never reused for the lifetime of the instance.
    Each pending request is settled at most once: by its reply, by its
    timeout, or by `reject_all`, whichever happens first.
    """

    def __init__(self, send_fn: SendFn, *, timeout_s: float | None = None) -> None:
        self._send = send_fn
        self._timeout_s = float(WS_REQUEST_TIMEOUT_S if timeout_s is None else timeout_s)
        self._ids = itertools.count(1)
        self._pending: dict[int, PendingRequest] = {}

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def issue(self, payload: dict[str, Any]) -> dict[str, Any]:
        loop = asyncio.get_running_loop()
        request_id = next(self._ids)
        request_type = payload.get(WS_KEY_TYPE)
        future: asyncio.Future[dict[str, Any]] = loop.create_future()
        handle = loop.call_later(self._timeout_s, self._expire, request_id)
        self._pending[request_id] = PendingRequest(
            id=request_id,
            request_type=request_type,
            future=future,
            timeout_handle=handle,
        )

        frame = {**payload, WS_KEY_ID: request_id}
        try:
            try:
                await self._send(encode_frame(frame))
            except TransportError as exc:
                # Left to the timeout, like any request stranded by a dropped socket.
                logger.debug("request id=%s type=%s not sent: %s", request_id, request_type, exc)
            return await future
        finally:
            self._discard(request_id)

    def resolve(self, frame: ReplyFrame) -> bool:
        """Settle the request matching `frame`. Returns False for unknown ids."""
        pending = self._pending.pop(frame.id, None)
        if pending is None:
            logger.debug("discarding reply for unknown request id=%s", frame.id)
            return False
        pending.timeout_handle.cancel()
        if pending.future.done():
            return True
        if frame.ok:
            pending.future.set_result(frame.body)
        else:
            error = frame.body.get(WS_KEY_ERROR)
            message = frame.body.get(WS_KEY_MESSAGE)
            pending.future.set_exception(
                ProtocolError(
                    error=error if isinstance(error, str) and error else WS_ERROR_UNKNOWN,
                    message=message if isinstance(message, str) else "",
                    payload=frame.body,
                )
            )
        return True

    def reject_all(self, exc: BaseException) -> int:
        pending = list(self._pending.values())
        self._pending.clear()
        for request in pending:
            request.timeout_handle.cancel()
            if not request.future.done():
                request.future.set_exception(exc)
        return len(pending)

    def _expire(self, request_id: int) -> None:
        pending = self._pending.pop(request_id, None)
        if pending is None or pending.future.done():
            return
        logger.debug("request id=%s type=%s timed out", request_id, pending.request_type)
        pending.future.set_exception(
            RequestTimedOut(
                request_id=request_id,
                request_type=pending.request_type,
                timeout_s=self._timeout_s,
            )
        )

    def _discard(self, request_id: int) -> None:
        # Only reached with an entry still present when the awaiting caller was cancelled.
        pending = self._pending.pop(request_id, None)
        if pending is not None:
            pending.timeout_handle.cancel()


__all__ = ["RequestCorrelator", "SendFn"]
