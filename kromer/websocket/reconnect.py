"""Fixed-delay reconnect loop for the protocol engine."""

from __future__ import annotations

import asyncio
import logging
import contextlib
from collections.abc import Callable, Awaitable

from kromer.errors import TransportError
from kromer.config.websocket import WS_RECONNECT_DELAY_S, WS_RECONNECT_MAX_ATTEMPTS

logger = logging.getLogger(__name__)

AttemptFn = Callable[[], Awaitable[object]]


class ReconnectScheduler:
    """Run `attempt_fn` after a fixed delay until it succeeds.

    The delay never grows. ``max_attempts <= 0`` retries forever; otherwise the
    loop gives up after that many consecutive failures. Requests made while an
    attempt is already running are folded into it: if they arrive after the
    attempt succeeded, the loop goes round once more.
    """

    def __init__(
        self,
        attempt_fn: AttemptFn,
        *,
        delay_s: float | None = None,
        max_attempts: int | None = None,
    ) -> None:
        self._attempt_fn = attempt_fn
        self._delay_s = float(WS_RECONNECT_DELAY_S if delay_s is None else delay_s)
        self._max_attempts = int(WS_RECONNECT_MAX_ATTEMPTS if max_attempts is None else max_attempts)
        self._requested = False
        self._task: asyncio.Task | None = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(self) -> bool:
        self._requested = True
        if self.active:
            return False
        self._task = asyncio.create_task(self._run())
        return True

    async def stop(self) -> None:
        self._requested = False
        task, self._task = self._task, None
        if task is None or task is asyncio.current_task():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(self) -> None:
        failures = 0
        while self._requested:
            self._requested = False
            await asyncio.sleep(self._delay_s)
            try:
                await self._attempt_fn()
            except TransportError as exc:
                failures += 1
                if self._max_attempts > 0 and failures >= self._max_attempts:
                    logger.error("giving up reconnecting after %s failed attempts: %s", failures, exc)
                    return
                logger.warning("reconnect attempt failed (%s); retrying in %.1fs", exc, self._delay_s)
                self._requested = True
                continue
            failures = 0


__all__ = ["AttemptFn", "ReconnectScheduler"]
