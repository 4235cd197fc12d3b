# unboxd-engine/unboxd_engine/subscriptions.py
"""
Polling subscriptions for live quotes, matches and route updates.

A subscription is an asyncio task that repeatedly awaits a poll coroutine
and hands each result to a callback. The caller gets back a cancel
function. Cancelling is idempotent and final: a poll that completes after
cancellation is discarded rather than delivered.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Unsubscribe = Callable[[], None]


class PollingSubscription(Generic[T]):
    """
    Re-run a poll coroutine on a fixed interval, starting immediately.

    Attributes:
        poll: Coroutine factory producing the next result (None = nothing new)
        on_result: Called with every non-None result
        interval_s: Pause between the end of one poll and the start of the next
        on_error: Called with the exception when a poll or on_result fails;
            when absent the failure is logged. Polling continues either way
        stop_after_result: End the subscription after the first delivery
    """

    def __init__(
        self,
        poll: Callable[[], Awaitable[Optional[T]]],
        on_result: Callable[[T], None],
        interval_s: float,
        on_error: Optional[Callable[[Exception], None]] = None,
        stop_after_result: bool = False,
        name: str = "subscription",
    ) -> None:
        if interval_s <= 0:
            raise ValueError(f"interval must be positive, got {interval_s}")
        self._poll = poll
        self._on_result = on_result
        self._on_error = on_error
        self._interval_s = interval_s
        self._stop_after_result = stop_after_result
        self._name = name
        self._active = False
        self._task: Optional[asyncio.Task] = None

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> Unsubscribe:
        """
        Schedule the polling task on the running event loop.

        Raises:
            RuntimeError: if called outside a running event loop
        """
        loop = asyncio.get_running_loop()
        self._active = True
        self._task = loop.create_task(self._run(), name=self._name)
        return self.cancel

    def cancel(self) -> None:
        """Stop polling. Safe to call any number of times."""
        if not self._active:
            return
        self._active = False
        if self._task is not None and not self._task.done():
            self._task.cancel()
        logger.debug(f"{self._name} cancelled")

    def _report(self, exc: Exception, stage: str) -> None:
        """Hand a failure to on_error, or log it when there is no handler."""
        if self._on_error is None:
            logger.warning(f"{self._name} {stage} failed: {exc}")
            return
        try:
            self._on_error(exc)
        except Exception as handler_exc:
            logger.warning(f"{self._name} error handler failed: {handler_exc}")

    def _deliver(self, result: T) -> None:
        try:
            self._on_result(result)
        except Exception as exc:
            self._report(exc, "callback")

    async def _run(self) -> None:
        while self._active:
            try:
                result = await self._poll()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                if not self._active:
                    return
                self._report(exc, "poll")
            else:
                # Cancelled while the poll was in flight
                if not self._active:
                    return
                if result is not None:
                    self._deliver(result)
                    if self._stop_after_result:
                        self._active = False
                        return
            await asyncio.sleep(self._interval_s)
