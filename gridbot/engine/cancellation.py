"""Cooperative cancellation for paced suspensions."""

from __future__ import annotations

import asyncio


class CancelToken:
    """One-shot cancellation flag that sleeping coroutines can wake on.

    A token belongs to a single run (or preview).  ``cancel()`` is synchronous
    and idempotent; every coroutine parked in ``sleep()`` wakes immediately.
    """

    __slots__ = ("_event", "reason")

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str = ""

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    async def sleep(self, seconds: float) -> bool:
        """Wait *seconds*; return True if cancelled before or during the wait."""
        if self._event.is_set():
            return True
        if seconds <= 0:
            await asyncio.sleep(0)
            return self._event.is_set()
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return self._event.is_set()
        return True
