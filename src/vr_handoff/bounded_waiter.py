"""
Deadline-bounded polling primitive.

Each poll is a fresh query; nothing is carried between evaluations. The
sleep between polls waits on an ``asyncio.Event`` so an external shutdown
request ends the wait promptly instead of blocking until the deadline.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class WaitStatus(Enum):
    FOUND = "found"
    TIMED_OUT = "timed_out"
    EXITED = "exited"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class WaitOutcome:
    """Tagged result of a bounded wait; ``value`` is only set for FOUND."""

    status: WaitStatus
    value: Any = None
    evaluations: int = 0

    @classmethod
    def found(cls, value: Any, evaluations: int = 0) -> "WaitOutcome":
        return cls(WaitStatus.FOUND, value, evaluations)

    @classmethod
    def timed_out(cls, evaluations: int = 0) -> "WaitOutcome":
        return cls(WaitStatus.TIMED_OUT, None, evaluations)

    @classmethod
    def exited(cls, evaluations: int = 0) -> "WaitOutcome":
        return cls(WaitStatus.EXITED, None, evaluations)

    @classmethod
    def cancelled(cls, evaluations: int = 0) -> "WaitOutcome":
        return cls(WaitStatus.CANCELLED, None, evaluations)

    @property
    def is_found(self) -> bool:
        return self.status is WaitStatus.FOUND


async def pause(seconds: float, cancel_event: Optional[asyncio.Event] = None) -> bool:
    """Sleep for ``seconds``; return True if cancellation was requested meanwhile."""
    if cancel_event is None:
        await asyncio.sleep(seconds)
        return False
    if cancel_event.is_set():
        return True
    try:
        await asyncio.wait_for(cancel_event.wait(), timeout=seconds)
    except asyncio.TimeoutError:  # Normal interval expiry  # policy_guard: allow-silent-handler
        return False
    return True


async def wait_until(
    predicate: Callable[[], Any],
    poll_interval: float,
    deadline: Optional[float] = None,
    cancel_event: Optional[asyncio.Event] = None,
    *,
    clock: Clock = time.monotonic,
) -> WaitOutcome:
    """
    Poll ``predicate`` until it returns a truthy value or ``deadline`` elapses.

    Args:
        predicate: Zero-argument callable; a truthy return ends the wait
        poll_interval: Seconds to sleep between evaluations
        deadline: Seconds to keep polling; None waits indefinitely
        cancel_event: Optional event that aborts the wait when set
        clock: Monotonic time source

    Returns:
        WaitOutcome FOUND (carrying the predicate result), TIMED_OUT or CANCELLED
    """
    started = clock()
    evaluations = 0
    while True:
        if cancel_event is not None and cancel_event.is_set():
            return WaitOutcome.cancelled(evaluations)

        result = predicate()
        evaluations += 1
        if result:
            return WaitOutcome.found(result, evaluations)

        interval = poll_interval
        if deadline is not None:
            elapsed = clock() - started
            if elapsed >= deadline:
                logger.debug("Wait timed out after %.2fs (%d evaluations)", deadline, evaluations)
                return WaitOutcome.timed_out(evaluations)
            interval = min(poll_interval, deadline - elapsed)

        if await pause(interval, cancel_event):
            return WaitOutcome.cancelled(evaluations)


async def wait_for_exit(
    handle: Any,
    poll_interval: float,
    deadline: Optional[float] = None,
    cancel_event: Optional[asyncio.Event] = None,
    *,
    clock: Clock = time.monotonic,
) -> WaitOutcome:
    """Wait until ``handle.is_running()`` turns False; a vanished process counts as exited."""
    outcome = await wait_until(
        lambda: not handle.is_running(),
        poll_interval,
        deadline,
        cancel_event,
        clock=clock,
    )
    if outcome.is_found:
        return WaitOutcome.exited(outcome.evaluations)
    return outcome


__all__ = ["WaitOutcome", "WaitStatus", "pause", "wait_for_exit", "wait_until"]
