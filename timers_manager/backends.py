"""
Scheduling backends used by the timers manager.

A backend arms one-shot and recurring callbacks and disarms them by handle.
``APSchedulerBackend`` runs on an asyncio event loop through APScheduler;
``VirtualBackend`` keeps a simulated millisecond clock that only moves when
``advance()`` is called, which makes it suitable for tests and simulations.
"""

import asyncio
import heapq
import inspect
import itertools
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Protocol

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from .exceptions import TimerStateError
from .logger import logger

TimerCallback = Callable[[], Any]


class TimerBackend(Protocol):
    """Narrow interface the manager uses to drive timers."""

    def arm_once(self, delay_ms: float, callback: TimerCallback) -> object: ...

    def arm_recurring(self, delay_ms: float, callback: TimerCallback) -> object: ...

    def disarm(self, handle: object) -> None: ...

    def shutdown(self) -> None: ...


async def _drive(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


class APSchedulerBackend:
    """Backend built on APScheduler's AsyncIOScheduler.

    The scheduler is started lazily on the first arm, which must happen while
    an asyncio event loop is running. Handles are APScheduler job ids.

    AsyncIOScheduler.shutdown may only queue the stop on the event loop, so
    the backend tracks its own started state and replaces the scheduler on
    shutdown; a later arm starts the fresh one.
    """

    def __init__(
        self,
        scheduler: Optional[AsyncIOScheduler] = None,
        min_interval_ms: float = 1,
        max_instances: int = 1,
    ):
        self._scheduler = scheduler or AsyncIOScheduler(timezone=timezone.utc)
        self._started = self._scheduler.running
        self._min_interval_ms = min_interval_ms
        self._max_instances = max_instances

    @property
    def scheduler(self) -> AsyncIOScheduler:
        return self._scheduler

    @property
    def started(self) -> bool:
        return self._started

    def arm_once(self, delay_ms: float, callback: TimerCallback) -> str:
        run_date = datetime.now(timezone.utc) + timedelta(milliseconds=delay_ms)
        return self._add_job(callback, DateTrigger(run_date=run_date))

    def arm_recurring(self, delay_ms: float, callback: TimerCallback) -> str:
        interval_ms = max(delay_ms, self._min_interval_ms)
        trigger = IntervalTrigger(seconds=interval_ms / 1000, timezone=timezone.utc)
        return self._add_job(callback, trigger)

    def disarm(self, handle: object) -> None:
        # One-shot jobs are dropped by APScheduler once they have fired
        if self._scheduler.get_job(handle):
            self._scheduler.remove_job(handle)
            logger.debug(f"Removed scheduler job {handle}")

    def shutdown(self) -> None:
        if not self._started:
            return
        self._scheduler.remove_all_jobs()
        self._scheduler.shutdown(wait=False)
        self._scheduler = AsyncIOScheduler(timezone=timezone.utc)
        self._started = False
        logger.info("APScheduler backend shut down")

    def _ensure_started(self) -> None:
        if self._started:
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError as e:
            raise TimerStateError(
                "APSchedulerBackend must be armed from a running asyncio event loop"
            ) from e
        self._scheduler.start()
        self._started = True
        logger.info("APScheduler backend started")

    def _add_job(self, callback: TimerCallback, trigger) -> str:
        self._ensure_started()
        job = self._scheduler.add_job(
            self._run_callback,
            trigger=trigger,
            args=[callback],
            id=uuid.uuid4().hex,
            misfire_grace_time=None,
            coalesce=False,
            max_instances=self._max_instances,
        )
        logger.debug(f"Added scheduler job {job.id} with trigger {trigger}")
        return job.id

    @staticmethod
    async def _run_callback(callback: TimerCallback) -> None:
        result = callback()
        if inspect.isawaitable(result):
            await result


@dataclass(order=True)
class _QueuedFiring:
    due: float
    seq: int
    handle: int = field(compare=False)


@dataclass
class _VirtualTimer:
    delay_ms: float
    callback: TimerCallback
    recurring: bool


class VirtualBackend:
    """Deterministic backend driven by a simulated millisecond clock.

    Firings happen synchronously inside ``advance()``, ordered by due time and
    then by arming order. Awaitables returned by callbacks are scheduled on the
    running event loop when there is one, otherwise run to completion with
    ``asyncio.run``.
    """

    def __init__(self, min_interval_ms: float = 1):
        self.now: float = 0.0
        self._min_interval_ms = min_interval_ms
        self._queue: list[_QueuedFiring] = []
        self._timers: dict[int, _VirtualTimer] = {}
        self._handles = itertools.count(1)
        self._seq = itertools.count()
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of armed timers."""
        return len(self._timers)

    def arm_once(self, delay_ms: float, callback: TimerCallback) -> int:
        return self._arm(_VirtualTimer(delay_ms, callback, recurring=False))

    def arm_recurring(self, delay_ms: float, callback: TimerCallback) -> int:
        interval_ms = max(delay_ms, self._min_interval_ms)
        return self._arm(_VirtualTimer(interval_ms, callback, recurring=True))

    def disarm(self, handle: object) -> None:
        # Queue entries of disarmed timers are skipped when they come due
        self._timers.pop(handle, None)  # type: ignore[call-overload]

    def shutdown(self) -> None:
        self._timers.clear()
        self._queue.clear()

    def advance(self, ms: float) -> int:
        """
        Move the clock forward by ``ms`` and fire everything that comes due.

        Args:
            ms: Milliseconds to advance, must not be negative

        Returns:
            Number of callbacks fired
        """
        if ms < 0:
            raise ValueError("Cannot move the virtual clock backwards")
        target = self.now + ms
        fired = 0
        while self._queue and self._queue[0].due <= target:
            firing = heapq.heappop(self._queue)
            timer = self._timers.get(firing.handle)
            if timer is None:
                continue
            self.now = firing.due
            if timer.recurring:
                self._push(firing.handle, self.now + timer.delay_ms)
            else:
                del self._timers[firing.handle]
            self._invoke(timer.callback)
            fired += 1
        self.now = target
        return fired

    def run_pending(self) -> int:
        """Fire everything already due without moving the clock."""
        return self.advance(0)

    def _arm(self, timer: _VirtualTimer) -> int:
        handle = next(self._handles)
        self._timers[handle] = timer
        self._push(handle, self.now + timer.delay_ms)
        return handle

    def _push(self, handle: int, due: float) -> None:
        heapq.heappush(self._queue, _QueuedFiring(due, next(self._seq), handle))

    def _invoke(self, callback: TimerCallback) -> None:
        result = callback()
        if not inspect.isawaitable(result):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(_drive(result))
            return
        task = loop.create_task(_drive(result))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
