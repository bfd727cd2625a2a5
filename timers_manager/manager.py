"""
Timers Manager - registry and lifecycle control for named timers.
"""

import functools
import inspect
import threading
from collections.abc import Awaitable, Mapping
from typing import Any, Optional, Union

from .backends import APSchedulerBackend, TimerBackend
from .config import Settings
from .config import settings as default_settings
from .exceptions import DuplicateTimerError, TimerStateError, TimerTypeError
from .journal import ExecutionJournal
from .logger import logger
from .types import LogEntry, TimerDescriptor, exception_message
from .validation import validate_descriptor, validate_name


class TimersManager:
    """
    Registry of uniquely named timers with global and per-timer control.

    Timers are declared with ``add`` while the manager is inactive, armed
    together by ``start`` and disarmed together by ``stop``. Individual timers
    can be paused, resumed and removed at any time. Every job execution is
    recorded in the execution journal whether it returns or raises.

    Example:
        ```python
        manager = TimersManager()
        manager.add(TimerDescriptor("sum", 1000, False, lambda a, b: a + b), 1, 2)
        manager.start()
        ...
        manager.stop()
        manager.snapshot()  # (LogEntry(name='sum', inputs=(1, 2), output=3, ...),)
        ```
    """

    def __init__(
        self,
        backend: Optional[TimerBackend] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or default_settings
        self.backend: TimerBackend = backend or APSchedulerBackend(
            min_interval_ms=self.settings.min_interval_ms,
            max_instances=self.settings.max_instances,
        )
        self.journal = ExecutionJournal()
        self._timers: list[TimerDescriptor] = []
        self._activated = False
        self._lock = threading.RLock()

    @property
    def activated(self) -> bool:
        """Whether ``start`` has been called since the last ``stop``."""
        return self._activated

    @property
    def timers(self) -> tuple[TimerDescriptor, ...]:
        with self._lock:
            return tuple(self._timers)

    def add(
        self,
        descriptor: Union[TimerDescriptor, Mapping[str, Any]],
        *args: Any,
    ) -> "TimersManager":
        """
        Register a timer.

        Args:
            descriptor: TimerDescriptor, or a mapping with ``name``, ``delay``,
                ``interval`` and ``job`` keys
            *args: Arguments passed to the job on every firing

        Returns:
            The manager itself, so calls can be chained

        Raises:
            TimerStateError: If the manager has been started
            DuplicateTimerError: If a timer with this name already exists
            TimerTypeError: If a descriptor field is missing or mistyped
            TimerRangeError: If the delay is out of range
        """
        if isinstance(descriptor, Mapping):
            descriptor = TimerDescriptor.from_mapping(descriptor)
        elif not isinstance(descriptor, TimerDescriptor):
            raise TimerTypeError(
                "Timer descriptor must be a TimerDescriptor or a mapping"
            )

        with self._lock:
            if self._activated:
                raise TimerStateError("Cannot add a timer after start")
            if self.index_of(descriptor.name) >= 0:
                raise DuplicateTimerError(descriptor.name)
            validate_descriptor(
                descriptor, self.settings.min_delay_ms, self.settings.max_delay_ms
            )

            descriptor.args = args
            descriptor.handle = None
            self._timers.append(descriptor)

        logger.debug(
            f"Added timer {descriptor.name} (delay={descriptor.delay}ms, "
            f"recurring={descriptor.recurring})"
        )
        return self

    def remove(self, name: str) -> int:
        """
        Disarm a timer and delete it from the registry.

        Returns:
            Index the timer had, or -1 if no timer has this name
        """
        with self._lock:
            index = self.pause(name)
            if index >= 0:
                del self._timers[index]
                logger.debug(f"Removed timer {name}")
            return index

    def start(self) -> None:
        """Arm every registered timer. Does nothing if already started."""
        with self._lock:
            if self._activated:
                return
            for descriptor in self._timers:
                self._arm(descriptor)
            self._activated = True
            logger.info(f"Started {len(self._timers)} timer(s)")

    def stop(self) -> None:
        """Disarm every timer, keeping them registered. Does nothing if not started."""
        with self._lock:
            if not self._activated:
                return
            for descriptor in self._timers:
                self._disarm(descriptor)
            self._activated = False
            logger.info(f"Stopped {len(self._timers)} timer(s)")

    def pause(self, name: str) -> int:
        """
        Disarm one timer. Pausing a timer that is not armed is harmless.

        Returns:
            Index of the timer, or -1 if no timer has this name
        """
        with self._lock:
            index = self.index_of(name)
            if index >= 0:
                self._disarm(self._timers[index])
                logger.debug(f"Paused timer {name}")
            return index

    def resume(self, name: str) -> int:
        """
        Arm one timer with its stored delay, mode and arguments.

        A timer that is already armed is left alone, so it never holds more
        than one scheduler handle.

        Returns:
            Index of the timer, or -1 if no timer has this name
        """
        with self._lock:
            index = self.index_of(name)
            if index < 0:
                return index
            descriptor = self._timers[index]
            if descriptor.armed:
                logger.warning(f"Timer {name} is already running, ignoring resume")
                return index
            self._arm(descriptor)
            logger.debug(f"Resumed timer {name}")
            return index

    def index_of(self, name: str) -> int:
        """
        Resolve a timer name to its registry position.

        Raises:
            TimerTypeError: If name is not a non-empty string
        """
        validate_name(name)
        with self._lock:
            for index, descriptor in enumerate(self._timers):
                if descriptor.name == name:
                    return index
        return -1

    def get(self, name: str) -> Optional[TimerDescriptor]:
        with self._lock:
            index = self.index_of(name)
            return self._timers[index] if index >= 0 else None

    def is_armed(self, name: str) -> bool:
        descriptor = self.get(name)
        return descriptor is not None and descriptor.armed

    def names(self) -> list[str]:
        with self._lock:
            return [descriptor.name for descriptor in self._timers]

    def snapshot(self) -> tuple[LogEntry, ...]:
        """Return the execution log, oldest entry first."""
        return self.journal.snapshot()

    def print(self) -> tuple[LogEntry, ...]:
        """Alias of ``snapshot``."""
        return self.snapshot()

    def shutdown(self) -> None:
        """Stop all timers and release the scheduling backend."""
        self.stop()
        self.backend.shutdown()

    async def __aenter__(self) -> "TimersManager":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def __len__(self) -> int:
        return len(self._timers)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and bool(name) and self.index_of(name) >= 0

    def _arm(self, descriptor: TimerDescriptor) -> None:
        callback = functools.partial(self._execute, descriptor)
        if descriptor.recurring:
            descriptor.handle = self.backend.arm_recurring(descriptor.delay, callback)
        else:
            descriptor.handle = self.backend.arm_once(descriptor.delay, callback)

    def _disarm(self, descriptor: TimerDescriptor) -> None:
        if descriptor.handle is not None:
            self.backend.disarm(descriptor.handle)
            descriptor.handle = None

    def _execute(self, descriptor: TimerDescriptor) -> Optional[Awaitable[None]]:
        """
        Run a timer's job and journal the outcome.

        Exceptions raised by the job are recorded and never propagated. For
        coroutine jobs, the returned coroutine finishes the run and must be
        awaited by the backend.
        """
        if not descriptor.recurring:
            # A fired one-shot timer no longer holds a scheduler resource
            with self._lock:
                descriptor.handle = None

        try:
            result = descriptor.job(*descriptor.args)
        except Exception as e:
            self._record_failure(descriptor, e)
            return None

        if inspect.isawaitable(result):
            return self._finish_async(descriptor, result)

        self.journal.record(descriptor, result)
        return None

    async def _finish_async(
        self, descriptor: TimerDescriptor, pending: Awaitable[Any]
    ) -> None:
        try:
            result = await pending
        except Exception as e:
            self._record_failure(descriptor, e)
            return
        self.journal.record(descriptor, result)

    def _record_failure(self, descriptor: TimerDescriptor, error: Exception) -> None:
        logger.warning(
            f"Timer {descriptor.name} job failed: "
            f"{type(error).__name__}: {exception_message(error)}"
        )
        self.journal.record(descriptor, None, error)
