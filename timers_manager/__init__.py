"""
Named timer management for asyncio applications.

This package provides a registry of uniquely named one-shot and recurring
timers with coordinated start/stop, per-timer pause/resume/remove, and an
append-only journal of every job execution, built on top of APScheduler.
"""

from .backends import APSchedulerBackend, TimerBackend, VirtualBackend
from .config import Settings
from .exceptions import (
    DuplicateTimerError,
    TimerError,
    TimerRangeError,
    TimerStateError,
    TimerTypeError,
)
from .journal import ExecutionJournal
from .manager import TimersManager
from .types import ErrorInfo, LogEntry, TimerDescriptor, TimerJob

__all__ = [
    "TimersManager",
    "TimerDescriptor",
    "TimerJob",
    "LogEntry",
    "ErrorInfo",
    "ExecutionJournal",
    "TimerBackend",
    "APSchedulerBackend",
    "VirtualBackend",
    "Settings",
    "TimerError",
    "TimerTypeError",
    "TimerRangeError",
    "TimerStateError",
    "DuplicateTimerError",
]
