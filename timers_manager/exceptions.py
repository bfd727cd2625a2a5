"""
Exceptions raised synchronously by the timers manager.

Errors raised by a timer's job never surface here; they are captured in the
execution journal instead.
"""


class TimerError(Exception):
    """Base class for every error raised by the timers manager."""


class TimerTypeError(TimerError, TypeError):
    """A descriptor field or timer name has the wrong type or is missing."""


class TimerRangeError(TimerError, ValueError):
    """A timer delay lies outside the accepted range."""


class TimerStateError(TimerError, RuntimeError):
    """The operation is not allowed in the manager's current state."""


class DuplicateTimerError(TimerStateError):
    """A timer with the same name is already registered."""

    def __init__(self, name: str):
        super().__init__(f"Timer '{name}' already exists")
        self.name = name
