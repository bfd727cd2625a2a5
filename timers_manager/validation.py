"""
Validation helpers for timer descriptors and timer names.

Every check raises before anything is mutated, so a failed registration
leaves the manager untouched.
"""

import math
from typing import Any

from .exceptions import TimerRangeError, TimerTypeError
from .types import TimerDescriptor


def validate_name(name: Any) -> str:
    if not isinstance(name, str) or not name:
        raise TimerTypeError("Timer name must be a non-empty string")
    return name


def validate_delay(delay: Any, min_ms: float, max_ms: float) -> float:
    # bool is an int subclass but never a meaningful delay
    if isinstance(delay, bool) or not isinstance(delay, (int, float)):
        raise TimerTypeError("Timer delay must be a number of milliseconds")
    if math.isnan(delay) or not min_ms <= delay <= max_ms:
        raise TimerRangeError(
            f"Timer delay must be in range [{min_ms:g}..{max_ms:g}], got {delay!r}"
        )
    return delay


def validate_recurring(recurring: Any) -> bool:
    if not isinstance(recurring, bool):
        raise TimerTypeError("Timer interval flag must be a boolean")
    return recurring


def validate_job(job: Any) -> None:
    if not callable(job):
        raise TimerTypeError("Timer job must be callable")


def validate_descriptor(
    descriptor: TimerDescriptor, min_delay_ms: float, max_delay_ms: float
) -> None:
    """
    Validate all descriptor fields except name uniqueness.

    Args:
        descriptor: Descriptor to check
        min_delay_ms: Smallest accepted delay
        max_delay_ms: Largest accepted delay

    Raises:
        TimerTypeError: If a field is missing or has the wrong type
        TimerRangeError: If the delay is outside ``[min_delay_ms, max_delay_ms]``
    """
    validate_name(descriptor.name)
    validate_delay(descriptor.delay, min_delay_ms, max_delay_ms)
    validate_recurring(descriptor.recurring)
    validate_job(descriptor.job)
