"""
Type definitions for the timers manager.
"""

import traceback
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict

# A timer job is any callable; coroutine functions are awaited when fired
TimerJob = Callable[..., Union[Any, Awaitable[Any]]]


def exception_message(error: BaseException) -> str:
    """Return ``str(error)``, falling back to ``repr`` when ``__str__`` raises."""
    try:
        return str(error)
    except Exception:
        pass
    try:
        return repr(error)
    except Exception:
        return f"<unprintable {type(error).__name__}>"


@dataclass(eq=False)
class TimerDescriptor:
    """
    Mutable descriptor for one named timer.

    The manager stores the instance it was given and attaches the bound
    arguments and the backend handle to it in place. Two descriptors are
    never equal unless they are the same object.
    """

    name: str
    delay: float
    recurring: bool
    job: TimerJob
    args: tuple = field(default=(), repr=False)
    handle: Optional[object] = field(default=None, repr=False)

    @property
    def armed(self) -> bool:
        return self.handle is not None

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "TimerDescriptor":
        """
        Build a descriptor from ``{"name", "delay", "interval", "job"}``.

        ``recurring`` is accepted as an alias of ``interval``. Missing keys
        become ``None`` so that validation reports them.
        """
        recurring = mapping.get("recurring", mapping.get("interval"))
        return cls(
            name=mapping.get("name"),  # type: ignore[arg-type]
            delay=mapping.get("delay"),  # type: ignore[arg-type]
            recurring=recurring,  # type: ignore[arg-type]
            job=mapping.get("job"),  # type: ignore[arg-type]
        )


class ErrorInfo(BaseModel):
    """Details of an exception raised by a timer job."""

    model_config = ConfigDict(frozen=True)

    name: str
    message: str
    stack: str

    @classmethod
    def from_exception(cls, error: BaseException) -> "ErrorInfo":
        return cls(
            name=type(error).__name__,
            message=exception_message(error),
            stack="".join(traceback.format_exception(error)),
        )


class LogEntry(BaseModel):
    """
    One execution of a timer job.

    ``output`` is ``None`` and ``error`` is set when the job raised.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    inputs: tuple[Any, ...]
    output: Any = None
    created: datetime
    error: Optional[ErrorInfo] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the entry to a plain dictionary for printing or JSON export.

        Returns:
            Dictionary with ``name``, ``in``, ``out``, ``created`` and, for
            failed executions only, ``error``
        """
        data: dict[str, Any] = {
            "name": self.name,
            "in": list(self.inputs),
            "out": self.output,
            "created": self.created.isoformat(),
        }
        if self.error is not None:
            data["error"] = self.error.model_dump()
        return data
