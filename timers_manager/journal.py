"""
Execution journal - append-only record of every timer job execution.
"""

import json
import threading
from collections.abc import Iterator
from datetime import datetime, timezone
from typing import Any, Optional

from .types import ErrorInfo, LogEntry, TimerDescriptor


class ExecutionJournal:
    """
    Append-only, chronologically ordered log of timer job executions.

    Entries are immutable and are never removed or reordered.
    """

    def __init__(self):
        self._entries: list[LogEntry] = []
        self._lock = threading.Lock()

    def record(
        self,
        descriptor: TimerDescriptor,
        output: Any = None,
        error: Optional[BaseException] = None,
    ) -> LogEntry:
        """
        Append an entry for one execution of ``descriptor``'s job.

        Args:
            descriptor: The timer whose job ran (read only)
            output: Value returned by the job, ``None`` on failure
            error: Exception raised by the job, if any

        Returns:
            The appended LogEntry
        """
        entry = LogEntry(
            name=descriptor.name,
            inputs=descriptor.args,
            output=None if error is not None else output,
            created=datetime.now(timezone.utc),
            error=ErrorInfo.from_exception(error) if error is not None else None,
        )
        with self._lock:
            self._entries.append(entry)
        return entry

    def snapshot(self) -> tuple[LogEntry, ...]:
        """Return every entry recorded so far, oldest first."""
        with self._lock:
            return tuple(self._entries)

    def entries_for(self, name: str) -> list[LogEntry]:
        return [entry for entry in self.snapshot() if entry.name == name]

    def failures(self) -> list[LogEntry]:
        return [entry for entry in self.snapshot() if entry.failed]

    def to_dicts(self) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in self.snapshot()]

    def dump_json(self, **kwargs: Any) -> str:
        """Serialize the journal as a JSON array; unserializable values use repr()."""
        kwargs.setdefault("ensure_ascii", False)
        kwargs.setdefault("default", repr)
        return json.dumps(self.to_dicts(), **kwargs)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(self.snapshot())
