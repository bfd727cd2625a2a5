"""Tests for the execution journal."""

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from timers_manager import ExecutionJournal, TimerDescriptor


@pytest.fixture
def journal():
    return ExecutionJournal()


@pytest.fixture
def descriptor():
    timer = TimerDescriptor("sum", 100, False, lambda a, b: a + b)
    timer.args = (1, 2)
    return timer


def make_error():
    try:
        raise RuntimeError("We have a problem!")
    except RuntimeError as e:
        return e


class TestExecutionJournal:
    """Test recording and reading journal entries."""

    def test_record_success(self, journal, descriptor):
        before = datetime.now(timezone.utc)
        entry = journal.record(descriptor, 3)

        assert entry.name == "sum"
        assert entry.inputs == (1, 2)
        assert entry.output == 3
        assert entry.error is None
        assert not entry.failed
        assert before <= entry.created <= datetime.now(timezone.utc)

    def test_record_failure(self, journal, descriptor):
        entry = journal.record(descriptor, None, make_error())

        assert entry.failed
        assert entry.output is None
        assert entry.error.name == "RuntimeError"
        assert entry.error.message == "We have a problem!"
        assert "Traceback" in entry.error.stack
        assert "make_error" in entry.error.stack

    def test_output_dropped_when_error_present(self, journal, descriptor):
        entry = journal.record(descriptor, "partial", make_error())
        assert entry.output is None

    def test_record_does_not_mutate_descriptor(self, journal, descriptor):
        journal.record(descriptor, 3)
        assert descriptor.args == (1, 2)
        assert descriptor.handle is None

    def test_snapshot_is_chronological_and_immutable(self, journal, descriptor):
        for value in range(3):
            journal.record(descriptor, value)

        snapshot = journal.snapshot()
        assert isinstance(snapshot, tuple)
        assert [entry.output for entry in snapshot] == [0, 1, 2]

        journal.record(descriptor, 3)
        assert len(snapshot) == 3
        assert len(journal) == 4

    def test_entries_are_frozen(self, journal, descriptor):
        entry = journal.record(descriptor, 3)
        with pytest.raises(ValidationError):
            entry.output = 4

    def test_filters(self, journal, descriptor):
        other = TimerDescriptor("other", 100, True, lambda: None)
        journal.record(descriptor, 3)
        journal.record(other, None, make_error())
        journal.record(descriptor, 3)

        assert len(journal.entries_for("sum")) == 2
        assert [entry.name for entry in journal.failures()] == ["other"]
        assert [entry.name for entry in journal] == ["sum", "other", "sum"]


class TestJournalExport:
    """Test dictionary and JSON export."""

    def test_to_dict_keys(self, journal, descriptor):
        journal.record(descriptor, 3)
        journal.record(descriptor, None, make_error())
        success, failure = journal.to_dicts()

        assert set(success) == {"name", "in", "out", "created"}
        assert success["in"] == [1, 2]
        assert success["out"] == 3
        assert failure["error"]["message"] == "We have a problem!"
        assert set(failure["error"]) == {"name", "message", "stack"}

    def test_dump_json_handles_arbitrary_output(self, journal, descriptor):
        journal.record(descriptor, object())
        data = json.loads(journal.dump_json())
        assert data[0]["name"] == "sum"
        assert data[0]["out"].startswith("<object object")
