"""Tests for the demo timer set and the command line entry point."""

import json

import pytest

from timers_manager import TimersManager, VirtualBackend
from timers_manager import __main__ as cli
from timers_manager.demo import build_demo


class TestDemo:
    """Test the demo timers on a virtual clock."""

    def test_build_demo(self, test_settings):
        manager = build_demo(
            TimersManager(backend=VirtualBackend(), settings=test_settings)
        )
        assert manager.names() == ["t1", "t2", "t3", "t4", "t5"]
        assert manager.get("t2").args == (1, 2)
        assert manager.get("t4").args == (22, 33)

    def test_demo_log(self, test_settings):
        backend = VirtualBackend()
        manager = build_demo(TimersManager(backend=backend, settings=test_settings))
        manager.start()
        manager.remove("t3")
        backend.advance(1500)
        manager.stop()

        outputs = {entry.name: entry for entry in manager.snapshot()}
        assert "t3" not in outputs
        assert outputs["t2"].output == 3
        assert outputs["t4"].output == 55
        assert outputs["t5"].error.message == "We have a problem!"
        assert len(manager.journal.entries_for("t4")) == 3


class TestCommandLine:
    """Test ``python -m timers_manager``."""

    @pytest.fixture(autouse=True)
    def quiet_logging(self, monkeypatch):
        monkeypatch.setattr(cli, "configure_logging", lambda settings: None)

    def test_json_output(self, capsys):
        cli.main(["--seconds", "1.5", "--json"])
        entries = json.loads(capsys.readouterr().out)

        names = {entry["name"] for entry in entries}
        assert "t3" not in names
        assert {"t2", "t4", "t5"} <= names
        t5 = next(entry for entry in entries if entry["name"] == "t5")
        assert t5["error"]["message"] == "We have a problem!"
        assert t5["out"] is None

    def test_plain_output(self, capsys):
        cli.main(["--seconds", "0.6"])
        out = capsys.readouterr().out
        assert "'name': 't4'" in out
