"""Tests for the gemini-bridge command line."""

import orjson
import pytest

from gemini_bridge.app import build_parser, run
from gemini_bridge.services.config_manager import ConfigManager
from helpers import make_transcript, write_transcript


@pytest.fixture
def settings(qapp, tmp_path):
    """Isolated settings under the same names the entry point uses."""
    from PySide6.QtCore import QSettings
    qapp.setOrganizationName("gemini-session-bridge")
    qapp.setApplicationName("Gemini Session Bridge")
    QSettings.setDefaultFormat(QSettings.IniFormat)
    QSettings.setPath(QSettings.IniFormat, QSettings.UserScope, str(tmp_path / "config"))
    cm = ConfigManager()
    cm._settings.clear()
    yield cm
    cm._settings.sync()


def _stdout_json(capsys):
    return orjson.loads(capsys.readouterr().out)


class TestParser:
    def test_run_options(self):
        args = build_parser().parse_args(["run", "hi", "--session-id", "abc", "--yolo"])
        assert args.command == "run"
        assert args.prompt == "hi"
        assert args.session_id == "abc"
        assert args.yolo is True

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestCommands:
    def test_config(self, settings, capsys):
        settings.set_string("gemini/defaultModel", "gemini-2.5-pro")
        settings._settings.sync()

        assert run(["config"]) == 0
        assert _stdout_json(capsys) == {"model": "gemini-2.5-pro", "approvalMode": "default"}

    def test_sessions(self, settings, gemini_home, registered_project, capsys):
        settings.set_string("gemini/homeDir", str(gemini_home))
        settings._settings.sync()
        write_transcript(gemini_home, "proj1", "session-a.json",
                         make_transcript("abc", summary="Fix login"))

        assert run(["sessions", "--project", str(registered_project)]) == 0
        sessions = _stdout_json(capsys)
        assert [s["id"] for s in sessions] == ["abc"]
        assert sessions[0]["name"] == "Fix login"
        assert sessions[0]["__provider"] == "gemini"

    def test_messages_not_found(self, settings, gemini_home, capsys):
        settings.set_string("gemini/homeDir", str(gemini_home))
        settings._settings.sync()

        assert run(["messages", "missing-id"]) == 1
        assert "not found" in capsys.readouterr().err
