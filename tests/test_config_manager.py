"""Tests for gemini_bridge.services.config_manager."""

from pathlib import Path

import pytest

from gemini_bridge.services.config_manager import ConfigManager


@pytest.fixture
def config(qapp, tmp_path):
    """Create a ConfigManager with isolated QSettings."""
    from PySide6.QtCore import QSettings
    QSettings.setDefaultFormat(QSettings.IniFormat)
    QSettings.setPath(QSettings.IniFormat, QSettings.UserScope, str(tmp_path / "config"))
    cm = ConfigManager()
    cm._settings.clear()
    return cm


# ---------------------------------------------------------------------------
# 1. Defaults
# ---------------------------------------------------------------------------

def test_default_strings(config):
    assert config.get_string("gemini/binary") == "gemini"
    assert config.get_string("gemini/defaultModel") == "auto-gemini-3"


def test_default_int(config):
    assert config.get_int("sessions/readRetries") == 8
    assert config.get_int("sessions/readRetryDelayMs") == 60


def test_default_bool(config):
    assert config.get_bool("advanced/debugLogging") is False


def test_unknown_key(config):
    assert config.get_string("nope/key") == ""
    assert config.get_int("nope/key") == 0


# ---------------------------------------------------------------------------
# 2. Set and get
# ---------------------------------------------------------------------------

def test_set_get_string(config):
    config.set_string("gemini/binary", "/opt/bin/gemini")
    assert config.get_string("gemini/binary") == "/opt/bin/gemini"
    assert config.gemini_binary() == "/opt/bin/gemini"


def test_set_get_int(config):
    config.set_int("sessions/readRetries", 3)
    assert config.get_int("sessions/readRetries") == 3


def test_set_get_bool(config):
    config.set_bool("advanced/debugLogging", True)
    assert config.get_bool("advanced/debugLogging") is True


def test_non_integer_falls_back(config):
    config.set_string("sessions/readRetries", "many")
    assert config.get_int("sessions/readRetries") == 8


# ---------------------------------------------------------------------------
# 3. Change notification
# ---------------------------------------------------------------------------

def test_settings_changed_signal(config):
    received = []
    config.settings_changed.connect(received.append)
    config.set_string("gemini/approvalMode", "yolo")
    assert received == ["gemini/approvalMode"]


# ---------------------------------------------------------------------------
# 4. Derived values
# ---------------------------------------------------------------------------

def test_gemini_home_expands_user(config):
    assert config.gemini_home() == Path.home() / ".gemini"


def test_gemini_home_override(config, tmp_path):
    config.set_string("gemini/homeDir", str(tmp_path / "g"))
    assert config.gemini_home() == tmp_path / "g"


def test_cli_config(config):
    assert config.cli_config() == {"model": "auto-gemini-3", "approvalMode": "default"}
    config.set_string("gemini/defaultModel", "gemini-2.5-pro")
    assert config.cli_config()["model"] == "gemini-2.5-pro"
