"""Application configuration manager wrapping QSettings."""

import logging
from pathlib import Path

from PySide6.QtCore import QObject, Signal, Slot, QSettings

logger = logging.getLogger(__name__)

# Default values
DEFAULTS = {
    "gemini/binary": "gemini",
    "gemini/homeDir": "~/.gemini",
    "gemini/defaultModel": "auto-gemini-3",
    "gemini/approvalMode": "default",
    "sessions/readRetries": 8,
    "sessions/readRetryDelayMs": 60,
    "advanced/debugLogging": False,
}


class ConfigManager(QObject):
    """Centralized bridge settings."""

    settings_changed = Signal(str)  # key

    def __init__(self, parent=None):
        super().__init__(parent)
        self._settings = QSettings()

    @Slot(str, result=str)
    def get_string(self, key: str) -> str:
        return str(self._settings.value(key, DEFAULTS.get(key, "")))

    @Slot(str, result=int)
    def get_int(self, key: str) -> int:
        val = self._settings.value(key, DEFAULTS.get(key, 0))
        try:
            return int(val)
        except (ValueError, TypeError):
            logger.debug("Ignoring non-integer setting %s=%r", key, val)
            return DEFAULTS.get(key, 0)

    @Slot(str, result=bool)
    def get_bool(self, key: str) -> bool:
        val = self._settings.value(key, DEFAULTS.get(key, False))
        if isinstance(val, bool):
            return val
        if isinstance(val, str):
            return val.lower() in ("true", "1", "yes")
        return bool(val)

    @Slot(str, str)
    def set_string(self, key: str, value: str):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    @Slot(str, int)
    def set_int(self, key: str, value: int):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    @Slot(str, bool)
    def set_bool(self, key: str, value: bool):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    def gemini_home(self) -> Path:
        """Directory holding projects.json and the tmp/ transcript tree."""
        return Path(self.get_string("gemini/homeDir")).expanduser()

    def gemini_binary(self) -> str:
        return self.get_string("gemini/binary")

    @Slot(result=dict)
    def cli_config(self) -> dict:
        """Model and approval mode reported to the UI."""
        return {
            "model": self.get_string("gemini/defaultModel"),
            "approvalMode": self.get_string("gemini/approvalMode"),
        }
