"""Services for Gemini Session Bridge."""

from gemini_bridge.services.config_manager import ConfigManager
from gemini_bridge.services.gemini_process import (
    GeminiProcessManager,
    GeminiRun,
    SpawnOptions,
    build_args,
)
from gemini_bridge.services.process_table import ProcessTable
from gemini_bridge.services.project_registry import resolve_project_id
from gemini_bridge.services.session_cache import SessionCache
from gemini_bridge.services.session_locator import find_session_file
from gemini_bridge.services.session_reader import SessionReader
from gemini_bridge.services.stream_translator import StreamTranslator

__all__ = [
    "ConfigManager",
    "GeminiProcessManager",
    "GeminiRun",
    "SpawnOptions",
    "build_args",
    "ProcessTable",
    "resolve_project_id",
    "SessionCache",
    "find_session_file",
    "SessionReader",
    "StreamTranslator",
]
