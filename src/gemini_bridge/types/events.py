"""Stream event kinds read from the Gemini CLI and event tags sent to the UI."""

from enum import Enum
from typing import Any


class StreamEventKind(str, Enum):
    """The ``type`` discriminator of a stream-json line."""
    INIT = "init"
    MESSAGE = "message"
    TOOL_USE = "tool_use"
    TOOL_RESULT = "tool_result"
    RESULT = "result"
    PASSTHROUGH = "passthrough"

    @classmethod
    def of(cls, payload: Any) -> "StreamEventKind":
        tag = payload.get("type") if isinstance(payload, dict) else None
        try:
            return cls(tag)
        except ValueError:
            return cls.PASSTHROUGH


class EventType(str, Enum):
    """Tags of the normalized events delivered to the UI."""
    SYSTEM = "gemini-system"
    SESSION_CREATED = "session-created"
    USER = "gemini-user"
    RESPONSE = "claude-response"
    TOOL_RESULT = "gemini-tool-result"
    RESULT = "gemini-result"
    PASSTHROUGH = "gemini-response"
    OUTPUT = "gemini-output"
    ERROR = "gemini-error"
    COMPLETE = "claude-complete"
