"""Type definitions for Gemini Session Bridge."""

from gemini_bridge.types.messages import (
    DisplayMessage,
    DisplayMessageType,
    ToolCallRecord,
)
from gemini_bridge.types.sessions import SessionSummary, parse_timestamp
from gemini_bridge.types.events import EventType, StreamEventKind

__all__ = [
    "DisplayMessage",
    "DisplayMessageType",
    "ToolCallRecord",
    "SessionSummary",
    "parse_timestamp",
    "EventType",
    "StreamEventKind",
]
