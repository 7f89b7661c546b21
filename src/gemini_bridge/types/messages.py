"""Display message types derived from Gemini session transcripts."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class DisplayMessageType(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    TOOL_USE = "tool_use"
    TOOL_RESULT = "tool_result"


# Transcript roles that map to the assistant side of the conversation
ASSISTANT_ROLES = frozenset({"model", "gemini", "assistant"})


@dataclass
class DisplayMessage:
    id: str
    type: DisplayMessageType
    timestamp: str
    content: str = ""
    tool_name: str = ""
    tool_input: Any = None
    tool_call_id: str = ""
    output: str = ""

    def to_dict(self) -> dict:
        base = {"id": self.id, "type": self.type.value, "timestamp": self.timestamp}
        if self.type == DisplayMessageType.TOOL_USE:
            base.update({
                "toolName": self.tool_name,
                "toolInput": self.tool_input,
                "toolCallId": self.tool_call_id,
            })
        elif self.type == DisplayMessageType.TOOL_RESULT:
            base.update({
                "toolCallId": self.tool_call_id,
                "output": self.output,
            })
        else:
            base["content"] = self.content
        return base


@dataclass
class ToolCallRecord:
    """A tool invocation as stored inside a transcript message."""
    id: Optional[str]
    name: str
    args: Any = None
    result: Any = None
    timestamp: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "ToolCallRecord":
        if not isinstance(raw, dict):
            raw = {}
        return cls(
            id=raw.get("id") or None,
            name=raw.get("displayName") or raw.get("name") or "Tool",
            args=raw.get("args"),
            result=raw.get("result"),
            timestamp=raw.get("timestamp") or None,
        )
