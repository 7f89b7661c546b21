"""Session summary types exposed to the UI."""

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

PROVIDER = "gemini"
UNTITLED_SESSION = "Untitled Session"

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp as written by the Gemini CLI."""
    if not isinstance(value, str) or not value:
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass
class SessionSummary:
    id: str
    name: str
    project_path: str
    created_at: Optional[str] = None
    last_updated: Optional[str] = None
    message_count: int = 0
    file: Optional[str] = None
    provider: str = PROVIDER

    @property
    def project_name(self) -> str:
        return os.path.basename(self.project_path.rstrip(os.sep)) if self.project_path else ""

    @property
    def sort_key(self) -> datetime:
        """Last-updated time; missing or unparsable values sort earliest."""
        return parse_timestamp(self.last_updated) or _EARLIEST

    def to_dict(self) -> dict:
        # Both key spellings are read by existing clients.
        return {
            "id": self.id,
            "name": self.name,
            "createdAt": self.created_at,
            "created_at": self.created_at,
            "lastUpdated": self.last_updated,
            "updated_at": self.last_updated,
            "projectPath": self.project_path,
            "messageCount": self.message_count,
            "file": self.file,
            "__provider": self.provider,
            "__projectName": self.project_name,
        }
