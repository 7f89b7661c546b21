"""Read, normalize and delete Gemini session transcripts.

Transcripts are single JSON documents that the Gemini CLI rewrites while a
session is running, so reads may observe a partial file. Every read is
retried with a linearly growing delay before the error surfaces.
"""

import logging
import os
import re
import subprocess
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import orjson

from gemini_bridge.services.project_registry import GEMINI_HOME, resolve_project_id
from gemini_bridge.services.session_cache import SessionCache
from gemini_bridge.services.session_locator import chats_dir, find_session_file
from gemini_bridge.types import (
    DisplayMessage,
    DisplayMessageType,
    SessionSummary,
    ToolCallRecord,
)
from gemini_bridge.types.messages import ASSISTANT_ROLES
from gemini_bridge.types.sessions import UNTITLED_SESSION
from gemini_bridge.utils.message_text import content_text, first_text_part
from gemini_bridge.utils.path_codec import resolve_project_root
from gemini_bridge.utils.path_validation import validate_session_path

logger = logging.getLogger(__name__)

READ_RETRIES = 8
READ_RETRY_DELAY_MS = 60

SESSION_FILE_PREFIX = "session-"
SESSION_FILE_SUFFIX = ".json"

# `gemini --list-sessions` rows: "  1. <name> (<age>) [<session id>]"
LIST_SESSIONS_PATTERN = re.compile(r"^\s*\d+\.\s+(.*?)\s+\(.*?\)\s+\[(.*?)\]")
LIST_SESSIONS_TIMEOUT_S = 30


def read_json_with_retry(
    path: str | Path,
    retries: int = READ_RETRIES,
    delay_ms: int = READ_RETRY_DELAY_MS,
) -> Any:
    """Parse a JSON file, retrying while a concurrent writer finishes."""
    last_error: Exception | None = None
    for attempt in range(retries + 1):
        try:
            return orjson.loads(Path(path).read_bytes())
        except (OSError, orjson.JSONDecodeError) as e:
            last_error = e
            if attempt < retries:
                logger.debug("Read of %s failed (attempt %d): %s", path, attempt + 1, e)
                time.sleep(delay_ms * (attempt + 1) / 1000)
    raise last_error


def message_role(raw: dict) -> str:
    role = raw.get("type") or raw.get("role") or ""
    return role if isinstance(role, str) else ""


def to_session_summary(data: dict, working_dir: str, file_name: str) -> SessionSummary:
    """Build the UI summary for a parsed transcript."""
    summary = data.get("summary")
    name = summary if isinstance(summary, str) and summary else UNTITLED_SESSION

    messages = data.get("messages")
    if not isinstance(messages, list):
        messages = []

    if name == UNTITLED_SESSION:
        first_user = next(
            (m for m in messages if isinstance(m, dict) and message_role(m) == "user"),
            None,
        )
        if first_user is not None:
            name = first_text_part(first_user.get("content")) or UNTITLED_SESSION

    return SessionSummary(
        id=data.get("sessionId"),
        name=name,
        project_path=working_dir,
        created_at=data.get("startTime"),
        last_updated=data.get("lastUpdated"),
        message_count=len(messages),
        file=file_name,
    )


def tool_result_output(result: Any) -> str:
    """Render a tool call's stored result as display text."""
    if isinstance(result, str):
        return result
    if isinstance(result, list):
        outputs = []
        for item in result:
            output = _function_response_output(item)
            if output:
                outputs.append(output if isinstance(output, str) else _pretty(output))
        return "\n".join(outputs)
    if result is not None:
        return _pretty(result)
    return ""


def _function_response_output(item: Any) -> Any:
    if not isinstance(item, dict):
        return None
    response = item.get("functionResponse")
    if not isinstance(response, dict):
        return None
    inner = response.get("response")
    if not isinstance(inner, dict):
        return None
    return inner.get("output")


def _pretty(value: Any) -> str:
    try:
        return orjson.dumps(value, option=orjson.OPT_INDENT_2).decode()
    except TypeError:
        return str(value)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def normalize_messages(data: dict, session_id: str, now: str | None = None) -> list[DisplayMessage]:
    """Flatten a transcript into display messages.

    Each transcript message yields at most one text message, followed by a
    tool_use/tool_result pair for every tool call it made.
    """
    now = now or _now_iso()
    raw_messages = data.get("messages")
    if not isinstance(raw_messages, list):
        return []

    result: list[DisplayMessage] = []
    for index, raw in enumerate(raw_messages):
        if not isinstance(raw, dict):
            continue

        if message_role(raw) in ASSISTANT_ROLES:
            msg_type = DisplayMessageType.ASSISTANT
        else:
            msg_type = DisplayMessageType.USER

        msg_id = raw.get("id")
        timestamp = raw.get("timestamp") or now
        text = content_text(raw.get("content"))

        if text.strip():
            result.append(DisplayMessage(
                id=msg_id or f"{session_id}-{index}",
                type=msg_type,
                timestamp=timestamp,
                content=text,
            ))

        tool_calls = raw.get("toolCalls")
        if not isinstance(tool_calls, list):
            continue

        for tool_index, raw_call in enumerate(tool_calls):
            call = ToolCallRecord.from_raw(raw_call)
            call_id = call.id or f"{msg_id or session_id}-{index}-tool-{tool_index}"
            call_time = call.timestamp or timestamp

            result.append(DisplayMessage(
                id=f"{call_id}-use",
                type=DisplayMessageType.TOOL_USE,
                timestamp=call_time,
                tool_name=call.name,
                tool_input=call.args,
                tool_call_id=call_id,
            ))
            result.append(DisplayMessage(
                id=f"{call_id}-result",
                type=DisplayMessageType.TOOL_RESULT,
                timestamp=call_time,
                tool_call_id=call_id,
                output=tool_result_output(call.result),
            ))

    return result


class SessionReader:
    """Lists, reads and deletes the transcripts of one Gemini home directory."""

    def __init__(
        self,
        gemini_home: str | Path | None = None,
        cache: SessionCache | None = None,
        binary: str = "gemini",
        read_retries: int = READ_RETRIES,
        retry_delay_ms: int = READ_RETRY_DELAY_MS,
    ):
        self._gemini_home = Path(gemini_home) if gemini_home else GEMINI_HOME
        self._cache = cache if cache is not None else SessionCache()
        self._binary = binary
        self._read_retries = read_retries
        self._retry_delay_ms = retry_delay_ms

    @property
    def cache(self) -> SessionCache:
        return self._cache

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_sessions(self, project_path: str | None = None) -> list[SessionSummary]:
        """List sessions for a project, most recently updated first."""
        working_dir = resolve_project_root(project_path) or os.getcwd()
        sessions = self._list_from_files(working_dir)

        if not sessions:
            sessions = self._list_from_cli(working_dir)

        unique: dict[str, SessionSummary] = {}
        for session in sessions:
            unique[session.id] = session

        return sorted(unique.values(), key=lambda s: s.sort_key, reverse=True)

    def _list_from_files(self, working_dir: str) -> list[SessionSummary]:
        project_id = resolve_project_id(working_dir, self._gemini_home)
        if not project_id:
            return []

        directory = chats_dir(project_id, self._gemini_home)
        try:
            files = sorted(
                p for p in directory.iterdir()
                if p.name.startswith(SESSION_FILE_PREFIX) and p.name.endswith(SESSION_FILE_SUFFIX)
            )
        except OSError:
            logger.debug("No chats directory for project %s", project_id)
            return []

        sessions = []
        for path in files:
            try:
                data = read_json_with_retry(path, self._read_retries, self._retry_delay_ms)
                if not isinstance(data, dict) or not isinstance(data.get("sessionId"), str):
                    raise ValueError(f"transcript has no session id: {path.name}")
            except (OSError, orjson.JSONDecodeError, ValueError):
                cached = self._cache.get(str(path))
                if cached is not None:
                    cached.project_path = working_dir
                    sessions.append(cached)
                else:
                    logger.debug("Skipping unreadable transcript %s", path)
                continue

            summary = to_session_summary(data, working_dir, path.name)
            sessions.append(summary)
            self._cache.put(str(path), summary)

        return sessions

    def _list_from_cli(self, working_dir: str) -> list[SessionSummary]:
        """Ask the CLI itself for the session list."""
        try:
            proc = subprocess.run(
                [self._binary, "--list-sessions"],
                cwd=working_dir,
                capture_output=True,
                text=True,
                timeout=LIST_SESSIONS_TIMEOUT_S,
                check=True,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("gemini --list-sessions failed: %s", e)
            return []

        sessions = []
        for line in proc.stdout.splitlines():
            if not line.strip():
                continue
            match = LIST_SESSIONS_PATTERN.match(line)
            if match:
                sessions.append(SessionSummary(
                    id=match.group(2),
                    name=match.group(1),
                    project_path=working_dir,
                ))
        return sessions

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def read_messages(self, session_id: str, project_path: str | None = None) -> list[DisplayMessage] | None:
        """Return the display messages of a session, or None if not found."""
        project_root = resolve_project_root(project_path)
        path = find_session_file(session_id, project_root, self._gemini_home)
        if path is None:
            return None

        data = self._read_transcript(path)

        # A scoped or prefix match can point at the wrong file.
        if not _is_transcript_for(data, session_id):
            fallback = find_session_file(session_id, None, self._gemini_home)
            if fallback is not None and fallback != path:
                path = fallback
                data = self._read_transcript(path)

        if not _is_transcript_for(data, session_id):
            logger.info("Session %s not found or invalid at %s", session_id, path)
            return None

        return normalize_messages(data, session_id)

    def _read_transcript(self, path: Path) -> Any:
        try:
            return read_json_with_retry(path, self._read_retries, self._retry_delay_ms)
        except (OSError, orjson.JSONDecodeError):
            logger.debug("Failed to read transcript %s", path, exc_info=True)
            return None

    # ------------------------------------------------------------------
    # Deleting
    # ------------------------------------------------------------------

    def delete_session(self, session_id: str, project_path: str | None = None) -> bool:
        """Delete a session's transcript. Returns False if it was not found."""
        project_root = resolve_project_root(project_path)
        path = find_session_file(session_id, project_root, self._gemini_home)
        if path is None:
            return False

        # A prefix match may belong to another session; unparsable files are
        # still deleted.
        data = self._read_transcript(path)
        if data is not None and not _is_transcript_for(data, session_id):
            fallback = find_session_file(session_id, None, self._gemini_home)
            if fallback is None or fallback == path:
                logger.info("Session %s not found, refusing to delete %s", session_id, path)
                return False
            path = fallback
            if not _is_transcript_for(self._read_transcript(path), session_id):
                return False

        if not validate_session_path(str(path), self._gemini_home):
            logger.warning("Refusing to delete transcript outside Gemini tmp: %s", path)
            return False

        try:
            path.unlink()
        except FileNotFoundError:
            return False

        self._cache.remove(str(path))
        logger.info("Deleted Gemini session %s (%s)", session_id, path)
        return True

    def close(self):
        self._cache.close()


def _is_transcript_for(data: Any, session_id: str) -> bool:
    return isinstance(data, dict) and data.get("sessionId") == session_id
