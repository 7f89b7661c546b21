"""Locate Gemini transcript files on disk.

Transcripts live under ``<gemini home>/tmp/<project id>/chats/``. A lookup
first scans the directory of the project's registered ID, then falls back
to scanning every project directory.
"""

import logging
from pathlib import Path

import orjson

from gemini_bridge.services.project_registry import GEMINI_HOME, resolve_project_id

logger = logging.getLogger(__name__)

TRANSCRIPT_SUFFIX = ".json"
PREFIX_LENGTH = 8


def tmp_root(gemini_home: str | Path | None = None) -> Path:
    return (Path(gemini_home) if gemini_home else GEMINI_HOME) / "tmp"


def chats_dir(project_id: str, gemini_home: str | Path | None = None) -> Path:
    return tmp_root(gemini_home) / project_id / "chats"


def find_session_in_chats_dir(directory: str | Path, session_id: str) -> Path | None:
    """Find the transcript for ``session_id`` in one chats directory.

    An exact ``sessionId`` match always wins over a filename-prefix match,
    since unrelated sessions can share their first 8 characters.
    """
    directory = Path(directory)
    try:
        candidates = sorted(p for p in directory.iterdir() if p.name.endswith(TRANSCRIPT_SUFFIX))
    except OSError:
        return None

    for path in candidates:
        try:
            data = orjson.loads(path.read_bytes())
        except (OSError, orjson.JSONDecodeError):
            continue
        if isinstance(data, dict) and data.get("sessionId") == session_id:
            return path

    prefix = session_id[:PREFIX_LENGTH]
    for path in candidates:
        if prefix in path.name:
            logger.debug("Matched %s to session %s by filename prefix", path.name, session_id)
            return path

    return None


def find_session_file(
    session_id: str,
    project_root: str | None = None,
    gemini_home: str | Path | None = None,
) -> Path | None:
    """Return the transcript path for ``session_id``, or None."""
    if not session_id:
        return None

    if project_root:
        project_id = resolve_project_id(project_root, gemini_home)
        if project_id:
            found = find_session_in_chats_dir(chats_dir(project_id, gemini_home), session_id)
            if found:
                return found

    root = tmp_root(gemini_home)
    try:
        entries = sorted(root.iterdir())
    except OSError:
        logger.debug("Gemini tmp directory unavailable: %s", root)
        return None

    for entry in entries:
        if not entry.is_dir():
            continue
        found = find_session_in_chats_dir(entry / "chats", session_id)
        if found:
            return found

    return None
