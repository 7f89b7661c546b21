"""Path validation for transcript files under the Gemini home directory."""

import os
from pathlib import Path


def get_allowed_roots(gemini_home: str | Path) -> list[str]:
    """Return the directories transcript files may live under."""
    return [
        os.path.join(os.path.expanduser(str(gemini_home)), "tmp"),
    ]


def is_path_allowed(path: str, gemini_home: str | Path, extra_roots: list[str] | None = None) -> bool:
    """Validate that a path is within allowed directories.

    Resolves symlinks before checking to prevent escape attacks.
    """
    try:
        resolved = os.path.realpath(os.path.expanduser(path))
    except (OSError, ValueError):
        return False

    allowed = get_allowed_roots(gemini_home)
    if extra_roots:
        allowed.extend(extra_roots)

    for root in allowed:
        try:
            resolved_root = os.path.realpath(os.path.expanduser(root))
            if resolved.startswith(resolved_root + os.sep):
                return True
        except (OSError, ValueError):
            continue

    return False


def validate_session_path(path: str, gemini_home: str | Path) -> bool:
    """Validate that a path points to a transcript file inside <gemini home>/tmp/."""
    if not str(path).endswith(".json"):
        return False
    return is_path_allowed(str(path), gemini_home)
