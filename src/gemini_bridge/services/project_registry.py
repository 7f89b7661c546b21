"""Gemini project registry resolver: maps project paths to project IDs.

The Gemini CLI keeps ``~/.gemini/projects.json`` in the form
``{"projects": {"/abs/path": "short-id", ...}}``. The file is owned by the
CLI; it is read on every lookup and never written here.
"""

import logging
import os
from pathlib import Path

import orjson

logger = logging.getLogger(__name__)

GEMINI_HOME = Path.home() / ".gemini"
REGISTRY_FILENAME = "projects.json"


def registry_path(gemini_home: str | Path | None = None) -> Path:
    home = Path(gemini_home) if gemini_home else GEMINI_HOME
    return home / REGISTRY_FILENAME


def load_registry(path: str | Path) -> dict[str, str]:
    """Read the registry's path → ID mapping. Returns {} when unusable."""
    try:
        data = orjson.loads(Path(path).read_bytes())
    except (OSError, orjson.JSONDecodeError):
        logger.debug("Gemini project registry unavailable at %s", path, exc_info=True)
        return {}

    projects = data.get("projects") if isinstance(data, dict) else None
    if not isinstance(projects, dict):
        return {}
    return {
        path: project_id
        for path, project_id in projects.items()
        if isinstance(path, str) and isinstance(project_id, str) and project_id
    }


def resolve_project_id(project_path: str, gemini_home: str | Path | None = None) -> str | None:
    """Return the Gemini project ID registered for ``project_path``.

    Tries an exact match on the absolute path, then compares real paths so
    that symlinked or aliased directories still resolve.
    """
    if not project_path:
        return None

    resolved = os.path.abspath(project_path)
    projects = load_registry(registry_path(gemini_home))
    if not projects:
        return None

    project_id = projects.get(resolved)
    if project_id:
        return project_id

    try:
        target = os.path.realpath(resolved, strict=True)
    except OSError:
        logger.debug("No registry entry for %s", resolved)
        return None

    for registered_path, candidate_id in projects.items():
        try:
            if os.path.realpath(registered_path, strict=True) == target:
                return candidate_id
        except (OSError, TypeError, ValueError):
            # Broken or inaccessible registry entry
            continue

    logger.debug("No registry entry for %s", resolved)
    return None
