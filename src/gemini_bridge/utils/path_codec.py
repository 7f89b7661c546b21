"""Decode encoded project directory names and resolve project roots."""

import os
import re


def decode_path(encoded: str) -> str:
    """Decode an encoded project directory name to a filesystem path.

    -home-wiz-AI-LLM → /home/wiz/AI/LLM
    """
    if not encoded:
        return ""
    encoded = strip_composite_suffix(encoded)
    return encoded.replace("-", "/")


def strip_composite_suffix(project_name: str) -> str:
    """Remove the ::hex suffix from composite project names.

    -home-wiz-project::a1b2c3d4 → -home-wiz-project
    """
    match = re.match(r'^(.+?)::[0-9a-fA-F]{8}$', project_name)
    if match:
        return match.group(1)
    return project_name


def resolve_project_root(project_param: str | None) -> str | None:
    """Turn a UI-supplied project reference into an absolute project root.

    Absolute paths are returned unchanged. Encoded project names
    (``-home-wiz-app``) are decoded. Anything else resolves to None.
    """
    if not project_param or not isinstance(project_param, str):
        return None

    if os.path.isabs(project_param):
        return project_param

    decoded = decode_path(project_param)
    if decoded and os.path.isabs(decoded):
        return decoded
    return None
