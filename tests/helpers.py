"""Shared test helpers."""

import json
import stat
from pathlib import Path


def write_registry(gemini_home: Path, projects: dict):
    (gemini_home / "projects.json").write_text(json.dumps({"projects": projects}))


def make_transcript(session_id, messages=None, summary=None,
                    start="2026-02-13T10:00:00.000Z", updated="2026-02-13T10:05:00.000Z"):
    data = {
        "sessionId": session_id,
        "projectHash": "abc123",
        "startTime": start,
        "lastUpdated": updated,
        "messages": messages if messages is not None else [],
    }
    if summary is not None:
        data["summary"] = summary
    return data


def write_transcript(gemini_home: Path, project_id: str, file_name: str, data) -> Path:
    chats = gemini_home / "tmp" / project_id / "chats"
    chats.mkdir(parents=True, exist_ok=True)
    path = chats / file_name
    path.write_text(data if isinstance(data, str) else json.dumps(data))
    return path


def make_fake_cli(directory: Path, stdout_lines=(), stderr_text="", exit_code=0,
                  sleep_s=0) -> str:
    """Write an executable shell script that stands in for the gemini CLI.

    The script records its arguments to ``args.txt`` next to itself.
    """
    script = directory / "fake-gemini"
    parts = [
        "#!/bin/sh",
        f"printf '%s\\n' \"$@\" > '{directory / 'args.txt'}'",
    ]
    if stdout_lines:
        parts += ["cat <<'__STDOUT__'", *stdout_lines, "__STDOUT__"]
    if stderr_text:
        parts += ["cat >&2 <<'__STDERR__'", stderr_text, "__STDERR__"]
    if sleep_s:
        parts.append(f"sleep {sleep_s}")
    parts.append(f"exit {exit_code}")
    script.write_text("\n".join(parts) + "\n")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(script)


def event_types(events) -> list[str]:
    return [e["type"] for e in events]
