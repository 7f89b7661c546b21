"""Extract plain text from Gemini message content."""

from typing import Any


def content_text(content: Any) -> str:
    """Flatten message content into a single string.

    Content is either a string or a list of parts, where each part is a
    string or an object carrying a ``text`` field. Other values yield "".
    """
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict):
                text = part.get("text")
                parts.append(text if isinstance(text, str) else "")
        return "".join(parts)
    return ""


def first_text_part(content: Any) -> str:
    """Return the first non-empty text in a message's content, or ""."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        for part in content:
            if isinstance(part, dict) and isinstance(part.get("text"), str) and part["text"]:
                return part["text"]
    return ""
