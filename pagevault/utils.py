"""Utility helper functions for the PageVault server."""

import uuid
from datetime import datetime, timezone
from typing import Optional


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def get_current_timestamp() -> str:
    """
    Get current UTC timestamp in ISO format.

    Microseconds are always present so timestamps sort lexically.

    Returns:
        Current timestamp as ISO format string
    """
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value)


def escape_like(value: str) -> str:
    """
    Escape LIKE wildcards so user input matches literally (use with ESCAPE '\\').

    Args:
        value: Raw search term

    Returns:
        Escaped term
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def make_snippet(text: Optional[str], query: Optional[str], radius: int) -> Optional[str]:
    """
    Cut an excerpt of text around the first case-insensitive hit of query.

    Args:
        text: Text to excerpt
        query: Search term; when absent or not found, the head of text is returned
        radius: Characters kept on each side of the hit

    Returns:
        Excerpt with ellipses marking cut ends, or None when text is empty
    """
    if not text:
        return None

    position = text.lower().find(query.lower()) if query else -1
    if position < 0:
        head = text[: radius * 2]
        return head + ("..." if len(text) > len(head) else "")

    start = max(0, position - radius)
    end = min(len(text), position + len(query) + radius)
    snippet = text[start:end].strip()
    if start > 0:
        snippet = "..." + snippet
    if end < len(text):
        snippet = snippet + "..."
    return snippet
