"""Utility functions for CLI operations."""

from typing import Optional


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"


def truncate(text: Optional[str], width: int) -> str:
    if not text:
        return ""
    text = " ".join(text.split())
    if len(text) <= width:
        return text
    return text[: max(width - 3, 0)] + "..."


def format_file_table(files: list[dict]) -> str:
    """
    Render file records returned by the API as an aligned text table.

    Search hits carry a snippet, which is printed indented below the row.

    Args:
        files: List of file dictionaries from GET /files

    Returns:
        Multi-line table string
    """
    header = f"{'FILE ID':<36}  {'NAME':<32}  {'KIND':<8}  {'SIZE':>10}  TAGS"
    lines = [header, "-" * len(header)]

    for f in files:
        tags = ", ".join(f"#{t}" for t in f.get('tags', []))
        lines.append(
            f"{f['file_id']:<36}  {truncate(f.get('display_name'), 32):<32}  "
            f"{f.get('content_kind', ''):<8}  {format_file_size(f.get('size', 0)):>10}  {tags}"
        )
        if f.get('snippet'):
            lines.append(f"    {truncate(f['snippet'], 100)}")

    return "\n".join(lines)
