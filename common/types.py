"""Shared data type definitions (ContentKind)."""

from enum import Enum
from typing import Optional

from common.constants import HTML_EXTENSIONS, MARKDOWN_EXTENSIONS


class ContentKind(str, Enum):
    """
    Declared format of a stored document.
    """
    HTML = "html"
    MARKDOWN = "markdown"

    @property
    def content_type(self) -> str:
        if self is ContentKind.MARKDOWN:
            return "text/markdown; charset=utf-8"
        return "text/html; charset=utf-8"

    @classmethod
    def from_filename(cls, filename: str) -> "ContentKind":
        """
        Classify by extension. Anything that is not Markdown is treated as HTML.
        """
        if filename.lower().endswith(MARKDOWN_EXTENSIONS):
            return cls.MARKDOWN
        return cls.HTML


def file_extension(filename: str, default: Optional[str] = None) -> Optional[str]:
    """
    Return the lowercase extension without the dot, or default if there is none.
    """
    name = filename.rsplit("/", 1)[-1]
    if "." not in name or name.endswith("."):
        return default
    return name.rsplit(".", 1)[-1].lower()


def is_supported_filename(filename: str) -> bool:
    return filename.lower().endswith(HTML_EXTENSIONS + MARKDOWN_EXTENSIONS)
