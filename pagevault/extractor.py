"""Title and searchable text extraction for HTML and Markdown documents."""

import re
from typing import Optional

from bs4 import BeautifulSoup

from common.logging_config import get_logger
from common.types import ContentKind
from pagevault import config
from pagevault.types import Extraction

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")

# Regex fallback used only when the HTML parser fails
_SCRIPT_OR_STYLE = re.compile(r"<(script|style)\b[^>]*>[\s\S]*?</\1>", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")
_TITLE_TAG = re.compile(r"<title[^>]*>([\s\S]*?)</title>", re.IGNORECASE)
_BASIC_ENTITIES = (
    ("&nbsp;", " "),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&amp;", "&"),
)

_MD_TITLE = re.compile(r"^#\s+(.+)$", re.MULTILINE)
_MD_FENCE = re.compile(r"^\s*(```|~~~).*$", re.MULTILINE)
_MD_IMAGE = re.compile(r"!\[[^\]]*\]\([^)]*\)")
_MD_LINK = re.compile(r"\[([^\]]+)\]\([^)]*\)")
_MD_INLINE_CODE = re.compile(r"`([^`\n]+)`")
_MD_HEADING = re.compile(r"^\s{0,3}#{1,6}\s+", re.MULTILINE)
_MD_BOLD = re.compile(r"(\*\*|__)(.+?)\1")
_MD_STRIKE = re.compile(r"~~(.+?)~~")
_MD_ITALIC = re.compile(r"(?<![\w*_])([*_])([^*_\n]+)\1(?![\w*_])")


def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _cap_output(text: str) -> str:
    return text[: config.TEXT_OUTPUT_LIMIT]


def _extract_html_with_regex(content: str, filename: Optional[str]) -> Extraction:
    match = _TITLE_TAG.search(content)
    title = _collapse(_TAG.sub(" ", match.group(1))) if match else ""

    text = _SCRIPT_OR_STYLE.sub(" ", content)
    text = _TAG.sub(" ", text)
    for entity, replacement in _BASIC_ENTITIES:
        text = text.replace(entity, replacement)

    return Extraction(title=title or filename, text=_cap_output(_collapse(text)))


def _extract_html(content: str, filename: Optional[str]) -> Extraction:
    try:
        soup = BeautifulSoup(content, "html.parser")
        title_tag = soup.find("title")
        title = title_tag.get_text(" ", strip=True) if title_tag else ""

        for element in soup(["script", "style"]):
            element.decompose()

        text = soup.get_text(" ")
    except Exception as e:
        logger.warning(f"HTML parser failed, using tag strip [filename={filename}]: {e}")
        return _extract_html_with_regex(content, filename)

    return Extraction(title=_collapse(title) or filename, text=_cap_output(_collapse(text)))


def _extract_markdown(content: str, filename: Optional[str]) -> Extraction:
    title = None
    match = _MD_TITLE.search(content)
    if match:
        title = match.group(1).strip() or None
        # The title line is not repeated in the body text
        content = content[: match.start()] + content[match.end():]

    text = _MD_FENCE.sub(" ", content)
    text = _MD_IMAGE.sub(" ", text)
    text = _MD_LINK.sub(r"\1", text)
    text = _MD_INLINE_CODE.sub(r"\1", text)
    text = _MD_HEADING.sub("", text)
    text = _MD_BOLD.sub(r"\2", text)
    text = _MD_STRIKE.sub(r"\1", text)
    text = _MD_ITALIC.sub(r"\2", text)

    return Extraction(title=title or filename, text=_cap_output(_collapse(text)))


def extract_title_and_text(
    data: bytes,
    kind: ContentKind,
    filename: Optional[str] = None
) -> Extraction:
    """
    Derive a display title and bounded searchable text from document bytes.

    Input is decoded as UTF-8 with replacement and capped before parsing;
    the text is capped after whitespace is collapsed. Malformed markup never
    raises.

    Args:
        data: Raw document bytes (possibly only a prefix of the object)
        kind: HTML or Markdown
        filename: Title used when the document declares none

    Returns:
        Extraction(title, text); empty input gives (None, "")
    """
    if not data:
        return Extraction(title=None, text="")

    content = data.decode("utf-8", errors="replace")[: config.HTML_INPUT_LIMIT]

    if ContentKind(kind) is ContentKind.MARKDOWN:
        return _extract_markdown(content, filename)
    return _extract_html(content, filename)
