"""Tests for server helper functions."""

from common.types import ContentKind, file_extension, is_supported_filename
from pagevault.utils import escape_like, get_current_timestamp, make_snippet, parse_timestamp


class TestSnippet:
    def test_centers_on_first_hit(self):
        text = "a" * 50 + " needle " + "b" * 50

        snippet = make_snippet(text, "NEEDLE", radius=5)

        assert snippet.startswith("...")
        assert snippet.endswith("...")
        assert "needle" in snippet

    def test_no_hit_returns_head(self):
        snippet = make_snippet("abcdefghijklmnopqrstuvwxyz", "zzz", radius=5)

        assert snippet == "abcdefghij..."

    def test_empty_text(self):
        assert make_snippet("", "x", radius=5) is None
        assert make_snippet(None, "x", radius=5) is None


def test_escape_like_escapes_wildcards():
    assert escape_like("100%_off\\") == "100\\%\\_off\\\\"


def test_timestamps_round_trip_and_sort():
    first = get_current_timestamp()
    second = get_current_timestamp()

    assert parse_timestamp(first).tzinfo is not None
    assert first <= second


class TestContentKind:
    def test_from_filename(self):
        assert ContentKind.from_filename("README.MD") is ContentKind.MARKDOWN
        assert ContentKind.from_filename("post.markdown") is ContentKind.MARKDOWN
        assert ContentKind.from_filename("page.htm") is ContentKind.HTML
        assert ContentKind.from_filename("noext") is ContentKind.HTML

    def test_content_type(self):
        assert ContentKind.MARKDOWN.content_type.startswith("text/markdown")
        assert ContentKind.HTML.content_type.startswith("text/html")

    def test_file_extension(self):
        assert file_extension("1/abc.HTML") == "html"
        assert file_extension("noext", default="html") == "html"
        assert file_extension("trailing.", default="md") == "md"

    def test_supported_filenames(self):
        assert is_supported_filename("a.md")
        assert is_supported_filename("a.HTM")
        assert not is_supported_filename("a.txt")
