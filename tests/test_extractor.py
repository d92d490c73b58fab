"""Tests for title and text extraction."""

from common.types import ContentKind
from pagevault import config
from pagevault.extractor import extract_title_and_text


class TestHtmlExtraction:
    def test_title_and_body_text(self):
        html = b"<html><head><title> Quarterly   Report </title></head><body><p>Revenue grew.</p></body></html>"

        result = extract_title_and_text(html, ContentKind.HTML, "report.html")

        assert result.title == "Quarterly Report"
        assert "Revenue grew." in result.text

    def test_script_and_style_are_removed(self):
        html = (
            b"<html><head><style>body { color: red; }</style></head>"
            b"<body><script>var secret = 1;</script><p>Visible</p></body></html>"
        )

        result = extract_title_and_text(html, ContentKind.HTML, "page.html")

        assert "Visible" in result.text
        assert "secret" not in result.text
        assert "color" not in result.text

    def test_missing_title_falls_back_to_filename(self):
        result = extract_title_and_text(b"<p>No head here</p>", ContentKind.HTML, "snapshot.html")

        assert result.title == "snapshot.html"
        assert result.text == "No head here"

    def test_entities_are_decoded_and_whitespace_collapsed(self):
        html = b"<p>Fish &amp; chips\n\n\t  &lt;tasty&gt;</p>"

        result = extract_title_and_text(html, ContentKind.HTML, "menu.html")

        assert result.text == "Fish & chips <tasty>"

    def test_malformed_markup_does_not_raise(self):
        result = extract_title_and_text(b"<div><p>unclosed <b>bold", ContentKind.HTML, "broken.html")

        assert "unclosed" in result.text
        assert "bold" in result.text

    def test_invalid_utf8_is_replaced(self):
        result = extract_title_and_text(b"<p>caf\xe9</p>", ContentKind.HTML, "bad.html")

        assert result.text.startswith("caf")

    def test_output_is_capped(self, monkeypatch):
        monkeypatch.setattr(config, "TEXT_OUTPUT_LIMIT", 50)
        html = ("<p>" + "word " * 100 + "</p>").encode()

        result = extract_title_and_text(html, ContentKind.HTML, "long.html")

        assert len(result.text) == 50

    def test_input_is_capped_before_parsing(self, monkeypatch):
        monkeypatch.setattr(config, "HTML_INPUT_LIMIT", 20)
        html = b"<p>early</p>" + b"x" * 100 + b"<p>late marker</p>"

        result = extract_title_and_text(html, ContentKind.HTML, "big.html")

        assert "early" in result.text
        assert "late marker" not in result.text


class TestMarkdownExtraction:
    def test_first_h1_is_title_and_removed_from_body(self):
        md = b"Intro line\n# Garden Log\n\nPlanted **tomato** seedlings.\n"

        result = extract_title_and_text(md, ContentKind.MARKDOWN, "log.md")

        assert result.title == "Garden Log"
        assert "Garden Log" not in result.text
        assert "Planted tomato seedlings." in result.text
        assert "Intro line" in result.text

    def test_missing_h1_falls_back_to_filename(self):
        result = extract_title_and_text(b"## Only a subheading\n\ntext", ContentKind.MARKDOWN, "notes.md")

        assert result.title == "notes.md"
        assert result.text == "Only a subheading text"

    def test_links_keep_label_and_images_are_dropped(self):
        md = b"See [the docs](https://example.com/docs) ![diagram](img.png) today."

        result = extract_title_and_text(md, ContentKind.MARKDOWN, "links.md")

        assert result.text == "See the docs today."

    def test_code_fences_are_stripped_but_code_is_kept(self):
        md = b"Run this:\n```bash\nkubectl apply\n```\nand `deploy` it."

        result = extract_title_and_text(md, ContentKind.MARKDOWN, "run.md")

        assert "```" not in result.text
        assert "bash" not in result.text
        assert "kubectl apply" in result.text
        assert "and deploy it." in result.text

    def test_emphasis_markers_are_removed(self):
        md = b"A *quick* and __bold__ ~~old~~ note"

        result = extract_title_and_text(md, ContentKind.MARKDOWN, "em.md")

        assert result.text == "A quick and bold old note"


def test_empty_input_gives_no_title_and_empty_text():
    result = extract_title_and_text(b"", ContentKind.HTML, "empty.html")

    assert result.title is None
    assert result.text == ""
