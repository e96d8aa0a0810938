"""Tests for Markdown parsing."""

import pytest
from livestage.core.parser import MarkdownParser, MarkdownTree, build_tree, split_front_matter
from livestage.core.types import DocumentTree
from livestage.errors import ContentError, ParseError


class TestSplitFrontMatter:
    """Tests for split_front_matter()."""

    def test__front_matter__is_split_from_body(self) -> None:
        """Return metadata and the text after the closing delimiter."""
        metadata, body = split_front_matter("---\ntitle: Hi\n---\n# Hello\n")

        assert metadata == {"title": "Hi"}
        assert body == "# Hello\n"

    def test__no_front_matter__returns_text_unchanged(self) -> None:
        """Without a leading delimiter the whole text is the body."""
        metadata, body = split_front_matter("# Hello\n")

        assert metadata == {}
        assert body == "# Hello\n"

    def test__delimiter_not_at_start__is_body(self) -> None:
        """Only a block at the very start counts as front matter."""
        text = "# Hello\n---\ntitle: Hi\n---\n"

        metadata, body = split_front_matter(text)

        assert metadata == {}
        assert body == text

    def test__empty_block__gives_empty_metadata(self) -> None:
        """An empty front matter block yields no metadata."""
        metadata, body = split_front_matter("---\n---\nText\n")

        assert metadata == {}
        assert body == "Text\n"

    def test__crlf_line_endings__are_accepted(self) -> None:
        """Recognize front matter written with Windows line endings."""
        metadata, body = split_front_matter("---\r\ntitle: Hi\r\n---\r\nBody\r\n")

        assert metadata == {"title": "Hi"}
        assert body == "Body\r\n"

    def test__malformed_yaml__is_treated_as_absent(self) -> None:
        """Malformed YAML gives empty metadata, block is still removed."""
        metadata, body = split_front_matter("---\ntitle: [unclosed\n---\nBody\n")

        assert metadata == {}
        assert body == "Body\n"

    def test__non_mapping_yaml__is_treated_as_absent(self) -> None:
        """A YAML list is not metadata."""
        metadata, body = split_front_matter("---\n- one\n- two\n---\nBody\n")

        assert metadata == {}
        assert body == "Body\n"

    def test__deeply_nested_yaml__is_treated_as_absent(self) -> None:
        """YAML too deep for the loader falls back to no metadata."""
        text = "---\na: " + "[" * 5000 + "\n---\n# Body\n"

        metadata, body = split_front_matter(text)

        assert metadata == {}
        assert body == "# Body\n"

    def test__nested_values__are_kept(self) -> None:
        """Keep lists and nested mappings as parsed."""
        text = "---\ntitle: Hi\ntags: [a, b]\nauthor:\n  name: Ann\n---\n"

        metadata, _ = split_front_matter(text)

        assert metadata == {"title": "Hi", "tags": ["a", "b"], "author": {"name": "Ann"}}


class TestMarkdownParser:
    """Tests for MarkdownParser.parse()."""

    def test__document_with_front_matter__returns_metadata_and_body(self) -> None:
        """Parse front matter and keep the body for rendering."""
        parser = MarkdownParser()

        doc = parser.parse("---\ntitle: Hi\n---\n# Hello\n")

        assert doc.metadata == {"title": "Hi"}
        assert doc.body == "# Hello\n"
        assert isinstance(doc.tree, MarkdownTree)

    def test__tree__satisfies_document_tree_protocol(self) -> None:
        """The tree can render itself to HTML."""
        doc = MarkdownParser().parse("# Hello\n")

        assert isinstance(doc.tree, DocumentTree)
        assert "<h1>Hello</h1>" in doc.tree.to_html()

    def test__bytes__are_decoded_as_utf8(self) -> None:
        """Accept raw file bytes."""
        doc = MarkdownParser().parse("---\ntitle: Café\n---\nÜber\n".encode())

        assert doc.metadata == {"title": "Café"}
        assert doc.body == "Über\n"

    def test__invalid_utf8__raises_parse_error(self) -> None:
        """Reject bytes that are not UTF-8."""
        with pytest.raises(ParseError):
            MarkdownParser().parse(b"# Title\n\xff\xfe\xfa")

    def test__parse_error__is_content_error(self) -> None:
        """ParseError is caught by handlers of ContentError."""
        with pytest.raises(ContentError):
            MarkdownParser().parse(b"\xff")

    def test__byte_order_mark__is_stripped(self) -> None:
        """A leading BOM does not hide the front matter."""
        doc = MarkdownParser().parse("\ufeff---\ntitle: Hi\n---\nBody\n")

        assert doc.metadata == {"title": "Hi"}

    def test__same_input__gives_equal_trees(self) -> None:
        """Parsing is deterministic."""
        text = "# Title\n\nSome *text* with a [link](https://example.com).\n"
        parser = MarkdownParser()

        assert parser.parse(text).tree == parser.parse(text).tree

    def test__empty_document__parses(self) -> None:
        """An empty file is a valid document."""
        doc = MarkdownParser().parse("")

        assert doc.metadata == {}
        assert doc.body == ""


class TestBuildTree:
    """Tests for build_tree() and the HTML it renders."""

    def test__gfm_table__renders_table(self) -> None:
        html = build_tree("| a | b |\n|---|---|\n| 1 | 2 |\n").to_html()

        assert "<table>" in html
        assert "<td>1</td>" in html

    def test__task_list__renders_checkbox(self) -> None:
        """Plugin render functions are bound to the shared HTML renderer."""
        html = build_tree("- [x] done\n- [ ] todo\n").to_html()

        assert html.count('type="checkbox"') == 2

    def test__strikethrough__renders_del(self) -> None:
        html = build_tree("~~gone~~\n").to_html()

        assert "<del>gone</del>" in html

    def test__fenced_code__is_escaped(self) -> None:
        html = build_tree("```\n<b>raw</b>\n```\n").to_html()

        assert "<pre><code>" in html
        assert "&lt;b&gt;raw&lt;/b&gt;" in html


class TestMarkdownParserPathologicalInput:
    """Parser behaviour on inputs that exhaust library recursion."""

    def test__deeply_nested_front_matter__parses_without_metadata(self) -> None:
        doc = MarkdownParser().parse("---\na: " + "[" * 5000 + "\n---\n# Body\n")

        assert doc.metadata == {}
        assert "<h1>Body</h1>" in doc.tree.to_html()
