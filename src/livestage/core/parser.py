"""Markdown parsing.

Splits YAML front matter from the document body and tokenizes the body
with mistune. The token list is kept as a MarkdownTree so the renderer
can produce HTML without parsing again.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any

import mistune
import yaml
from mistune.core import BlockState

from livestage.core.types import ParsedDocument
from livestage.errors import ParseError

logger = logging.getLogger(__name__)

MARKDOWN_PLUGINS = ("strikethrough", "table", "url", "task_lists")

FRONT_MATTER_PATTERN = re.compile(
    r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)

# Plugins register their HTML render functions only on an HTML renderer,
# so tokenizing and rendering use two instances with the same plugin set.
_tokenizer = mistune.create_markdown(renderer="ast", plugins=list(MARKDOWN_PLUGINS))
_html_renderer = mistune.HTMLRenderer()
mistune.create_markdown(renderer=_html_renderer, plugins=list(MARKDOWN_PLUGINS))


@dataclass(frozen=True)
class MarkdownTree:
    """Tokenized Markdown body."""

    tokens: list[dict[str, Any]]

    def to_html(self) -> str:
        """Render the token list to HTML."""
        return _html_renderer(self.tokens, BlockState())


def split_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """Separate a leading YAML front matter block from the body.

    Malformed YAML, or YAML that is not a mapping, is treated as absent
    metadata. The delimited block is still removed from the body.

    Args:
        text: Full document text

    Returns:
        Tuple of (metadata, body)
    """
    match = FRONT_MATTER_PATTERN.match(text)
    if match is None:
        return {}, text

    body = text[match.end():]
    try:
        data = yaml.safe_load(match.group(1))
    except (yaml.YAMLError, RecursionError) as e:
        logger.warning(f"Ignoring malformed front matter: {e}")
        return {}, body

    if data is None:
        return {}, body
    if not isinstance(data, dict):
        logger.warning(f"Ignoring front matter that is not a mapping: {type(data).__name__}")
        return {}, body

    return {str(key): value for key, value in data.items()}, body


def build_tree(body: str) -> MarkdownTree:
    """Tokenize a Markdown body.

    Raises:
        ParseError: If the tokenizer fails on the input
    """
    try:
        tokens, _ = _tokenizer.parse(body)
    except RecursionError as e:
        raise ParseError("Markdown nesting too deep") from e
    return MarkdownTree(tokens=tokens)


class MarkdownParser:
    """Parses Markdown documents with optional YAML front matter."""

    def parse(self, raw: str | bytes) -> ParsedDocument:
        """Parse a Markdown document.

        Args:
            raw: Document content, as text or UTF-8 bytes

        Returns:
            ParsedDocument with metadata, body and token tree

        Raises:
            ParseError: If bytes are not valid UTF-8 or the body cannot be tokenized
        """
        if isinstance(raw, bytes):
            try:
                text = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ParseError(f"Document is not valid UTF-8: {e}") from e
        else:
            text = raw

        text = text.removeprefix("\ufeff")
        metadata, body = split_front_matter(text)
        logger.debug(f"Parsing {len(body)} characters of markdown")
        return ParsedDocument(metadata=metadata, body=body, tree=build_tree(body))
