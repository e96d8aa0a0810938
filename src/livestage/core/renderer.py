"""Markdown rendering.

Turns a parsed Markdown document into a full HTML page: the body is
rendered from the parser's token tree and wrapped in the ``document``
template together with the title and live reload settings.
"""

from datetime import UTC, datetime

from livestage.core.parser import MarkdownTree, build_tree
from livestage.core.templates import TemplateRenderer
from livestage.core.types import ParsedDocument, RenderedOutput, RenderOptions

DEFAULT_TITLE = "Document"

DOCUMENT_TEMPLATE = "document"

HTML_CONTENT_TYPE = "text/html"


class MarkdownRenderer:
    """Renders parsed Markdown documents into HTML pages."""

    def __init__(self, templates: TemplateRenderer) -> None:
        """Initialize renderer.

        Args:
            templates: Template renderer used for page assembly
        """
        self._templates = templates

    def render(self, doc: ParsedDocument, options: RenderOptions | None = None) -> RenderedOutput:
        """Render a document.

        Uses the document's token tree when present, otherwise tokenizes
        the body again.

        Args:
            doc: Parsed document
            options: Render options (defaults to RenderOptions())

        Returns:
            RenderedOutput with the full HTML page

        Raises:
            ParseError: If the body has to be tokenized again and fails
            RenderError: If the page template fails
        """
        options = options or RenderOptions()

        tree = doc.tree if isinstance(doc.tree, MarkdownTree) else build_tree(doc.body)
        content = tree.to_html()

        variables = {
            **options.extra,
            "title": resolve_title(doc),
            "content": content,
            "metadata": doc.metadata,
            "live_reload": options.live_reload,
            "last_updated": options.last_updated or datetime.now(UTC).isoformat(),
        }
        html = self._templates.render(DOCUMENT_TEMPLATE, variables)
        return RenderedOutput(html=html, content_type=HTML_CONTENT_TYPE)


def resolve_title(doc: ParsedDocument) -> str:
    """Return the front matter title, or DEFAULT_TITLE when absent."""
    title = doc.metadata.get("title")
    if title is None or title == "":
        return DEFAULT_TITLE
    return str(title)
