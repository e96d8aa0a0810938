"""Core type definitions."""

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, NewType, Protocol, runtime_checkable

# URL path for routing (e.g., "/guide", "/tutorials/intro")
# Distinct from filesystem Path to catch type mismatches
URLPath = NewType("URLPath", str)


@dataclass(frozen=True)
class Route:
    """A URL path bound to exactly one source document."""

    path: URLPath
    source_path: Path

    @property
    def type_key(self) -> str:
        """Lowercase file type of the source document (e.g. "md")."""
        return self.source_path.suffix.lower().lstrip(".")


@runtime_checkable
class DocumentTree(Protocol):
    """Intermediate representation produced by a parser.

    Opaque to everything except the matching renderer; the only
    capability it exposes is rendering itself to HTML.
    """

    def to_html(self) -> str: ...


@dataclass(frozen=True)
class ParsedDocument:
    """Result of parsing a source document."""

    metadata: dict[str, Any]
    body: str
    tree: DocumentTree | None = None


@dataclass(frozen=True)
class RenderedOutput:
    """Final HTML produced by a renderer."""

    html: str
    content_type: str = "text/html"


@dataclass(frozen=True)
class RenderOptions:
    """Options passed from the request path to a renderer.

    Attributes:
        live_reload: Embed the live reload client script in the page.
        last_updated: ISO-8601 timestamp shown on the page.
        extra: Additional template variables, passed through unchanged.
    """

    live_reload: bool = False
    last_updated: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)


class ContentParser(Protocol):
    """Turns raw source content into a ParsedDocument."""

    def parse(self, raw: str | bytes) -> ParsedDocument: ...


class ContentRenderer(Protocol):
    """Turns a ParsedDocument into final HTML output."""

    def render(self, doc: ParsedDocument, options: RenderOptions) -> RenderedOutput: ...


class ChangeKind(enum.Enum):
    """Kind of filesystem change affecting a route."""

    MODIFIED = "modified"
    CREATED = "created"
    DELETED = "deleted"


@dataclass(frozen=True)
class ChangeEvent:
    """A change to the source file backing a route."""

    kind: ChangeKind
    route: Route
    source_path: Path

    def to_message(self) -> dict[str, str]:
        """Convert to the live reload wire message."""
        return {
            "type": "file-changed",
            "path": self.route.path,
            "filePath": str(self.source_path),
        }
