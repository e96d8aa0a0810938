"""Content handler registry.

Binds file types to a parser/renderer pair. The registry is filled once
at startup and only read afterwards.
"""

from dataclasses import dataclass

from livestage.core.parser import MarkdownParser
from livestage.core.renderer import MarkdownRenderer
from livestage.core.templates import TemplateRenderer
from livestage.core.types import ContentParser, ContentRenderer, RenderedOutput, RenderOptions
from livestage.errors import NoHandlerError


@dataclass(frozen=True)
class HandlerBinding:
    """Parser and renderer responsible for one file type."""

    type_key: str
    parser: ContentParser
    renderer: ContentRenderer

    def process(self, raw: str | bytes, options: RenderOptions | None = None) -> RenderedOutput:
        """Parse then render a source document."""
        parsed = self.parser.parse(raw)
        return self.renderer.render(parsed, options or RenderOptions())


class HandlerRegistry:
    """Lookup of HandlerBinding by file type key.

    Keys are stored as given; callers normalize them (lowercase, no dot).
    """

    def __init__(self) -> None:
        self._bindings: dict[str, HandlerBinding] = {}

    def register(self, type_key: str, binding: HandlerBinding) -> None:
        """Register a binding, replacing any previous one for the key."""
        self._bindings[type_key] = binding

    def get(self, type_key: str) -> HandlerBinding | None:
        """Get the binding for a type, or None if none is registered."""
        return self._bindings.get(type_key)

    def require(self, type_key: str) -> HandlerBinding:
        """Get the binding for a type.

        Raises:
            NoHandlerError: If no binding is registered for type_key
        """
        binding = self._bindings.get(type_key)
        if binding is None:
            raise NoHandlerError(type_key)
        return binding

    def has(self, type_key: str) -> bool:
        return type_key in self._bindings

    def list_types(self) -> list[str]:
        """Registered type keys, in registration order."""
        return list(self._bindings)


def create_default_registry(templates: TemplateRenderer) -> HandlerRegistry:
    """Create a registry with the Markdown handler bound to "md"."""
    registry = HandlerRegistry()
    registry.register(
        "md",
        HandlerBinding(
            type_key="md",
            parser=MarkdownParser(),
            renderer=MarkdownRenderer(templates),
        ),
    )
    return registry
