"""Livestage error hierarchy.

All livestage-specific errors inherit from LivestageError for easy catching.
"""


class LivestageError(Exception):
    """Base error for all livestage operations."""


class ScanError(LivestageError):
    """A directory could not be read while scanning for content."""


class ContentError(LivestageError):
    """Error while turning a source document into a response."""


class NoHandlerError(ContentError):
    """No parser/renderer pair is registered for a file type."""

    def __init__(self, type_key: str) -> None:
        super().__init__(f"No handler registered for type: {type_key!r}")
        self.type_key = type_key


class ParseError(ContentError):
    """Source document could not be parsed."""


class RenderError(ContentError):
    """Parsed document could not be rendered to HTML."""


class DeliveryError(LivestageError):
    """A live-reload subscriber channel could not be written to."""
