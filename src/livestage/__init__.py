"""Livestage - live-reloading Markdown content server."""

__version__ = "0.1.0"
