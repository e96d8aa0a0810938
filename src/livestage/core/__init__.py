"""Content pipeline: discovery, parsing, rendering and handler lookup."""
