"""Page templating.

Thin wrapper over a Jinja2 environment. Templates are addressed by id;
``"document"`` resolves to ``document.html`` in the template root.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from livestage.errors import RenderError

TEMPLATE_SUFFIX = ".html"


class TemplateRenderer:
    """Renders named templates from a template directory."""

    def __init__(self, templates_dir: Path) -> None:
        """Initialize renderer.

        Args:
            templates_dir: Directory containing ``<id>.html`` templates

        Raises:
            FileNotFoundError: If templates_dir is not a directory
        """
        if not templates_dir.is_dir():
            raise FileNotFoundError(f"Template directory not found: {templates_dir}")

        self._templates_dir = templates_dir
        self._env = Environment(
            loader=FileSystemLoader(templates_dir),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    @property
    def templates_dir(self) -> Path:
        """Directory templates are loaded from."""
        return self._templates_dir

    def render(self, template_id: str, variables: Mapping[str, Any]) -> str:
        """Render a template.

        Args:
            template_id: Template name without suffix (e.g., "document")
            variables: Template variables

        Returns:
            Rendered HTML

        Raises:
            RenderError: If the template is missing or fails to render
        """
        try:
            template = self._env.get_template(f"{template_id}{TEMPLATE_SUFFIX}")
            return template.render(**variables)
        except TemplateError as e:
            raise RenderError(f"Cannot render template {template_id!r}: {e}") from e
