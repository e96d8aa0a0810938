"""Asset discovery for bundled page templates.

Locates the HTML templates shipped inside the livestage package.
"""

from importlib.resources import files
from pathlib import Path


def get_templates_dir() -> Path:
    """Return path to bundled templates.

    Returns:
        Path to the directory containing ``document.html`` and ``index.html``.

    Raises:
        FileNotFoundError: If templates are not bundled.
    """
    templates = files("livestage").joinpath("templates")
    if not templates.is_dir():
        msg = (
            "Bundled templates not found. "
            "Reinstall livestage or set [templates] dir in livestage.toml."
        )
        raise FileNotFoundError(msg)
    return Path(str(templates))
