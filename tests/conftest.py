"""Shared test fixtures."""

from pathlib import Path

import pytest
from livestage.config import (
    Config,
    DocsConfig,
    LiveReloadConfig,
    ServerConfig,
    TemplatesConfig,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixture_content_dir() -> Path:
    """Read-only content tree with md, MD, nested, hidden and txt files."""
    return FIXTURES_DIR / "content"


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Create an empty content directory.

    Use exist_ok=True to allow other fixtures to also create the dir.
    """
    content = tmp_path / "content"
    content.mkdir(exist_ok=True)
    return content


@pytest.fixture
def test_config(content_dir: Path) -> Config:
    """Create a test configuration rooted at content_dir.

    Live reload is disabled; tests that need it enable it explicitly.
    """
    return Config(
        server=ServerConfig(),
        docs=DocsConfig(source_dir=content_dir),
        templates=TemplatesConfig(),
        live_reload=LiveReloadConfig(enabled=False),
    )
