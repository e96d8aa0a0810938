"""Configuration for Livestage.

Settings come from an optional livestage.toml, found by walking up from the
working directory, and can be overridden from the command line.
"""

from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

CONFIG_FILENAME = "livestage.toml"

DEFAULT_IGNORE_PATTERNS = [r"(^|[/\\])\."]


@dataclass
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 3000


@dataclass
class DocsConfig:
    """Content configuration."""

    source_dir: Path = field(default_factory=lambda: Path("content"))
    extensions: list[str] = field(default_factory=lambda: ["md"])
    ignore_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS))


@dataclass
class TemplatesConfig:
    """Template configuration.

    When templates_dir is None, the templates bundled with livestage are used.
    """

    templates_dir: Path | None = None


@dataclass
class LiveReloadConfig:
    """Live reload configuration."""

    enabled: bool = True
    debounce: int = 300


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig
    docs: DocsConfig
    templates: TemplatesConfig
    live_reload: LiveReloadConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Load configuration.

        An explicit config_path must exist. Without one, the nearest
        livestage.toml above the working directory is used, if any.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Find the nearest livestage.toml, starting at the working directory.

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> Config:
        """Create config with all defaults."""
        return cls(
            server=ServerConfig(),
            docs=DocsConfig(),
            templates=TemplatesConfig(),
            live_reload=LiveReloadConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> Config:
        """Read and validate a TOML configuration file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {path}: {e}") from e

        config_dir = path.parent

        return cls(
            server=cls._parse_server(data.get("server")),
            docs=cls._parse_docs(data.get("docs"), config_dir),
            templates=cls._parse_templates(data.get("templates"), config_dir),
            live_reload=cls._parse_live_reload(data.get("live_reload")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        """Parse server configuration section.

        Args:
            data: Raw server section data

        Returns:
            ServerConfig instance
        """
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 3000)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_docs(cls, data: object, config_dir: Path) -> DocsConfig:
        """Parse docs configuration section.

        Args:
            data: Raw docs section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            DocsConfig instance
        """
        if data is None:
            return DocsConfig(source_dir=config_dir / "content")

        if not isinstance(data, dict):
            raise ValueError("docs section must be a dictionary")

        source_dir = data.get("source_dir", "content")
        if not isinstance(source_dir, str):
            raise ValueError("docs.source_dir must be a string")

        extensions = _string_list(data, "extensions", ["md"], "docs.extensions")
        if not extensions:
            raise ValueError("docs.extensions must not be empty")

        ignore_patterns = _string_list(
            data, "ignore_patterns", DEFAULT_IGNORE_PATTERNS, "docs.ignore_patterns"
        )
        for pattern in ignore_patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"docs.ignore_patterns has invalid regex {pattern!r}: {e}") from e

        return DocsConfig(
            source_dir=config_dir / source_dir,
            extensions=extensions,
            ignore_patterns=ignore_patterns,
        )

    @classmethod
    def _parse_templates(cls, data: object, config_dir: Path) -> TemplatesConfig:
        """Parse templates configuration section.

        Args:
            data: Raw templates section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            TemplatesConfig instance
        """
        if data is None:
            return TemplatesConfig()

        if not isinstance(data, dict):
            raise ValueError("templates section must be a dictionary")

        templates_dir = data.get("dir")
        if templates_dir is None:
            return TemplatesConfig()
        if not isinstance(templates_dir, str):
            raise ValueError("templates.dir must be a string")

        return TemplatesConfig(templates_dir=config_dir / templates_dir)

    @classmethod
    def _parse_live_reload(cls, data: object) -> LiveReloadConfig:
        """Parse live_reload configuration section.

        Args:
            data: Raw live_reload section data

        Returns:
            LiveReloadConfig instance
        """
        if data is None:
            return LiveReloadConfig()

        if not isinstance(data, dict):
            raise ValueError("live_reload section must be a dictionary")

        enabled = data.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ValueError("live_reload.enabled must be a boolean")

        debounce = data.get("debounce", 300)
        if not isinstance(debounce, int) or isinstance(debounce, bool) or debounce < 0:
            raise ValueError("live_reload.debounce must be a non-negative integer")

        return LiveReloadConfig(enabled=enabled, debounce=debounce)

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        source_dir: Path | None = None,
        templates_dir: Path | None = None,
        live_reload_enabled: bool | None = None,
    ) -> Config:
        """Return a copy with command line values applied.

        Arguments left as None keep the current value; self is not modified.

        Args:
            host: Override server.host
            port: Override server.port
            source_dir: Override docs.source_dir
            templates_dir: Override templates.dir
            live_reload_enabled: Override live_reload.enabled

        Returns:
            New Config instance with overrides applied
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        docs = self.docs
        if source_dir is not None:
            docs = replace(self.docs, source_dir=source_dir)

        templates = self.templates
        if templates_dir is not None:
            templates = replace(self.templates, templates_dir=templates_dir)

        live_reload = self.live_reload
        if live_reload_enabled is not None:
            live_reload = replace(self.live_reload, enabled=live_reload_enabled)

        return replace(
            self,
            server=server,
            docs=docs,
            templates=templates,
            live_reload=live_reload,
        )


def _string_list(data: dict, key: str, default: list[str], name: str) -> list[str]:
    """Read an optional list of strings from a config section."""
    raw = data.get(key)
    if raw is None:
        return list(default)
    if not isinstance(raw, list):
        raise ValueError(f"{name} must be a list")
    items: list[str] = []
    for item in raw:
        if not isinstance(item, str):
            raise ValueError(f"{name} items must be strings")
        items.append(item)
    return items
