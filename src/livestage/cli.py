"""CLI interface for Livestage.

Command-line tool for serving a directory of Markdown documents with
live reload.
"""

import logging
import sys
from pathlib import Path

import click

from livestage.config import Config

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.group()
def cli() -> None:
    """Livestage - Markdown content server with live reload."""


def _load_config(config_path: Path | None) -> Config:
    """Load configuration or exit with an error message."""
    try:
        return Config.load(config_path)
    except (FileNotFoundError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover livestage.toml)",
)
@click.option(
    "--source-dir",
    "-s",
    type=click.Path(exists=True, path_type=Path, file_okay=False),
    default=None,
    envvar="CONTENT_DIR",
    help="Content source directory (overrides config)",
)
@click.option(
    "--templates-dir",
    type=click.Path(exists=True, path_type=Path, file_okay=False),
    default=None,
    help="Template directory (overrides config, default: bundled templates)",
)
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    envvar="PORT",
    help="Port to bind to (overrides config)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (debug logging)",
)
@click.option(
    "--live-reload/--no-live-reload",
    default=None,
    help="Enable/disable live reload (overrides config, default: enabled)",
)
def serve(
    config_path: Path | None,
    source_dir: Path | None,
    templates_dir: Path | None,
    host: str | None,
    port: int | None,
    verbose: bool,
    live_reload: bool | None,
) -> None:
    """Start the content server."""
    from livestage.server import run_server

    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)

    config = _load_config(config_path).with_overrides(
        host=host,
        port=port,
        source_dir=source_dir,
        templates_dir=templates_dir,
        live_reload_enabled=live_reload,
    )

    click.echo(f"Starting server on http://{config.server.host}:{config.server.port}")
    click.echo(f"Content directory: {config.docs.source_dir}")
    if config.templates.templates_dir is not None:
        click.echo(f"Template directory: {config.templates.templates_dir}")
    if config.live_reload.enabled:
        click.echo("Live reload: enabled")
    else:
        click.echo("Live reload: disabled")

    try:
        run_server(config)
    except OSError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover livestage.toml)",
)
@click.option(
    "--source-dir",
    "-s",
    type=click.Path(exists=True, path_type=Path, file_okay=False),
    default=None,
    envvar="CONTENT_DIR",
    help="Content source directory (overrides config)",
)
def routes(config_path: Path | None, source_dir: Path | None) -> None:
    """List the routes discovered in the content directory."""
    from livestage.core.scanner import scan_files

    config = _load_config(config_path).with_overrides(source_dir=source_dir)
    found = scan_files(
        config.docs.source_dir,
        config.docs.extensions,
        config.docs.ignore_patterns,
    )

    for route in sorted(found, key=lambda r: r.path):
        click.echo(f"{route.path} -> {route.source_path}")
    click.echo(f"\nFound {len(found)} content file(s) in {config.docs.source_dir}")


if __name__ == "__main__":
    cli()
