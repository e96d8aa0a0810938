"""aiohttp server for Livestage.

Application factory and route registration. Startup is strictly ordered:
the content root is scanned and every route is bound before the watcher
starts and before the server accepts requests.
"""

import logging
from pathlib import Path

from aiohttp import web

from livestage.api.pages import INDEX_PATH, create_index_routes, create_pages_routes
from livestage.app_keys import (
    config_key,
    live_reload_key,
    registry_key,
    routes_key,
    templates_key,
)
from livestage.assets import get_templates_dir
from livestage.config import Config
from livestage.core.registry import create_default_registry
from livestage.core.scanner import scan_files
from livestage.core.templates import TemplateRenderer

logger = logging.getLogger(__name__)


def resolve_templates_dir(config: Config) -> Path:
    """Return the configured template directory or the bundled one."""
    if config.templates.templates_dir is not None:
        return config.templates.templates_dir
    return get_templates_dir()


def create_app(config: Config) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration

    Returns:
        Configured aiohttp application

    Raises:
        FileNotFoundError: If the template directory cannot be found
    """
    app = web.Application()

    templates = TemplateRenderer(resolve_templates_dir(config))

    source_dir = config.docs.source_dir
    routes = scan_files(source_dir, config.docs.extensions, config.docs.ignore_patterns)
    logger.info(f"Found {len(routes)} content file(s) in {source_dir}")

    registry = create_default_registry(templates)
    for route in routes:
        if not registry.has(route.type_key):
            logger.warning(f"No handler registered for {route.source_path}")

    app[config_key] = config
    app[routes_key] = routes
    app[registry_key] = registry
    app[templates_key] = templates

    reserved = [INDEX_PATH]
    app.router.add_routes(create_index_routes())

    # Live reload event stream
    if config.live_reload.enabled:
        from livestage.live import ChangeWatcher, LiveReloadManager
        from livestage.live.reload import EVENTS_PATH, create_live_reload_routes

        watcher = ChangeWatcher(
            routes,
            extensions=config.docs.extensions,
            ignore_patterns=config.docs.ignore_patterns,
            debounce=config.live_reload.debounce,
        )
        manager = LiveReloadManager(source_dir, watcher)
        app[live_reload_key] = manager
        app.router.add_routes(create_live_reload_routes(manager))
        reserved.append(EVENTS_PATH)
        app.on_startup.append(_start_live_reload)
        app.on_shutdown.append(_stop_live_reload)

    app.router.add_routes(create_pages_routes(routes, reserved))

    return app


async def _start_live_reload(app: web.Application) -> None:
    """Start live reload on application startup."""
    await app[live_reload_key].start()


async def _stop_live_reload(app: web.Application) -> None:
    """Stop live reload on application shutdown.

    Runs on shutdown rather than cleanup so open event streams are
    released before aiohttp waits for pending handlers.
    """
    await app[live_reload_key].stop()


def run_server(config: Config) -> None:
    """Run the server.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    web.run_app(app, host=config.server.host, port=config.server.port, print=None)
