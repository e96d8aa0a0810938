"""Page endpoints.

One GET handler per discovered route renders its source document; the
root path lists every route.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable
from datetime import UTC, datetime

from aiohttp import web

from livestage.app_keys import config_key, registry_key, routes_key, templates_key
from livestage.core.types import Route, RenderOptions
from livestage.errors import LivestageError

logger = logging.getLogger(__name__)

INDEX_PATH = "/"
INDEX_TEMPLATE = "index"
ERROR_BODY = "Error loading page"

Handler = Callable[[web.Request], Awaitable[web.Response]]


def create_pages_routes(routes: Iterable[Route], reserved: Iterable[str] = ()) -> list[web.RouteDef]:
    """Create one GET route per content route.

    Routes whose path is reserved (e.g. "/events") or was already taken by
    another source file are skipped with a warning.

    Args:
        routes: Route table from the startup scan
        reserved: Paths registered by other endpoints

    Returns:
        List of route definitions
    """
    taken = {INDEX_PATH, *reserved}
    route_defs: list[web.RouteDef] = []

    for route in sorted(routes, key=lambda r: (r.path, str(r.source_path))):
        if route.path in taken:
            logger.warning(f"Skipping {route.source_path}: route {route.path} is already in use")
            continue
        if "{" in route.path or "}" in route.path:
            logger.warning(f"Skipping {route.source_path}: braces are not allowed in routes")
            continue
        taken.add(route.path)
        logger.info(f"  {route.path} -> {route.source_path}")
        route_defs.append(web.get(route.path, _page_handler(route)))

    return route_defs


def create_index_routes() -> list[web.RouteDef]:
    return [web.get(INDEX_PATH, get_index)]


def _page_handler(route: Route) -> Handler:
    async def get_page(request: web.Request) -> web.Response:
        config = request.app[config_key]
        registry = request.app[registry_key]

        try:
            raw = route.source_path.read_bytes()
            binding = registry.require(route.type_key)
            rendered = binding.process(
                raw,
                RenderOptions(
                    live_reload=config.live_reload.enabled,
                    last_updated=datetime.now(UTC).isoformat(),
                    extra={"routes": request.app[routes_key], "path": route.path},
                ),
            )
        except (LivestageError, OSError):
            logger.exception(f"Error serving {route.path}")
            return web.Response(status=500, text=ERROR_BODY)

        return web.Response(
            text=rendered.html,
            content_type=rendered.content_type,
            headers={"Cache-Control": "no-cache"},
        )

    return get_page


async def get_index(request: web.Request) -> web.Response:
    templates = request.app[templates_key]
    routes = sorted(request.app[routes_key], key=lambda r: r.path)

    try:
        html = templates.render(INDEX_TEMPLATE, {"routes": routes})
    except LivestageError:
        logger.exception("Error rendering index page")
        return web.Response(status=500, text=ERROR_BODY)

    return web.Response(text=html, content_type="text/html")
