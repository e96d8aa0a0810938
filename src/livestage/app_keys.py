"""Application keys for type-safe app configuration access."""

from aiohttp import web

from livestage.config import Config
from livestage.core.registry import HandlerRegistry
from livestage.core.templates import TemplateRenderer
from livestage.live.reload import LiveReloadManager

config_key = web.AppKey("config", Config)
routes_key = web.AppKey("routes", list)
registry_key = web.AppKey("registry", HandlerRegistry)
templates_key = web.AppKey("templates", TemplateRenderer)
live_reload_key = web.AppKey("live_reload", LiveReloadManager)
