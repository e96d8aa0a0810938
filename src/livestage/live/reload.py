"""Server-sent-events live reload for development mode.

Runs the content watcher in a background task and notifies connected
clients through the NotificationHub so their pages reload.
"""

import asyncio
import logging
from pathlib import Path

from aiohttp import web

from livestage.live.hub import NotificationHub
from livestage.live.watcher import ChangeWatcher

logger = logging.getLogger(__name__)

EVENTS_PATH = "/events"


class LiveReloadManager:
    """Manages the event stream endpoint and file watching for live reload.

    Coordinates between the file system watcher and connected clients
    to provide automatic page refresh on source file changes.
    """

    def __init__(
        self,
        source_dir: Path,
        watcher: ChangeWatcher,
        hub: NotificationHub | None = None,
    ) -> None:
        """Initialize the live reload manager.

        Args:
            source_dir: Directory to watch for changes
            watcher: Watcher built from the startup route table
            hub: Subscriber hub (default: a new NotificationHub)
        """
        self._source_dir = source_dir
        self._watcher = watcher
        self._hub = hub or NotificationHub()
        self._watch_task: asyncio.Task[None] | None = None

    @property
    def hub(self) -> NotificationHub:
        return self._hub

    @property
    def is_running(self) -> bool:
        return self._watch_task is not None and not self._watch_task.done()

    async def start(self) -> None:
        """Start the file watcher."""
        if self._watch_task is not None:
            return
        self._watch_task = asyncio.create_task(self._watch_files())

    async def stop(self) -> None:
        """Stop the file watcher and close all connections."""
        self._watcher.stop()
        if self._watch_task is not None:
            self._watch_task.cancel()
            try:
                await self._watch_task
            except asyncio.CancelledError:
                pass
            self._watch_task = None

        self._hub.close()

    async def handle_events(self, request: web.Request) -> web.StreamResponse:
        """Handle a live reload event stream connection.

        Args:
            request: aiohttp request

        Returns:
            Streaming response, held open until the client goes away
        """
        response = web.StreamResponse(
            headers={
                "Content-Type": "text/event-stream",
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
            },
        )
        await response.prepare(request)

        subscriber = await self._hub.subscribe(response)
        try:
            await subscriber.wait_closed()
        finally:
            self._hub.unsubscribe(subscriber)

        return response

    async def _watch_files(self) -> None:
        """Watch for file changes and broadcast change events."""
        try:
            async for event in self._watcher.watch(self._source_dir):
                await self._hub.broadcast(event)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("File watcher stopped unexpectedly")


def create_live_reload_routes(manager: LiveReloadManager) -> list[web.RouteDef]:
    """Create routes for the live reload event stream.

    Args:
        manager: LiveReloadManager instance

    Returns:
        List of route definitions
    """
    return [web.get(EVENTS_PATH, manager.handle_events)]
