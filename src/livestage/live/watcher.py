"""Content file watcher.

Watches the content root with watchfiles and maps changed files back to
the routes discovered at startup. Only modifications of known files
produce events; new and deleted files are reported in the log, since the
route table is fixed until the next full scan.
"""

import asyncio
import logging
import os
from collections.abc import AsyncIterator, Iterable
from pathlib import Path

from watchfiles import Change, awatch

from livestage.core.scanner import (
    DEFAULT_IGNORE_PATTERNS,
    IgnorePattern,
    compile_patterns,
    is_ignored,
    match_extension,
    normalize_extensions,
)
from livestage.core.types import ChangeEvent, ChangeKind, Route

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 300


class ChangeWatcher:
    """Turns filesystem changes under a content root into ChangeEvents.

    The source path to route lookup is built once from the routes given
    at construction and is never refreshed.
    """

    def __init__(
        self,
        routes: Iterable[Route],
        *,
        extensions: Iterable[str] = ("md",),
        ignore_patterns: Iterable[IgnorePattern] = DEFAULT_IGNORE_PATTERNS,
        debounce: int = DEFAULT_DEBOUNCE_MS,
    ) -> None:
        """Initialize the watcher.

        Args:
            routes: Route table from the startup scan
            extensions: Content extensions, used to report new files
            ignore_patterns: Same patterns the scan used
            debounce: Milliseconds to group filesystem events into one batch
        """
        self._routes = {route.source_path: route for route in routes}
        self._extensions = normalize_extensions(extensions)
        self._patterns = compile_patterns(ignore_patterns)
        self._debounce = debounce
        self._stop_event = asyncio.Event()

    def lookup(self, path: Path) -> Route | None:
        """Return the route backed by an absolute source path."""
        return self._routes.get(path)

    async def watch(self, root_dir: Path) -> AsyncIterator[ChangeEvent]:
        """Yield change events until stop() is called.

        Args:
            root_dir: Content root, the same directory that was scanned
        """
        root = root_dir.resolve()
        self._stop_event.clear()
        logger.info(f"Watching for changes in: {root}")

        def watch_filter(change: Change, path: str) -> bool:
            return self._accepts(root, Path(path))

        async for changes in awatch(
            root,
            watch_filter=watch_filter,
            debounce=self._debounce,
            stop_event=self._stop_event,
        ):
            for event in self.process_changes(root, changes):
                yield event

    def stop(self) -> None:
        """Stop a running watch()."""
        self._stop_event.set()

    def process_changes(
        self,
        root: Path,
        changes: Iterable[tuple[Change, str]],
    ) -> list[ChangeEvent]:
        """Map one batch of raw filesystem changes to change events.

        Args:
            root: Resolved content root
            changes: (change, absolute path) pairs from watchfiles

        Returns:
            At most one MODIFIED event per known route, in path order
        """
        events: dict[Path, ChangeEvent] = {}

        for change, path_str in sorted(changes, key=lambda c: (c[1], c[0].value)):
            path = Path(path_str)
            if not self._accepts(root, path):
                continue

            route = self.lookup(path)
            if change == Change.modified:
                if route is not None:
                    logger.info(f"File changed: {path}")
                    events[path] = ChangeEvent(ChangeKind.MODIFIED, route, path)
            elif change == Change.added:
                if route is not None:
                    # Editors that save by replacing the file report it as added
                    logger.info(f"File changed: {path}")
                    events[path] = ChangeEvent(ChangeKind.MODIFIED, route, path)
                elif match_extension(path.name, self._extensions) is not None:
                    logger.info(f"New content file detected: {path}")
                    logger.info("Server restart required to register new routes")
            elif change == Change.deleted:
                if route is not None and not os.path.exists(path):
                    logger.info(f"File deleted: {path}")
                    logger.info("Server restart required to update routes")

        return list(events.values())

    def _accepts(self, root: Path, path: Path) -> bool:
        try:
            relative = path.relative_to(root).as_posix()
        except ValueError:
            return False
        return not is_ignored(relative, self._patterns)
