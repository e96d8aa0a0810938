"""Tests for the content file watcher."""

import asyncio
import logging
from contextlib import aclosing
from pathlib import Path

import pytest
from livestage.core.scanner import scan_files
from livestage.core.types import ChangeKind
from livestage.live.watcher import ChangeWatcher
from watchfiles import Change


@pytest.fixture
def content_root(content_dir: Path) -> Path:
    """Content directory with two documents, resolved."""
    (content_dir / "react.md").write_text("# React")
    (content_dir / "guide").mkdir()
    (content_dir / "guide" / "intro.md").write_text("# Intro")
    return content_dir.resolve()


@pytest.fixture
def watcher(content_root: Path) -> ChangeWatcher:
    return ChangeWatcher(scan_files(content_root, ["md"]), debounce=50)


class TestProcessChanges:
    """Tests for ChangeWatcher.process_changes()."""

    def test__modified_known_file__emits_event(
        self, watcher: ChangeWatcher, content_root: Path
    ) -> None:
        path = content_root / "react.md"

        events = watcher.process_changes(content_root, [(Change.modified, str(path))])

        assert len(events) == 1
        assert events[0].kind is ChangeKind.MODIFIED
        assert events[0].route.path == "/react"
        assert events[0].source_path == path

    def test__nested_file__maps_to_nested_route(
        self, watcher: ChangeWatcher, content_root: Path
    ) -> None:
        path = content_root / "guide" / "intro.md"

        events = watcher.process_changes(content_root, [(Change.modified, str(path))])

        assert [event.route.path for event in events] == ["/guide/intro"]

    def test__added_known_file__is_treated_as_modified(
        self, watcher: ChangeWatcher, content_root: Path
    ) -> None:
        """Replace-on-save shows up as added; it still reloads the page."""
        path = content_root / "react.md"

        events = watcher.process_changes(content_root, [(Change.added, str(path))])

        assert [event.kind for event in events] == [ChangeKind.MODIFIED]

    def test__new_file__is_logged_without_event(
        self,
        watcher: ChangeWatcher,
        content_root: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """New files need a restart to get a route."""
        path = content_root / "new.md"
        path.write_text("# New")

        with caplog.at_level(logging.INFO, logger="livestage.live.watcher"):
            events = watcher.process_changes(content_root, [(Change.added, str(path))])

        assert events == []
        assert "New content file detected" in caplog.text
        assert "restart required" in caplog.text
        assert watcher.lookup(path) is None

    def test__new_file_other_type__is_not_reported(
        self,
        watcher: ChangeWatcher,
        content_root: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        path = content_root / "image.png"

        with caplog.at_level(logging.INFO, logger="livestage.live.watcher"):
            events = watcher.process_changes(content_root, [(Change.added, str(path))])

        assert events == []
        assert "New content file detected" not in caplog.text

    def test__deleted_file__is_logged_without_event(
        self,
        watcher: ChangeWatcher,
        content_root: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """The route stays registered until restart."""
        path = content_root / "react.md"
        path.unlink()

        with caplog.at_level(logging.INFO, logger="livestage.live.watcher"):
            events = watcher.process_changes(content_root, [(Change.deleted, str(path))])

        assert events == []
        assert "File deleted" in caplog.text
        assert watcher.lookup(path) is not None

    def test__unknown_modified_file__is_ignored(
        self, watcher: ChangeWatcher, content_root: Path
    ) -> None:
        path = content_root / "notes.txt"

        assert watcher.process_changes(content_root, [(Change.modified, str(path))]) == []

    def test__dotfile__is_ignored(self, content_root: Path) -> None:
        """Changes matching an ignore pattern never produce events."""
        hidden = content_root / ".drafts"
        hidden.mkdir()
        (hidden / "wip.md").write_text("# WIP")
        routes = scan_files(content_root, ["md"], ignore_patterns=[])
        watcher = ChangeWatcher(routes)

        events = watcher.process_changes(
            content_root, [(Change.modified, str(hidden / "wip.md"))]
        )

        assert events == []

    def test__path_outside_root__is_ignored(
        self, watcher: ChangeWatcher, content_root: Path, tmp_path: Path
    ) -> None:
        outside = tmp_path / "elsewhere.md"

        assert watcher.process_changes(content_root, [(Change.modified, str(outside))]) == []

    def test__repeated_changes__emit_one_event_per_file(
        self, watcher: ChangeWatcher, content_root: Path
    ) -> None:
        """A batch holds at most one event per source path."""
        react = str(content_root / "react.md")
        intro = str(content_root / "guide" / "intro.md")

        events = watcher.process_changes(
            content_root,
            [
                (Change.modified, react),
                (Change.added, react),
                (Change.modified, intro),
                (Change.modified, react),
            ],
        )

        assert sorted(event.route.path for event in events) == ["/guide/intro", "/react"]


class TestWatch:
    """Tests for ChangeWatcher.watch() against the real filesystem."""

    @pytest.mark.asyncio
    async def test__file_write__yields_event(
        self, watcher: ChangeWatcher, content_root: Path
    ) -> None:
        path = content_root / "react.md"

        async def first_event():
            async with aclosing(watcher.watch(content_root)) as events:
                async for event in events:
                    return event

        task = asyncio.create_task(first_event())
        try:
            for i in range(50):
                await asyncio.sleep(0.1)
                if task.done():
                    break
                path.write_text(f"# React {i}")
            event = await asyncio.wait_for(task, timeout=5)
        finally:
            watcher.stop()

        assert event.route.path == "/react"
        assert event.kind is ChangeKind.MODIFIED

    @pytest.mark.asyncio
    async def test__stop__ends_watch(self, watcher: ChangeWatcher, content_root: Path) -> None:
        async def drain() -> list:
            return [event async for event in watcher.watch(content_root)]

        task = asyncio.create_task(drain())
        await asyncio.sleep(0.2)
        watcher.stop()

        assert await asyncio.wait_for(task, timeout=5) == []
