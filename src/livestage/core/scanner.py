"""Content discovery.

Walks a content directory, selects files by extension and derives a
stable URL route for each of them:

    react.md            -> /react
    tutorials/intro.md  -> /tutorials/intro
"""

import logging
import os
import re
from collections.abc import Iterable
from pathlib import Path

from livestage.core.types import Route, URLPath
from livestage.errors import ScanError

logger = logging.getLogger(__name__)

# Any path segment starting with a dot (.git, .hidden/, .draft.md)
DOTFILE_PATTERN = re.compile(r"(^|[/\\])\.")

DEFAULT_IGNORE_PATTERNS: tuple[re.Pattern[str], ...] = (DOTFILE_PATTERN,)

IgnorePattern = re.Pattern[str] | str


def normalize_extensions(extensions: Iterable[str]) -> tuple[str, ...]:
    """Normalize extensions to lowercase with a leading dot.

    Args:
        extensions: Extensions with or without leading dot ("md", ".MD")

    Returns:
        Tuple of unique normalized extensions, in input order
    """
    normalized: list[str] = []
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        if not ext.startswith("."):
            ext = f".{ext}"
        if ext not in normalized:
            normalized.append(ext)
    return tuple(normalized)


def compile_patterns(patterns: Iterable[IgnorePattern]) -> tuple[re.Pattern[str], ...]:
    """Compile ignore patterns given as strings or precompiled regexes."""
    return tuple(re.compile(p) if isinstance(p, str) else p for p in patterns)


def is_ignored(relative_path: str, patterns: Iterable[re.Pattern[str]]) -> bool:
    """Check a root-relative POSIX path against ignore patterns."""
    return any(pattern.search(relative_path) for pattern in patterns)


def match_extension(file_name: str, extensions: Iterable[str]) -> str | None:
    """Return the normalized extension a file name ends with, if any."""
    lower_name = file_name.lower()
    for ext in extensions:
        if lower_name.endswith(ext) and len(lower_name) > len(ext):
            return ext
    return None


def route_for(relative_path: str, extension: str) -> URLPath:
    """Derive the route path for a root-relative POSIX file path.

    Args:
        relative_path: File path relative to the content root, "/"-separated
        extension: Normalized extension the file matched (e.g. ".md")

    Returns:
        URL path without the extension (e.g., "/tutorials/intro")
    """
    stem = relative_path[: -len(extension)]
    return URLPath("/" + stem.replace("\\", "/"))


def scan_files(
    root_dir: str | os.PathLike[str],
    extensions: Iterable[str],
    ignore_patterns: Iterable[IgnorePattern] = DEFAULT_IGNORE_PATTERNS,
) -> list[Route]:
    """Recursively discover content files and derive their routes.

    Sibling order is whatever the filesystem returns; sort the result if
    order matters.

    Args:
        root_dir: Content root directory
        extensions: File extensions to include, dot optional, any case
        ignore_patterns: Regexes searched against root-relative POSIX paths.
            A matching directory is skipped together with its subtree.

    Returns:
        One Route per matching file. Empty if root_dir is missing or not a
        directory.
    """
    if not os.fspath(root_dir):
        return []

    root = Path(root_dir)
    if not root.is_dir():
        logger.debug(f"Content root is not a directory: {root}")
        return []

    root = root.resolve()
    normalized = normalize_extensions(extensions)
    patterns = compile_patterns(ignore_patterns)

    routes: list[Route] = []
    _scan_directory(root, root, normalized, patterns, routes)
    return routes


def scan_markdown_files(root_dir: str | os.PathLike[str]) -> list[Route]:
    """Discover Markdown files, skipping dotfiles."""
    return scan_files(root_dir, ["md"])


def scan_content_files(
    root_dir: str | os.PathLike[str],
    extensions: Iterable[str],
) -> list[Route]:
    """Discover files of the given types, skipping dotfiles."""
    return scan_files(root_dir, extensions, DEFAULT_IGNORE_PATTERNS)


def _scan_directory(
    directory: Path,
    root: Path,
    extensions: tuple[str, ...],
    patterns: tuple[re.Pattern[str], ...],
    routes: list[Route],
) -> None:
    try:
        entries = _read_entries(directory)
    except ScanError as e:
        logger.warning(f"{e}; skipping")
        return

    for entry in entries:
        path = Path(entry.path)
        relative = path.relative_to(root).as_posix()

        if is_ignored(relative, patterns):
            logger.debug(f"Ignoring {relative}")
            continue

        # Symlinks are neither followed nor served
        if entry.is_dir(follow_symlinks=False):
            _scan_directory(path, root, extensions, patterns, routes)
        elif entry.is_file(follow_symlinks=False):
            extension = match_extension(entry.name, extensions)
            if extension is not None:
                routes.append(Route(path=route_for(relative, extension), source_path=path))


def _read_entries(directory: Path) -> list[os.DirEntry[str]]:
    """List a directory.

    Raises:
        ScanError: If the directory cannot be read
    """
    try:
        with os.scandir(directory) as it:
            return list(it)
    except OSError as e:
        raise ScanError(f"Cannot read directory {directory}: {e}") from e
