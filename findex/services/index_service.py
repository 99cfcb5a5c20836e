"""Directory walking for `findex index`."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from ..models import Entry
from ..utils import relative_posix

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WalkStats:
    files: int = 0
    directories: int = 0
    skipped_directories: int = 0
    degraded_files: int = 0


def build_index(root: Path, *, stats: WalkStats | None = None) -> tuple[Entry, ...]:
    """Walk *root* and return one entry per regular file beneath it.

    Directories and symlinks are never indexed and symlinks are never
    followed. Sibling names are visited in sorted order so an unchanged tree
    always yields the same tuple. Directories that cannot be listed are
    skipped; files whose metadata cannot be read are kept with the current
    time and a zero size.
    """

    directory = Path(os.path.abspath(root))
    counters = stats if stats is not None else WalkStats()
    entries: list[Entry] = []
    for file_path, dir_entry in _iter_regular_files(directory, counters):
        entries.append(_entry_for(file_path, dir_entry, directory, counters))
    counters.files = len(entries)
    logger.debug(
        "Walked %s: %d files, %d directories, %d skipped, %d degraded",
        directory,
        counters.files,
        counters.directories,
        counters.skipped_directories,
        counters.degraded_files,
    )
    return tuple(entries)


def _iter_regular_files(
    root: Path, stats: WalkStats
) -> Iterator[tuple[Path, os.DirEntry]]:
    stack: list[Path] = [root]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as scanner:
                children = sorted(scanner, key=lambda item: item.name)
        except OSError as exc:
            stats.skipped_directories += 1
            logger.warning("Skipping unreadable directory %s: %s", current, exc)
            continue
        stats.directories += 1
        subdirs: list[Path] = []
        for child in children:
            try:
                if child.is_dir(follow_symlinks=False):
                    subdirs.append(Path(child.path))
                    continue
                if not child.is_file(follow_symlinks=False):
                    continue
            except OSError as exc:
                logger.debug("Skipping %s: %s", child.path, exc)
                continue
            yield Path(child.path), child
        # reversed so the stack pops siblings in name order
        stack.extend(reversed(subdirs))


def _read_stat(dir_entry: os.DirEntry) -> os.stat_result:
    return dir_entry.stat(follow_symlinks=False)


def _entry_for(
    path: Path, dir_entry: os.DirEntry, root: Path, stats: WalkStats
) -> Entry:
    rel_path = relative_posix(path, root)
    try:
        stat_result = _read_stat(dir_entry)
    except OSError as exc:
        stats.degraded_files += 1
        logger.debug("Metadata unavailable for %s: %s", path, exc)
        return Entry.create(rel_path, mtime=time.time(), size_bytes=0)
    return Entry.create(
        rel_path,
        mtime=stat_result.st_mtime,
        size_bytes=stat_result.st_size,
    )
