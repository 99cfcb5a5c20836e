"""Multi-root index store with an explicit active root."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Sequence

from . import cache
from .locks import KeyedLocks, ReadWriteLock
from .models import Entry, RootStatus
from .search import SearchResult, fuzzy_search
from .services.index_service import build_index

logger = logging.getLogger(__name__)

Builder = Callable[[Path], Sequence[Entry]]


@dataclass(frozen=True, slots=True)
class _StoredIndex:
    root: Path
    entries: tuple[Entry, ...]
    indexed_at: datetime | None


def _normalize_root(root: Path | str) -> Path:
    return Path(os.path.normpath(os.path.abspath(os.fspath(root))))


class IndexStore:
    """Holds one immutable index per root plus the active root pointer.

    Readers (``query``, ``status``, ``entries``) share a reader/writer lock;
    ``rebuild`` and ``set_active_root`` take it exclusively only while
    swapping references. Directory walks and snapshot I/O run outside the
    lock. Rebuilds of the same root are serialized; rebuilds of different
    roots run in parallel.
    """

    def __init__(self, *, builder: Builder | None = None, persist: bool = True) -> None:
        self._builder: Builder = builder or build_index
        self._persist = persist
        self._lock = ReadWriteLock()
        self._rebuild_locks = KeyedLocks()
        self._indices: dict[str, _StoredIndex] = {}
        self._active_key: str | None = None

    @property
    def active_root(self) -> Path | None:
        with self._lock.read_locked():
            stored = self._indices.get(self._active_key) if self._active_key else None
        return stored.root if stored is not None else None

    def rebuild(self, root: Path | str) -> RootStatus:
        """Re-walk *root*, replace its index and snapshot it to disk."""

        directory = _normalize_root(root)
        key = cache.root_identifier(directory)
        with self._rebuild_locks.locked(key):
            entries = tuple(self._builder(directory))
            completed = datetime.now(timezone.utc)
            stored = _StoredIndex(root=directory, entries=entries, indexed_at=completed)
            with self._lock.write_locked():
                self._indices[key] = stored
            logger.info("Indexed %d files under %s", len(entries), directory)
            self._write_snapshot(stored)
        return _status_of(stored)

    def set_active_root(self, root: Path | str) -> RootStatus:
        """Point searches at *root*, restoring its snapshot when not in memory."""

        directory = _normalize_root(root)
        key = cache.root_identifier(directory)
        with self._lock.read_locked():
            known = key in self._indices
        restored: _StoredIndex | None = None
        if not known:
            restored = self._read_snapshot(directory)
        with self._lock.write_locked():
            stored = self._indices.get(key)
            if stored is None:
                # a rebuild that finished meanwhile has already won
                stored = restored or _StoredIndex(root=directory, entries=(), indexed_at=None)
                self._indices[key] = stored
            self._active_key = key
        logger.debug("Active root is now %s", directory)
        return _status_of(stored)

    def query(self, text: str, *, limit: int | None = None) -> List[SearchResult]:
        """Rank the active root's entries against *text*."""

        with self._lock.read_locked():
            stored = self._indices.get(self._active_key) if self._active_key else None
        if stored is None:
            return []
        return fuzzy_search(text, stored.entries, limit=limit)

    def status(self, root: Path | str | None = None) -> RootStatus | None:
        """Return the status of *root*, or of the active root when omitted."""

        with self._lock.read_locked():
            stored = self._lookup(root)
        return _status_of(stored) if stored is not None else None

    def entries(self, root: Path | str | None = None) -> tuple[Entry, ...]:
        with self._lock.read_locked():
            stored = self._lookup(root)
        return stored.entries if stored is not None else ()

    def is_loaded(self, root: Path | str) -> bool:
        key = cache.root_identifier(_normalize_root(root))
        with self._lock.read_locked():
            return key in self._indices

    def purge_all(self) -> int:
        """Delete every persisted snapshot.

        In-memory indices stay usable until their next rebuild; only the disk
        copies are removed. No lock is taken.
        """

        try:
            removed = cache.clear_all_snapshots()
        except OSError as exc:
            logger.error("Unable to purge snapshots: %s", exc)
            return 0
        logger.info("Purged %d index snapshots", removed)
        return removed

    def _lookup(self, root: Path | str | None) -> _StoredIndex | None:
        if root is None:
            key = self._active_key
        else:
            key = cache.root_identifier(_normalize_root(root))
        if key is None:
            return None
        return self._indices.get(key)

    def _write_snapshot(self, stored: _StoredIndex) -> None:
        if not self._persist:
            return
        try:
            cache.store_snapshot(
                stored.root,
                stored.entries,
                generated_at=stored.indexed_at,
            )
        except OSError as exc:
            logger.error("Unable to persist index for %s: %s", stored.root, exc)

    def _read_snapshot(self, directory: Path) -> _StoredIndex | None:
        if not self._persist:
            return None
        snapshot = cache.load_snapshot(directory)
        if snapshot is None:
            return None
        logger.debug(
            "Restored %d entries for %s from snapshot", len(snapshot.entries), directory
        )
        return _StoredIndex(
            root=directory,
            entries=snapshot.entries,
            indexed_at=snapshot.generated_at,
        )


def _status_of(stored: _StoredIndex) -> RootStatus:
    return RootStatus(
        root=stored.root,
        file_count=len(stored.entries),
        indexed_at=stored.indexed_at,
    )
