"""Bounded most-recently-used history of indexed roots."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Iterable, List

from ..models import RecentRoot

logger = logging.getLogger(__name__)

MAX_RECENT_ROOTS = 5


class RecentRootsRegistry:
    """Most-recently-used list of roots, unique by path, newest first."""

    def __init__(self, path: Path, *, limit: int = MAX_RECENT_ROOTS) -> None:
        self.path = Path(path)
        self.limit = limit
        self._lock = threading.Lock()
        self._items: list[RecentRoot] = []

    @classmethod
    def from_file(cls, path: Path, *, limit: int = MAX_RECENT_ROOTS) -> "RecentRootsRegistry":
        registry = cls(path, limit=limit)
        registry.load()
        return registry

    def add_or_touch(
        self,
        path: Path | str,
        file_count: int,
        last_indexed: datetime | str | None = None,
    ) -> RecentRoot:
        """Move *path* to the front with fresh metadata, evicting the oldest."""

        key = str(path)
        if isinstance(last_indexed, datetime):
            stamp: str | None = last_indexed.isoformat()
        else:
            stamp = last_indexed
        item = RecentRoot(path=key, last_indexed=stamp, file_count=max(int(file_count), 0))
        with self._lock:
            self._items = [item] + [
                existing for existing in self._items if existing.path != key
            ]
            del self._items[self.limit :]
        return item

    def entries(self) -> List[RecentRoot]:
        with self._lock:
            return list(self._items)

    def most_recent(self) -> RecentRoot | None:
        with self._lock:
            return self._items[0] if self._items else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def load(self) -> None:
        """Replace the in-memory list with the file contents.

        A missing or corrupt file leaves the registry empty.
        """

        items: list[RecentRoot] = []
        if self.path.exists():
            try:
                raw = json.loads(self.path.read_text(encoding="utf-8"))
                items = _parse_roots(raw.get("roots", []) if isinstance(raw, dict) else [])
            except (OSError, ValueError) as exc:
                logger.warning("Ignoring unreadable roots file %s: %s", self.path, exc)
                items = []
        with self._lock:
            self._items = _dedupe(items)[: self.limit]

    def save(self) -> bool:
        """Persist the registry; failures are logged and reported as False."""

        payload = {"roots": [item.to_dict() for item in self.entries()]}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.stem}-", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(payload, handle, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            logger.error("Unable to save roots file %s: %s", self.path, exc)
            return False
        return True


def _parse_roots(raw_items: object) -> list[RecentRoot]:
    if not isinstance(raw_items, list):
        return []
    parsed: list[RecentRoot] = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        path = raw.get("path")
        if not isinstance(path, str) or not path:
            continue
        last_indexed = raw.get("last_indexed")
        if not isinstance(last_indexed, str):
            last_indexed = None
        try:
            file_count = max(int(raw.get("file_count", 0) or 0), 0)
        except (TypeError, ValueError, OverflowError):
            file_count = 0
        parsed.append(RecentRoot(path=path, last_indexed=last_indexed, file_count=file_count))
    return parsed


def _dedupe(items: Iterable[RecentRoot]) -> list[RecentRoot]:
    seen: set[str] = set()
    unique: list[RecentRoot] = []
    for item in items:
        if item.path in seen:
            continue
        seen.add(item.path)
        unique.append(item)
    return unique
