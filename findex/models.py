"""Record types shared by the index store, registry and search engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True, slots=True)
class Entry:
    """One indexed regular file, relative to its root."""

    rel_path: str
    name: str
    mtime: float
    size_bytes: int

    @classmethod
    def create(cls, rel_path: str, *, mtime: float, size_bytes: int) -> "Entry":
        """Build an entry, deriving ``name`` from the POSIX relative path."""
        return cls(
            rel_path=rel_path,
            name=rel_path.rsplit("/", 1)[-1],
            mtime=float(mtime),
            size_bytes=max(int(size_bytes), 0),
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "path": self.rel_path,
            "name": self.name,
            "mtime": self.mtime,
            "size": self.size_bytes,
        }


@dataclass(frozen=True, slots=True)
class RootStatus:
    root: Path
    file_count: int = 0
    indexed_at: datetime | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "root": str(self.root),
            "fileCount": self.file_count,
            "timestamp": self.indexed_at.isoformat() if self.indexed_at else None,
        }


@dataclass(frozen=True, slots=True)
class RecentRoot:
    path: str
    last_indexed: str | None = None
    file_count: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "path": self.path,
            "last_indexed": self.last_indexed,
            "file_count": self.file_count,
        }
