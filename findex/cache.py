"""Per-root index snapshots stored as JSON files."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from .models import Entry

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = Path(os.path.expanduser("~")) / ".findex"
CACHE_DIR = DEFAULT_CACHE_DIR
_CACHE_DIR_OVERRIDE: ContextVar[Path | None] = ContextVar(
    "findex_cache_dir_override",
    default=None,
)
SNAPSHOT_VERSION = 1
INDICES_DIRNAME = "indices"
SNAPSHOT_SUFFIX = ".json"


@dataclass(frozen=True, slots=True)
class Snapshot:
    root: str
    generated_at: datetime
    entries: tuple[Entry, ...]


def root_identifier(root: Path | str) -> str:
    """Return the stable storage key for *root*.

    The key is the SHA-256 digest of the absolute, normalized path string, so
    distinct paths map to distinct keys and the same path always maps to the
    same key. No filesystem access happens here.
    """

    normalized = os.path.normpath(os.path.abspath(os.fspath(root)))
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def _resolve_cache_dir() -> Path:
    override = _CACHE_DIR_OVERRIDE.get()
    return override if override is not None else CACHE_DIR


@contextmanager
def cache_dir_context(path: Path | str | None):
    """Temporarily override the cache directory for the current context."""

    if path is None:
        yield
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    token = _CACHE_DIR_OVERRIDE.set(dir_path)
    try:
        yield
    finally:
        _CACHE_DIR_OVERRIDE.reset(token)


def set_cache_dir(path: Path | str | None) -> None:
    global CACHE_DIR
    if path is None:
        CACHE_DIR = DEFAULT_CACHE_DIR
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    CACHE_DIR = dir_path


def indices_dir() -> Path:
    """Return the directory that holds one snapshot file per root."""
    return _resolve_cache_dir() / INDICES_DIRNAME


def snapshot_path(root: Path | str) -> Path:
    return indices_dir() / f"{root_identifier(root)}{SNAPSHOT_SUFFIX}"


def store_snapshot(
    root: Path,
    entries: Sequence[Entry],
    *,
    generated_at: datetime | None = None,
) -> Path:
    """Write the snapshot for *root* atomically and return its path."""

    target = snapshot_path(root)
    target.parent.mkdir(parents=True, exist_ok=True)
    stamp = generated_at or datetime.now(timezone.utc)
    payload = {
        "version": SNAPSHOT_VERSION,
        "root": str(root),
        "generated_at": stamp.isoformat(),
        "files": [entry.to_dict() for entry in entries],
    }
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{target.stem}-", suffix=".tmp", dir=target.parent
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, ensure_ascii=False, indent=2)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return target


def load_snapshot(root: Path | str) -> Snapshot | None:
    """Load the snapshot stored for *root*.

    Missing, unreadable or malformed snapshots all yield ``None`` so callers
    start from an empty index instead.
    """

    source = snapshot_path(root)
    if not source.exists():
        return None
    try:
        raw = json.loads(source.read_text(encoding="utf-8"))
        return _parse_snapshot(raw)
    except (
        OSError,
        ValueError,
        TypeError,
        KeyError,
        AttributeError,
        OverflowError,
    ) as exc:
        logger.warning("Discarding unreadable snapshot %s: %s", source, exc)
        return None


def _parse_snapshot(raw: object) -> Snapshot:
    if not isinstance(raw, dict):
        raise ValueError("snapshot is not an object")
    files = raw["files"]
    if not isinstance(files, list):
        raise ValueError("snapshot files is not a list")
    generated_at = datetime.fromisoformat(str(raw["generated_at"]))
    if generated_at.tzinfo is None:
        generated_at = generated_at.replace(tzinfo=timezone.utc)
    entries: list[Entry] = []
    seen: set[str] = set()
    for item in files:
        rel_path = str(item["path"])
        if not rel_path or rel_path in seen:
            continue
        seen.add(rel_path)
        entries.append(
            Entry.create(
                rel_path,
                mtime=float(item.get("mtime", 0.0)),
                size_bytes=int(item.get("size", 0)),
            )
        )
    return Snapshot(
        root=str(raw.get("root", "")),
        generated_at=generated_at,
        entries=tuple(entries),
    )


def list_snapshots() -> list[Path]:
    """Return every snapshot file currently stored, sorted by name."""

    directory = indices_dir()
    if not directory.is_dir():
        return []
    return sorted(directory.glob(f"*{SNAPSHOT_SUFFIX}"))


def clear_all_snapshots() -> int:
    """Delete every stored snapshot, returning the number removed."""

    removed = 0
    for path in list_snapshots():
        try:
            path.unlink()
        except FileNotFoundError:
            continue
        except OSError as exc:
            logger.warning("Unable to delete snapshot %s: %s", path, exc)
            continue
        removed += 1
    return removed
