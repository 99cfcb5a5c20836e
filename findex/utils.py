"""Utility helpers for filesystem access and path handling."""

from __future__ import annotations

from pathlib import Path

from .text import Messages


def resolve_directory(path: Path | str) -> Path:
    """Resolve and validate a user supplied directory path."""
    dir_path = Path(path).expanduser().resolve()
    if not dir_path.exists():
        raise FileNotFoundError(Messages.ERROR_DIRECTORY_MISSING.format(path=dir_path))
    if not dir_path.is_dir():
        raise NotADirectoryError(Messages.ERROR_NOT_A_DIRECTORY.format(path=dir_path))
    return dir_path


def relative_posix(path: Path, root: Path) -> str:
    rel = path.relative_to(root)
    if rel == Path("."):
        return ""
    return rel.as_posix()


def format_path(path: Path, base: Path | None = None) -> str:
    """Return a user friendly representation of *path* relative to *base* when possible."""
    if base:
        try:
            relative = path.relative_to(base)
            return f"./{relative.as_posix()}"
        except ValueError:
            return str(path)
    return str(path)


def ensure_non_negative(value: int, name: str) -> int:
    """Validate that *value* is zero or positive."""
    if value < 0:
        raise ValueError(f"{name} must be >= 0")
    return value
