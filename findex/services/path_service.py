"""Resolution of download requests against the active root."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Final

from ..text import Messages

logger = logging.getLogger(__name__)

WINDOWS_DRIVE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z]:")


class RejectReason(str, Enum):
    EMPTY = "empty"
    TRAVERSAL = "traversal"
    OUTSIDE_ROOT = "outside_root"
    NOT_FOUND = "not_found"
    NOT_A_FILE = "not_a_file"
    NO_ACTIVE_ROOT = "no_active_root"

    @property
    def message(self) -> str:
        return _REASON_MESSAGES[self]


_REASON_MESSAGES = {
    RejectReason.EMPTY: Messages.REASON_EMPTY,
    RejectReason.TRAVERSAL: Messages.REASON_TRAVERSAL,
    RejectReason.OUTSIDE_ROOT: Messages.REASON_OUTSIDE_ROOT,
    RejectReason.NOT_FOUND: Messages.REASON_NOT_FOUND,
    RejectReason.NOT_A_FILE: Messages.REASON_NOT_A_FILE,
    RejectReason.NO_ACTIVE_ROOT: Messages.REASON_NO_ACTIVE_ROOT,
}


@dataclass(frozen=True, slots=True)
class PathResolution:
    """Outcome of a download path check: a path, or the reason it was refused."""

    path: Path | None = None
    reason: RejectReason | None = None

    @property
    def ok(self) -> bool:
        return self.path is not None and self.reason is None

    @classmethod
    def rejected(cls, reason: RejectReason) -> "PathResolution":
        return cls(path=None, reason=reason)


def resolve_download_path(root: Path | str, requested: str) -> PathResolution:
    """Confine *requested* to *root*.

    Parent segments are refused before joining, and the joined path must
    still sit under the root both lexically and after symlink resolution.
    Never raises; every failure is reported through ``PathResolution``.
    """

    try:
        return _resolve(Path(os.path.abspath(os.fspath(root))), requested)
    except (OSError, ValueError, RuntimeError) as exc:
        logger.debug("Rejecting %r under %s: %s", requested, root, exc)
        return PathResolution.rejected(RejectReason.NOT_FOUND)


def _resolve(root: Path, requested: str) -> PathResolution:
    normalized = (requested or "").replace("\\", "/").strip()
    if not normalized:
        return PathResolution.rejected(RejectReason.EMPTY)
    parts = normalized.split("/")
    if any(part == ".." for part in parts):
        return PathResolution.rejected(RejectReason.TRAVERSAL)
    if "\x00" in normalized or WINDOWS_DRIVE_PATTERN.match(normalized):
        return PathResolution.rejected(RejectReason.OUTSIDE_ROOT)
    kept = [part for part in parts if part not in ("", ".")]
    if not kept:
        return PathResolution.rejected(RejectReason.EMPTY)

    candidate = root.joinpath(*kept)
    if not _is_within(candidate, root):
        return PathResolution.rejected(RejectReason.OUTSIDE_ROOT)
    if not _is_within(candidate.resolve(strict=False), root.resolve(strict=False)):
        return PathResolution.rejected(RejectReason.OUTSIDE_ROOT)
    if not candidate.exists():
        return PathResolution.rejected(RejectReason.NOT_FOUND)
    if not candidate.is_file():
        return PathResolution.rejected(RejectReason.NOT_A_FILE)
    return PathResolution(path=candidate)


def _is_within(path: Path, root: Path) -> bool:
    root_text = os.path.normpath(str(root))
    path_text = os.path.normpath(str(path))
    if path_text == root_text:
        return True
    prefix = root_text if root_text.endswith(os.sep) else root_text + os.sep
    return path_text.startswith(prefix)
