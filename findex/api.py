"""Public Python API for findex."""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import List

from .cache import cache_dir_context, set_cache_dir
from .config import config_dir_context, recent_roots_path, set_config_dir
from .models import RecentRoot, RootStatus
from .search import SearchResult
from .services.path_service import PathResolution, RejectReason, resolve_download_path
from .services.roots_service import RecentRootsRegistry
from .store import IndexStore
from .text import Messages
from .utils import ensure_non_negative, resolve_directory


class FindexError(ValueError):
    """Raised when the findex public API input is invalid."""


@contextmanager
def data_dir_context(
    data_dir: Path | str | None,
    *,
    config_dir: Path | str | None = None,
    cache_dir: Path | str | None = None,
):
    if data_dir is None and config_dir is None and cache_dir is None:
        yield
        return
    effective_config_dir = config_dir if config_dir is not None else data_dir
    effective_cache_dir = cache_dir if cache_dir is not None else data_dir
    with ExitStack() as stack:
        if effective_config_dir is not None:
            stack.enter_context(config_dir_context(effective_config_dir))
        if effective_cache_dir is not None:
            stack.enter_context(cache_dir_context(effective_cache_dir))
        yield


def set_data_dir(path: Path | str | None) -> None:
    """Set the base directory for config, registry and snapshot data."""
    set_config_dir(path)
    set_cache_dir(path)


class FindexClient:
    """Session-style wrapper owning one index store and one roots registry.

    ``data_dir`` overrides where snapshots, the registry and config live for
    every call made through this client.
    """

    def __init__(
        self,
        *,
        data_dir: Path | str | None = None,
        store: IndexStore | None = None,
        registry: RecentRootsRegistry | None = None,
    ) -> None:
        self.data_dir = data_dir
        self.store = store or IndexStore()
        if registry is None:
            with self._data_context():
                registry = RecentRootsRegistry.from_file(recent_roots_path())
        self.registry = registry

    def _data_context(self):
        return data_dir_context(self.data_dir)

    @property
    def active_root(self) -> Path | None:
        return self.store.active_root

    def status(self) -> RootStatus | None:
        return self.store.status()

    def rebuild_index(self, root: Path | str | None = None) -> RootStatus:
        """Re-walk *root* (default: the active root) and persist its snapshot."""

        directory = self._require_root(root)
        with self._data_context():
            status = self.store.rebuild(directory)
            self._touch(status)
        return status

    def change_active_root(self, path: Path | str) -> RootStatus:
        """Make *path* the active root and record it as recently used."""

        directory = self._validate_directory(path)
        with self._data_context():
            status = self.store.set_active_root(directory)
            self._touch(status)
        return status

    def search(self, query: str, *, top: int | None = None) -> List[SearchResult]:
        """Fuzzy-search the active root; ``top`` of None or 0 returns every match."""

        if top is not None:
            try:
                ensure_non_negative(top, "top")
            except ValueError as exc:
                raise FindexError(str(exc)) from exc
        return self.store.query(query, limit=top)

    def list_recent_roots(self) -> List[RecentRoot]:
        return self.registry.entries()

    def purge_all_indices(self) -> str:
        with self._data_context():
            removed = self.store.purge_all()
        return Messages.INFO_PURGED.format(count=removed)

    def resolve_download_path(self, requested: str) -> PathResolution:
        root = self.store.active_root
        if root is None:
            return PathResolution.rejected(RejectReason.NO_ACTIVE_ROOT)
        return resolve_download_path(root, requested)

    def read_file(self, requested: str) -> bytes:
        """Return the bytes of *requested* under the active root."""

        resolution = self.resolve_download_path(requested)
        if not resolution.ok:
            reason = resolution.reason or RejectReason.NOT_FOUND
            raise FindexError(
                Messages.ERROR_DOWNLOAD_REJECTED.format(path=requested, reason=reason.message)
            )
        try:
            return resolution.path.read_bytes()
        except OSError as exc:
            raise FindexError(
                Messages.ERROR_READ_FAILED.format(path=requested, reason=exc.strerror or exc)
            ) from exc

    def _touch(self, status: RootStatus) -> None:
        self.registry.add_or_touch(status.root, status.file_count, status.indexed_at)
        self.registry.save()

    def _require_root(self, root: Path | str | None) -> Path:
        if root is not None:
            return self._validate_directory(root)
        active = self.store.active_root
        if active is None:
            raise FindexError(Messages.ERROR_NO_ACTIVE_ROOT)
        return active

    @staticmethod
    def _validate_directory(path: Path | str) -> Path:
        try:
            return resolve_directory(path)
        except (FileNotFoundError, NotADirectoryError) as exc:
            raise FindexError(str(exc)) from exc
