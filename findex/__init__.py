"""findex package initialization."""

from __future__ import annotations

from .api import FindexClient, FindexError, data_dir_context, set_data_dir
from .models import Entry, RecentRoot, RootStatus
from .search import SearchResult, fuzzy_match, fuzzy_search
from .services.path_service import PathResolution, RejectReason
from .store import IndexStore

__all__ = [
    "__version__",
    "Entry",
    "FindexClient",
    "FindexError",
    "IndexStore",
    "PathResolution",
    "RecentRoot",
    "RejectReason",
    "RootStatus",
    "SearchResult",
    "data_dir_context",
    "fuzzy_match",
    "fuzzy_search",
    "get_version",
    "set_data_dir",
]

__version__ = "0.1.0"


def get_version() -> str:
    """Return the current package version."""
    return __version__
