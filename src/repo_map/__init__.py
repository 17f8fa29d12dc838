"""Multi-language code symbol index, built with ast-grep and refreshed from git diffs."""

from pathlib import Path
from typing import Optional

from repo_map.config import RepoMapConfig, load_config
from repo_map.errors import (
    CacheCorrupted,
    InvalidGitReference,
    RepoMapError,
    RepositoryUnreadable,
    SubprocessFailure,
    SubprocessTimeout,
    ToolUnavailable,
)
from repo_map.indexer import RepoMapIndexer
from repo_map.models import (
    FileRecord,
    ImportEntry,
    RepositoryIndex,
    ScanError,
    SymbolEntry,
)
from repo_map.query import IndexQuery, SymbolLocation
from repo_map.store import IndexStore

__version__ = "0.1.0"


def load(repo_root: Path, store: Optional[IndexStore] = None) -> Optional[RepositoryIndex]:
    """Cached index for ``repo_root``, or None when absent or unusable."""
    return (store or IndexStore()).load(repo_root)


__all__ = [
    "CacheCorrupted",
    "FileRecord",
    "ImportEntry",
    "IndexQuery",
    "IndexStore",
    "InvalidGitReference",
    "RepoMapConfig",
    "RepoMapError",
    "RepoMapIndexer",
    "RepositoryIndex",
    "RepositoryUnreadable",
    "ScanError",
    "SubprocessFailure",
    "SubprocessTimeout",
    "SymbolEntry",
    "SymbolLocation",
    "ToolUnavailable",
    "load",
    "load_config",
]
