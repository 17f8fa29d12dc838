"""Persistent storage for the repository index."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

from pydantic import ValidationError

from repo_map.errors import CacheCorrupted
from repo_map.models import SCHEMA_VERSION, IndexStatus, RepositoryIndex, utc_now_iso
from repo_map.utils.atomic_io import atomic_write_model, atomic_write_text

logger = logging.getLogger(__name__)

CacheStatus = Literal["absent", "ok", "corrupted", "outdated"]


@dataclass
class CacheReadResult:
    status: CacheStatus
    index: Optional[RepositoryIndex] = None
    reason: Optional[str] = None


class IndexStore:
    """Reads and writes ``<repo>/<state_dir>/repo-map.json``."""

    def __init__(
        self,
        state_dir: str = ".claude",
        filename: str = "repo-map.json",
        stale_marker: str = "repo-map.stale",
    ) -> None:
        self._state_dir = state_dir
        self._filename = filename
        self._stale_marker = stale_marker

    @classmethod
    def from_config(cls, cache_config) -> "IndexStore":
        return cls(
            state_dir=cache_config.state_dir,
            filename=cache_config.filename,
            stale_marker=cache_config.stale_marker,
        )

    def state_dir(self, repo_root: Path) -> Path:
        return Path(repo_root) / self._state_dir

    def index_path(self, repo_root: Path) -> Path:
        return self.state_dir(repo_root) / self._filename

    def stale_path(self, repo_root: Path) -> Path:
        return self.state_dir(repo_root) / self._stale_marker

    def read(self, repo_root: Path, strict: bool = False) -> CacheReadResult:
        """
        Read the cache and report what was found.

        Args:
            repo_root: Repository root
            strict: Raise CacheCorrupted instead of reporting ``corrupted``

        Returns:
            CacheReadResult; ``index`` is set only when status is ``ok``
        """
        path = self.index_path(repo_root)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return CacheReadResult(status="absent")
        except OSError as exc:
            return self._corrupted(path, f"unreadable: {exc}", strict)

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            return self._corrupted(path, f"invalid JSON: {exc}", strict)

        if not isinstance(data, dict):
            return self._corrupted(path, "top-level value is not an object", strict)

        version = data.get("schemaVersion")
        if version != SCHEMA_VERSION:
            logger.info(
                "Repo map at %s has schema version %r (expected %d), rebuild required",
                path, version, SCHEMA_VERSION,
            )
            return CacheReadResult(status="outdated", reason=f"schemaVersion {version!r}")

        try:
            index = RepositoryIndex.model_validate(data)
        except ValidationError as exc:
            return self._corrupted(path, str(exc), strict)

        return CacheReadResult(status="ok", index=index)

    def _corrupted(self, path: Path, reason: str, strict: bool) -> CacheReadResult:
        if strict:
            raise CacheCorrupted(path, reason)
        logger.warning("Corrupt repo map at %s, ignoring: %s", path, reason)
        return CacheReadResult(status="corrupted", reason=reason)

    def load(self, repo_root: Path) -> Optional[RepositoryIndex]:
        return self.read(repo_root).index

    def save(self, repo_root: Path, index: RepositoryIndex) -> Path:
        path = self.index_path(repo_root)
        path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write_model(path, index)
        self.clear_stale(repo_root)
        return path

    def exists(self, repo_root: Path) -> bool:
        return self.index_path(repo_root).is_file()

    def reset(self, repo_root: Path) -> bool:
        """Delete the cache and stale marker. Returns True if a cache was removed."""
        self.clear_stale(repo_root)
        try:
            self.index_path(repo_root).unlink()
        except FileNotFoundError:
            return False
        return True

    def mark_stale(self, repo_root: Path) -> None:
        path = self.stale_path(repo_root)
        path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write_text(path, utc_now_iso())

    def clear_stale(self, repo_root: Path) -> None:
        try:
            self.stale_path(repo_root).unlink()
        except FileNotFoundError:
            pass

    def is_marked_stale(self, repo_root: Path) -> bool:
        return self.stale_path(repo_root).exists()

    def get_status(self, repo_root: Path) -> IndexStatus:
        index = self.load(repo_root)
        if index is None:
            return IndexStatus(exists=False)
        return IndexStatus(
            exists=True,
            generated=index.generated,
            updated=index.updated,
            commit=index.git_ref.commit,
            branch=index.git_ref.branch,
            files=index.stats.total_files,
            symbols=index.stats.total_symbols,
            languages=list(index.detected_languages),
        )
