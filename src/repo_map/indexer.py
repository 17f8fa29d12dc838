"""Orchestrates full builds and incremental updates of the repo map."""

import logging
import time
from pathlib import Path
from typing import Iterable, Optional

from repo_map.config import RepoMapConfig
from repo_map.errors import RepositoryUnreadable
from repo_map.git import get_git_info
from repo_map.ignore import load_ignore_predicate
from repo_map.languages import detect_languages
from repo_map.models import IndexStats, IndexStatus, RepositoryIndex, ScanError, UpdateResult
from repo_map.queries import canonical_language
from repo_map.runner import AstGrepRunner
from repo_map.scanner import BatchScanner
from repo_map.store import IndexStore
from repo_map.updater import IncrementalUpdater, check_staleness
from repo_map.walker import collect_files

logger = logging.getLogger(__name__)


class RepoMapIndexer:
    """Builds, caches and refreshes the symbol index of a repository."""

    def __init__(
        self,
        store: Optional[IndexStore] = None,
        config: Optional[RepoMapConfig] = None,
        runner: Optional[AstGrepRunner] = None,
    ) -> None:
        self._config = config or RepoMapConfig()
        self._store = store or IndexStore.from_config(self._config.cache)
        self._runner = runner or AstGrepRunner(self._config.tool_command)
        scan = self._config.scan
        self._scanner = BatchScanner(
            self._runner,
            batch_size=scan.batch_size,
            hash_workers=scan.hash_workers,
            batch_timeout=scan.batch_timeout,
            single_file_timeout=scan.single_file_timeout,
        )
        self._updater = IncrementalUpdater(
            self._scanner,
            exclude_dirs=self._config.exclude_dirs,
            respect_ignore_file=self._config.respect_ignore_file,
            strict_walk=scan.strict_walk,
        )

    @property
    def store(self) -> IndexStore:
        return self._store

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def init(
        self,
        repo_root: Path,
        force: bool = False,
        languages: Optional[Iterable[str]] = None,
    ) -> RepositoryIndex:
        """Return the cached index, building one if absent, unusable or ``force``."""
        if not force:
            cached = self._store.read(repo_root)
            if cached.status == "ok":
                logger.info(f"Repo map already exists for {repo_root}")
                return cached.index
        return self.build(repo_root, languages=languages)

    def build(self, repo_root: Path, languages: Optional[Iterable[str]] = None) -> RepositoryIndex:
        """
        Full scan and atomic persist.

        Raises:
            ToolUnavailable: If ast-grep cannot be found (nothing is written)
            RepositoryUnreadable: If ``repo_root`` is not a directory
        """
        root = Path(repo_root)
        if not root.is_dir():
            raise RepositoryUnreadable(root)
        self._runner.resolve()

        started = time.monotonic()
        is_ignored = load_ignore_predicate(root) if self._config.respect_ignore_file else None
        active = self._resolve_languages(root, languages, is_ignored)

        paths_by_language, skipped = collect_files(
            root,
            active,
            exclude_dirs=self._config.exclude_dirs,
            is_ignored=is_ignored,
            strict=self._config.scan.strict_walk,
        )
        errors = [ScanError(file=rel, stage="walk", error="directory not readable") for rel in skipped]

        scan = self._scanner.scan(root, paths_by_language)
        errors.extend(scan.errors)

        index = RepositoryIndex(
            git_ref=get_git_info(root),
            detected_languages=active,
            files=scan.files,
            dependencies=scan.dependencies,
            stats=IndexStats(errors=errors),
        )
        index.recalculate_stats()
        index.stats.scan_duration_ms = int((time.monotonic() - started) * 1000)

        self._store.save(root, index)
        logger.info(
            f"Built repo map for {root}: {index.stats.total_files} files, "
            f"{index.stats.total_symbols} symbols in {index.stats.scan_duration_ms}ms"
        )
        return index

    def update(
        self,
        repo_root: Path,
        target: Optional[str] = None,
        full: bool = False,
    ) -> UpdateResult:
        """
        Incrementally update the cached index, falling back to a full build
        when there is no usable cache or the recorded commit is gone.
        """
        root = Path(repo_root)
        cached = self._store.read(root)
        if full or cached.status != "ok":
            if not full:
                logger.info(f"Repo map cache is {cached.status}, running full build")
            return UpdateResult(index=self.build(root))

        result = self._updater.update(root, cached.index, target=target)
        if result.needs_full_rebuild:
            logger.info("Incremental update not possible, running full build")
            return UpdateResult(index=self.build(root), changes=result.changes)

        self._store.save(root, result.index)
        return result

    def status(self, repo_root: Path) -> IndexStatus:
        status = self._store.get_status(repo_root)
        if status.exists:
            index = self._store.load(repo_root)
            if index is not None:
                status.staleness = check_staleness(repo_root, index, self._store)
        return status

    def load(self, repo_root: Path) -> Optional[RepositoryIndex]:
        return self._store.load(repo_root)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _resolve_languages(self, root: Path, languages, is_ignored) -> list[str]:
        requested = list(languages) if languages is not None else list(self._config.languages)
        if requested:
            resolved = {canonical_language(lang) for lang in requested}
            unknown = [lang for lang in requested if canonical_language(lang) is None]
            if unknown:
                logger.warning(f"Ignoring unsupported languages: {', '.join(unknown)}")
            return sorted(lang for lang in resolved if lang)

        return detect_languages(
            root,
            self._config.scan.extension_sample_limit,
            exclude_dirs=self._config.exclude_dirs,
            is_ignored=is_ignored,
        )
