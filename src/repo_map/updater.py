"""Incremental re-indexing from git diffs, with a hash-comparison fallback."""

import logging
from pathlib import Path
from typing import Iterable, Optional

from repo_map import git
from repo_map.errors import InvalidGitReference
from repo_map.ignore import load_ignore_predicate
from repo_map.languages import detect_languages, language_for_path
from repo_map.models import (
    ChangeSummary,
    FileChanges,
    GitRef,
    RepositoryIndex,
    ScanError,
    Staleness,
    UpdateResult,
    utc_now_iso,
)
from repo_map.queries import get_queries
from repo_map.scanner import BatchScanner, ScanResult, hash_file
from repo_map.walker import collect_files, normalize_path, should_exclude

logger = logging.getLogger(__name__)


class IncrementalUpdater:
    """Applies repository changes to an existing index without a full rescan."""

    def __init__(
        self,
        scanner: BatchScanner,
        *,
        exclude_dirs: Iterable[str] = (),
        respect_ignore_file: bool = True,
        strict_walk: bool = False,
    ) -> None:
        self._scanner = scanner
        self._exclude_dirs = tuple(exclude_dirs)
        self._respect_ignore_file = respect_ignore_file
        self._strict_walk = strict_walk

    def _ignore_predicate(self, repo_root: Path):
        return load_ignore_predicate(repo_root) if self._respect_ignore_file else None

    def update(
        self,
        repo_root: Path,
        index: RepositoryIndex,
        target: Optional[str] = None,
    ) -> UpdateResult:
        """
        Bring ``index`` up to ``target`` (HEAD by default).

        The input index is never mutated; the result carries an updated copy,
        or the original with ``needs_full_rebuild`` set when the recorded commit
        no longer exists.

        Raises:
            InvalidGitReference: If the recorded or target commit is not a hex hash
        """
        root = Path(repo_root)
        base = index.git_ref.commit
        if base is not None:
            git.validate_commit_ref(base)
        if target is not None:
            git.validate_commit_ref(target)

        head = git.get_git_info(root)
        target = target or head.commit
        if base is None or target is None:
            logger.info("No git history to diff against, comparing content hashes")
            return self.update_without_git(root, index)

        if not git.commit_exists(root, base):
            logger.warning(f"Base commit {base} not found (history rewritten), full rebuild required")
            return UpdateResult(index=index, needs_full_rebuild=True)

        changes = git.diff_name_status(root, base, target)
        if changes is None:
            logger.info(f"git diff {base}..{target} failed, comparing content hashes")
            return self.update_without_git(root, index)

        branch = head.branch if target == head.commit else index.git_ref.branch
        return self._apply_changes(root, index, changes, GitRef(commit=target, branch=branch))

    # ------------------------------------------------------------------
    # Git path
    # ------------------------------------------------------------------

    def _apply_changes(
        self,
        root: Path,
        index: RepositoryIndex,
        changes: FileChanges,
        git_ref: GitRef,
    ) -> UpdateResult:
        updated = index.model_copy(deep=True)

        removed = list(changes.deleted) + [source for source, _ in changes.renamed]
        for path in removed:
            updated.remove_file(path)

        candidates = list(dict.fromkeys(
            changes.added + changes.modified + [dest for _, dest in changes.renamed]
        ))
        paths_by_language = self._select_paths(root, candidates, updated)

        scan = self._scan(root, paths_by_language)
        rescanned = self._merge(updated, scan)

        summary = ChangeSummary(
            total=len(changes.added) + len(changes.modified) + len(changes.deleted) + len(changes.renamed),
            updated=rescanned,
            added=len(changes.added),
            deleted=len(changes.deleted),
            renamed=len(changes.renamed),
        )
        self._finish(updated, scan.errors, git_ref)
        logger.info(
            f"Incremental update to {git_ref.commit}: {summary.total} changed paths, "
            f"{summary.updated} records replaced"
        )
        return UpdateResult(index=updated, changes=summary, errors=list(scan.errors))

    def _select_paths(
        self,
        root: Path,
        candidates: list[str],
        index: RepositoryIndex,
    ) -> dict[str, list[str]]:
        """Keep supported, included paths still on disk; drop records of vanished ones."""
        is_ignored = self._ignore_predicate(root)
        paths_by_language: dict[str, list[str]] = {}
        for path in candidates:
            rel = normalize_path(path)
            language = language_for_path(rel)
            if language is None:
                continue
            segments = rel.split("/")
            if any(part.startswith(".") for part in segments[:-1]):
                continue
            if should_exclude(rel, self._exclude_dirs):
                continue
            if is_ignored is not None and is_ignored(rel, False):
                continue
            if not (root / rel).is_file():
                index.remove_file(rel)
                continue
            paths_by_language.setdefault(language, []).append(rel)
        return paths_by_language

    # ------------------------------------------------------------------
    # Hash-comparison path
    # ------------------------------------------------------------------

    def update_without_git(self, repo_root: Path, index: RepositoryIndex) -> UpdateResult:
        """Rescan only files whose content hash differs from the index."""
        root = Path(repo_root)
        updated = index.model_copy(deep=True)
        is_ignored = self._ignore_predicate(root)

        languages = [lang for lang in updated.detected_languages if get_queries(lang) is not None]
        if not languages:
            languages = detect_languages(root, exclude_dirs=self._exclude_dirs, is_ignored=is_ignored)

        current, skipped = collect_files(
            root,
            languages,
            exclude_dirs=self._exclude_dirs,
            is_ignored=is_ignored,
            strict=self._strict_walk,
        )
        errors = [ScanError(file=rel, stage="walk", error="directory not readable") for rel in skipped]
        language_by_path = {rel: lang for lang, paths in current.items() for rel in paths}

        deleted = [path for path in updated.files if path not in language_by_path]
        for path in deleted:
            updated.remove_file(path)

        added, modified = 0, 0
        changed: dict[str, list[str]] = {}
        for rel, language in language_by_path.items():
            existing = updated.files.get(rel)
            if existing is not None:
                try:
                    if hash_file(root / rel) == existing.content_hash:
                        continue
                except OSError as e:
                    errors.append(ScanError(file=rel, stage="read", error=str(e)))
                    continue
                modified += 1
            else:
                added += 1
            changed.setdefault(language, []).append(rel)

        scan = self._scan(root, changed)
        rescanned = self._merge(updated, scan)
        errors.extend(scan.errors)

        summary = ChangeSummary(
            total=added + modified + len(deleted),
            updated=rescanned,
            added=added,
            deleted=len(deleted),
        )
        self._finish(updated, errors, git.get_git_info(root))
        logger.info(
            f"Hash-based update: {added} added, {modified} modified, {len(deleted)} deleted"
        )
        return UpdateResult(index=updated, changes=summary, errors=errors)

    # ------------------------------------------------------------------
    # Shared
    # ------------------------------------------------------------------

    def _scan(self, root: Path, paths_by_language: dict[str, list[str]]) -> ScanResult:
        if not paths_by_language:
            return ScanResult()
        return self._scanner.scan(root, paths_by_language)

    @staticmethod
    def _merge(index: RepositoryIndex, scan: ScanResult) -> int:
        """Replace records whose content changed; returns the number replaced."""
        replaced = 0
        for path, record in scan.files.items():
            existing = index.files.get(path)
            if existing is not None and existing.content_hash == record.content_hash:
                continue
            index.set_file(path, record)
            replaced += 1
            if record.language not in index.detected_languages:
                index.detected_languages.append(record.language)
        return replaced

    @staticmethod
    def _finish(index: RepositoryIndex, errors: list[ScanError], git_ref: GitRef) -> None:
        index.detected_languages = sorted(set(index.detected_languages))
        index.sort_entries()
        index.recalculate_stats()
        index.stats.errors = list(errors)
        index.git_ref = git_ref
        index.updated = utc_now_iso()


def check_staleness(repo_root: Path, index: RepositoryIndex, store=None) -> Staleness:
    """
    Advisory freshness check of an index against the working repository.

    Args:
        repo_root: Repository root
        index: Loaded index
        store: Optional IndexStore whose stale marker is consulted
    """
    root = Path(repo_root)
    result = Staleness()
    commit = index.git_ref.commit

    if not commit:
        result.is_stale = True
        result.reason = "Missing base commit in repo map"
        result.suggest_full_rebuild = True
        return result

    if store is not None and store.is_marked_stale(root):
        result.is_stale = True
        result.reason = "Marked stale"

    try:
        exists = git.commit_exists(root, commit)
    except InvalidGitReference:
        exists = False
    if not exists:
        result.is_stale = True
        result.reason = "Base commit no longer exists (rebased?)"
        result.suggest_full_rebuild = True
        return result

    branch = git.current_branch(root)
    if branch and index.git_ref.branch and branch != index.git_ref.branch:
        result.is_stale = True
        result.reason = f"Branch changed from {index.git_ref.branch} to {branch}"
        result.suggest_full_rebuild = True

    behind = git.commits_behind(root, commit)
    if behind > 0:
        result.is_stale = True
        result.commits_behind = behind
        if not result.reason:
            result.reason = f"{behind} commits behind HEAD"

    return result
