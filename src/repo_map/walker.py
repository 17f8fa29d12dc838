"""Repository file enumeration with directory exclusions and ignore rules."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from repo_map.ignore import IgnorePredicate
from repo_map.languages import LANGUAGE_EXTENSIONS

logger = logging.getLogger(__name__)

# Version control, dependency/build caches, and per-tool state directories
EXCLUDE_DIRS = frozenset({
    ".git", ".svn", ".hg",
    "node_modules", "bower_components", "vendor",
    "dist", "build", "out", "target", "coverage",
    "__pycache__", ".pytest_cache", ".mypy_cache", ".tox",
    ".next", ".nuxt", ".cache", ".gradle",
    ".claude", ".opencode", ".codex",
    ".venv", "venv", "env",
})


@dataclass
class WalkResult:
    files: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)  # unreadable directories


def normalize_path(path: str) -> str:
    rel = path.replace("\\", "/")
    while rel.startswith("./"):
        rel = rel[2:]
    return rel.strip("/")


def should_exclude(rel_path: str, extra: Iterable[str] = ()) -> bool:
    """True if any segment of ``rel_path`` is an excluded directory name."""
    excluded = EXCLUDE_DIRS.union(extra) if extra else EXCLUDE_DIRS
    return any(part in excluded for part in normalize_path(rel_path).split("/"))


def walk_repository(
    repo_root: Path,
    extensions: Optional[Iterable[str]] = None,
    *,
    exclude_dirs: Iterable[str] = (),
    is_ignored: Optional[IgnorePredicate] = None,
    strict: bool = False,
    limit: Optional[int] = None,
) -> WalkResult:
    """
    Walk the repository and collect repo-relative POSIX file paths.

    Hidden directories, excluded directory names and ignored paths are pruned
    before recursion. Unreadable directories are skipped; with ``strict`` they
    are listed in ``WalkResult.skipped``.

    Args:
        repo_root: Repository root
        extensions: Accepted file suffixes (any file when None)
        exclude_dirs: Extra directory names to exclude
        is_ignored: Ignore predicate ``(rel_path, is_dir) -> bool``
        strict: Report unreadable directories
        limit: Stop after this many accepted files (unsorted sample)

    Returns:
        WalkResult with sorted files
    """
    root = Path(repo_root)
    accepted = {ext.lower() for ext in extensions} if extensions is not None else None
    excluded = EXCLUDE_DIRS.union(exclude_dirs)
    result = WalkResult()

    def on_error(err: OSError) -> None:
        path = getattr(err, "filename", None) or ""
        logger.debug(f"Skipping unreadable directory {path}: {err}")
        if strict:
            try:
                rel = Path(path).relative_to(root).as_posix()
            except ValueError:
                rel = str(path)
            result.skipped.append(rel or ".")

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        rel_dir = Path(dirpath).relative_to(root).as_posix()
        rel_dir = "" if rel_dir == "." else rel_dir

        kept = []
        for name in dirnames:
            if name.startswith(".") or name in excluded:
                continue
            rel = f"{rel_dir}/{name}" if rel_dir else name
            if is_ignored is not None and is_ignored(rel, True):
                continue
            kept.append(name)
        # Prune in place so os.walk does not descend
        dirnames[:] = sorted(kept)

        for name in sorted(filenames):
            if accepted is not None and os.path.splitext(name)[1].lower() not in accepted:
                continue
            rel = f"{rel_dir}/{name}" if rel_dir else name
            if is_ignored is not None and is_ignored(rel, False):
                continue
            result.files.append(rel)
            if limit is not None and len(result.files) >= limit:
                result.files.sort()
                return result

    result.files.sort()
    result.skipped.sort()
    return result


def find_files(
    repo_root: Path,
    language: str,
    *,
    exclude_dirs: Iterable[str] = (),
    is_ignored: Optional[IgnorePredicate] = None,
    strict: bool = False,
) -> WalkResult:
    """Enumerate the files of one supported language."""
    extensions = LANGUAGE_EXTENSIONS.get(language)
    if not extensions:
        return WalkResult()
    return walk_repository(
        repo_root,
        extensions,
        exclude_dirs=exclude_dirs,
        is_ignored=is_ignored,
        strict=strict,
    )


def collect_files(
    repo_root: Path,
    languages: Iterable[str],
    *,
    exclude_dirs: Iterable[str] = (),
    is_ignored: Optional[IgnorePredicate] = None,
    strict: bool = False,
) -> tuple[dict[str, list[str]], list[str]]:
    """
    Enumerate files for several languages.

    Returns:
        (paths_by_language, skipped_directories); a path is listed under the
        first language that claims it
    """
    exclude_dirs = tuple(exclude_dirs)
    claimed: set[str] = set()
    skipped: list[str] = []
    paths_by_language: dict[str, list[str]] = {}

    for language in languages:
        walk = find_files(
            repo_root,
            language,
            exclude_dirs=exclude_dirs,
            is_ignored=is_ignored,
            strict=strict,
        )
        for rel in walk.skipped:
            if rel not in skipped:
                skipped.append(rel)
        files = [rel for rel in walk.files if rel not in claimed]
        claimed.update(files)
        if files:
            paths_by_language[language] = files

    return paths_by_language, skipped
