"""Ignore-file rules for repository walks (.gitignore semantics via pathspec)."""

import logging
from pathlib import Path
from typing import Callable

import pathspec

logger = logging.getLogger(__name__)

IGNORE_FILENAME = ".gitignore"

IgnorePredicate = Callable[[str, bool], bool]


def _never_ignored(rel_path: str, is_dir: bool = False) -> bool:
    return False


def load_ignore_predicate(repo_root: Path, filename: str = IGNORE_FILENAME) -> IgnorePredicate:
    """
    Build a predicate answering whether a repo-relative path is ignored.

    Only the root ignore file is consulted. Directories are matched with a
    trailing slash so directory-only rules (``build/``) apply to them.

    Args:
        repo_root: Repository root
        filename: Ignore file name relative to the root

    Returns:
        ``predicate(rel_path, is_dir) -> bool``; always False when the file
        is absent or unreadable
    """
    ignore_path = Path(repo_root) / filename
    if not ignore_path.is_file():
        return _never_ignored

    try:
        lines = ignore_path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as e:
        logger.warning(f"Could not read {ignore_path}, ignore rules disabled: {e}")
        return _never_ignored

    spec = pathspec.GitIgnoreSpec.from_lines(lines)

    def is_ignored(rel_path: str, is_dir: bool = False) -> bool:
        rel = rel_path.replace("\\", "/").strip("/")
        if not rel:
            return False
        return spec.match_file(rel + "/" if is_dir else rel)

    return is_ignored
