"""Git lookups used by the indexer: HEAD, branch, name-status diffs, ancestry."""

import logging
import re
import subprocess
from pathlib import Path
from typing import Optional

from repo_map.errors import InvalidGitReference
from repo_map.models import FileChanges, GitRef
from repo_map.utils.subprocess_utils import SubprocessError, run_git_command
from repo_map.walker import normalize_path

logger = logging.getLogger(__name__)

COMMIT_HASH_RE = re.compile(r"^[0-9a-fA-F]{7,64}$")


def validate_commit_ref(ref: Optional[str]) -> str:
    """Reject anything but a hex commit hash before it reaches a git command line."""
    if not isinstance(ref, str) or not COMMIT_HASH_RE.match(ref):
        raise InvalidGitReference(ref)
    return ref


def _git_output(repo_root: Path, args: list[str], strip: bool = True) -> Optional[str]:
    try:
        result = run_git_command(args, cwd=repo_root)
    except (SubprocessError, subprocess.TimeoutExpired, OSError) as e:
        logger.debug(f"git {' '.join(args)} failed in {repo_root}: {e}")
        return None
    return result.stdout.strip() if strip else result.stdout


def head_commit(repo_root: Path) -> Optional[str]:
    return _git_output(repo_root, ["rev-parse", "HEAD"]) or None


def current_branch(repo_root: Path) -> Optional[str]:
    return _git_output(repo_root, ["rev-parse", "--abbrev-ref", "HEAD"]) or None


def get_git_info(repo_root: Path) -> GitRef:
    """Commit and branch of HEAD; both None outside a repository."""
    commit = head_commit(repo_root)
    if commit is None:
        return GitRef()
    return GitRef(commit=commit, branch=current_branch(repo_root))


def commit_exists(repo_root: Path, commit: str) -> bool:
    validate_commit_ref(commit)
    try:
        run_git_command(["cat-file", "-e", f"{commit}^{{commit}}"], cwd=repo_root)
    except (SubprocessError, subprocess.TimeoutExpired, OSError):
        return False
    return True


def commits_behind(repo_root: Path, commit: str) -> int:
    validate_commit_ref(commit)
    out = _git_output(repo_root, ["rev-list", "--count", f"{commit}..HEAD"])
    try:
        return int(out) if out else 0
    except ValueError:
        return 0


def parse_name_status(output: str) -> FileChanges:
    """
    Parse ``git diff --name-status -z -M`` output.

    Fields are NUL-separated: a status, then one path, or two (source and
    destination) for ``R<score>`` / ``C<score>``. ``A`` added, ``M``/``T``
    modified, ``D`` deleted, ``R`` renamed, ``C`` copied (only the
    destination is new).
    """
    changes = FileChanges()
    fields = (output or "").split("\0")
    i = 0
    while i < len(fields):
        status = fields[i].strip()
        i += 1
        if not status:
            continue

        code = status[0]
        if code in ("R", "C"):
            if i + 1 >= len(fields):
                break
            source, dest = normalize_path(fields[i]), normalize_path(fields[i + 1])
            i += 2
            if code == "R":
                changes.renamed.append((source, dest))
            else:
                changes.added.append(dest)
            continue

        if i >= len(fields):
            break
        path = normalize_path(fields[i])
        i += 1
        if not path:
            continue
        if code == "A":
            changes.added.append(path)
        elif code in ("M", "T"):
            changes.modified.append(path)
        elif code == "D":
            changes.deleted.append(path)
        else:
            logger.debug(f"Ignoring diff status {status!r} for {path}")
    return changes


def diff_name_status(repo_root: Path, base: str, target: str) -> Optional[FileChanges]:
    """Changes between two validated commits, or None if the diff fails."""
    validate_commit_ref(base)
    validate_commit_ref(target)
    # Unquoted, NUL-separated paths so non-ASCII names reach the index verbatim
    args = ["-c", "core.quotePath=false", "diff", "--name-status", "-z", "-M", base, target]
    output = _git_output(repo_root, args, strip=False)
    if output is None:
        return None
    return parse_name_status(output)
