"""ast-grep invocation: binary resolution, exit codes, streamed JSON output."""

import logging
import subprocess
from pathlib import Path
from typing import Any, Optional, Sequence

from repo_map.errors import SubprocessFailure, SubprocessTimeout, ToolUnavailable
from repo_map.utils.stream_parser import parse_jsonl_to_dicts
from repo_map.utils.subprocess_utils import find_command, format_command, run_command

logger = logging.getLogger(__name__)

DEFAULT_COMMANDS = ("ast-grep", "sg")

# ast-grep exits 1 when the pattern simply matched nothing
_OK_EXIT_CODES = (0, 1)


class AstGrepRunner:
    """Runs one structural pattern over a list of files."""

    def __init__(self, command: Optional[str] = None) -> None:
        self._configured = command
        self._command: Optional[str] = None

    @property
    def command(self) -> Optional[str]:
        return self._command

    def resolve(self) -> str:
        """
        Locate the binary, caching the result.

        Raises:
            ToolUnavailable: If neither the configured command nor any default is in PATH
        """
        if self._command:
            return self._command

        candidates = (self._configured,) if self._configured else DEFAULT_COMMANDS
        found = find_command(candidates)
        if not found:
            raise ToolUnavailable(candidates)

        logger.debug(f"Using structural search binary: {found}")
        self._command = found
        return found

    def build_command(self, pattern: str, dialect: str, files: Sequence[str]) -> list[str]:
        return [
            self.resolve(), "run",
            "--pattern", pattern,
            "--lang", dialect,
            "--json=stream",
            *files,
        ]

    def run(
        self,
        pattern: str,
        dialect: str,
        files: Sequence[str],
        *,
        cwd: Path,
        timeout: float,
    ) -> list[dict[str, Any]]:
        """
        Run a pattern and return the decoded match records.

        Args:
            pattern: ast-grep pattern
            dialect: ``--lang`` value
            files: Repo-relative paths
            cwd: Repository root
            timeout: Seconds before the invocation is abandoned

        Returns:
            Match records; malformed lines are dropped

        Raises:
            ToolUnavailable: If the binary cannot be resolved
            SubprocessTimeout: If the invocation timed out
            SubprocessFailure: If it could not launch or exited with an unexpected code
        """
        if not pattern or not files:
            return []

        cmd = self.build_command(pattern, dialect, files)
        try:
            result = run_command(cmd, cwd=cwd, check=False, timeout=timeout)
        except subprocess.TimeoutExpired as e:
            raise SubprocessTimeout(format_command(cmd), timeout) from e
        except OSError as e:
            raise SubprocessFailure(format_command(cmd), -1, str(e)) from e

        if result.returncode not in _OK_EXIT_CODES:
            raise SubprocessFailure(
                format_command(cmd), result.returncode, (result.stderr or "").strip(), result.stdout or ""
            )

        return parse_jsonl_to_dicts(result.stdout)
