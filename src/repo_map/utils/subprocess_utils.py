"""Standardized subprocess utilities for command execution."""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union

logger = logging.getLogger(__name__)


class SubprocessError(Exception):
    """Exception raised when a subprocess command fails."""

    def __init__(self, cmd: str, returncode: int, stderr: str, stdout: str = ""):
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr
        self.stdout = stdout
        super().__init__(
            f"Command failed with exit code {returncode}: {cmd}\nstderr: {stderr}"
        )


def format_command(cmd: Union[str, Sequence[str]], max_len: int = 200) -> str:
    """Render a command for log and error messages, eliding long file lists."""
    text = cmd if isinstance(cmd, str) else " ".join(cmd)
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def run_command(
    cmd: Union[str, List[str]],
    *,
    cwd: Optional[Path] = None,
    capture_output: bool = True,
    check: bool = True,
    timeout: Optional[float] = None,
    env: Optional[dict] = None,
) -> subprocess.CompletedProcess:
    """
    Run a command with standardized error handling.

    Output is decoded as UTF-8; undecodable bytes are replaced rather than
    raising, since tool output may echo arbitrary source text.

    Args:
        cmd: Command to run (string or list)
        cwd: Working directory
        capture_output: Capture stdout/stderr
        check: Raise exception on non-zero exit
        timeout: Timeout in seconds
        env: Environment variables

    Returns:
        CompletedProcess with stdout, stderr, returncode

    Raises:
        SubprocessError: If check=True and command fails
        subprocess.TimeoutExpired: If timeout exceeded
        OSError: If the executable cannot be launched
    """
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=capture_output,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            env=env,
            check=False,  # We handle check ourselves for better error messages
        )
    except subprocess.TimeoutExpired:
        logger.error(f"Command timed out after {timeout}s: {format_command(cmd)}")
        raise

    if check and result.returncode != 0:
        raise SubprocessError(
            cmd=format_command(cmd),
            returncode=result.returncode,
            stderr=result.stderr,
            stdout=result.stdout,
        )

    return result


def run_git_command(
    args: List[str],
    *,
    cwd: Optional[Path] = None,
    check: bool = True,
    timeout: int = 30,
) -> subprocess.CompletedProcess:
    """
    Run a git command with standardized error handling.

    Args:
        args: Git command arguments (without 'git' prefix)
        cwd: Working directory (git repo)
        check: Raise exception on non-zero exit
        timeout: Timeout in seconds (default: 30)

    Returns:
        CompletedProcess with stdout, stderr, returncode

    Raises:
        SubprocessError: If check=True and command fails
        subprocess.TimeoutExpired: If timeout exceeded
        OSError: If git is not installed
    """
    cmd = ["git"] + args

    try:
        return run_command(cmd, cwd=cwd, check=check, timeout=timeout)
    except SubprocessError:
        logger.debug(f"Git command failed in {cwd}: {' '.join(args)}")
        raise


def find_command(candidates: Sequence[str]) -> Optional[str]:
    """
    Return the first candidate executable found in PATH.

    Args:
        candidates: Command names (or paths) to try, in order

    Returns:
        The matching candidate as given, or None if none resolve
    """
    for command in candidates:
        if command and shutil.which(command):
            return command
    return None
