"""Shared utility functions for repo-map."""

from .atomic_io import atomic_write_model, atomic_write_text
from .stream_parser import parse_jsonl_to_dicts
from .subprocess_utils import (
    SubprocessError,
    find_command,
    format_command,
    run_command,
    run_git_command,
)

__all__ = [
    # Atomic I/O
    "atomic_write_text",
    "atomic_write_model",
    # Stream parsing
    "parse_jsonl_to_dicts",
    # Subprocess utilities
    "SubprocessError",
    "find_command",
    "format_command",
    "run_command",
    "run_git_command",
]
