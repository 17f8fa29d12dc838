"""Atomic file I/O operations."""

import logging
import os
from pathlib import Path

from pydantic import BaseModel

logger = logging.getLogger(__name__)


def atomic_write_text(file_path: Path, content: str, max_retries: int = 3) -> None:
    """
    Atomically write content to a file using temp file + rename.

    The temp file lives next to the target so the final ``os.replace`` never
    crosses a filesystem boundary. Readers see either the previous file or the
    complete new one, never a truncated write.

    Args:
        file_path: Target file path
        content: Content to write
        max_retries: Maximum number of retry attempts on failure

    Raises:
        OSError: If write fails after all retries
    """
    # Use PID to avoid temp file collisions between processes
    tmp_file = file_path.with_suffix(f"{file_path.suffix}.tmp.{os.getpid()}")

    last_error = None
    for attempt in range(max_retries):
        try:
            tmp_file.write_text(content, encoding="utf-8")
            os.replace(tmp_file, file_path)
            return
        except OSError as e:
            last_error = e
            if attempt < max_retries - 1:
                logger.warning(
                    f"Failed to write {file_path} (attempt {attempt + 1}/{max_retries}): {e}"
                )
            continue
        finally:
            if tmp_file.exists():
                try:
                    tmp_file.unlink()
                except OSError:
                    pass

    logger.error(f"Failed to write {file_path} after {max_retries} attempts: {last_error}")
    raise last_error


def atomic_write_model(file_path: Path, model: BaseModel, indent: int = 2) -> None:
    """
    Atomically write a Pydantic model to a JSON file, using field aliases.

    Args:
        file_path: Target file path
        model: Pydantic model to serialize
        indent: JSON indentation (default: 2)
    """
    atomic_write_text(file_path, model.model_dump_json(indent=indent, by_alias=True))
