"""Utilities for parsing JSONL (JSON Lines) streams."""

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def parse_jsonl_to_dicts(
    content: str,
    *,
    strict: bool = False
) -> list[dict[str, Any]]:
    """
    Parse JSONL content into list of dictionaries.

    Lines that decode to something other than a JSON object are treated like
    malformed lines.

    Args:
        content: JSONL content (one JSON object per line)
        strict: If True, raise on parse errors; if False, skip invalid lines

    Returns:
        List of successfully parsed dictionaries

    Raises:
        json.JSONDecodeError: If strict=True and a line fails to decode
        ValueError: If strict=True and a line is not a JSON object
    """
    dicts = []
    for line in (content or "").splitlines():
        if not line.strip():
            continue

        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            if strict:
                raise
            logger.debug(f"Failed to parse JSONL line: {e}")
            continue

        if not isinstance(data, dict):
            if strict:
                raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
            logger.debug(f"Skipping non-object JSONL line: {line[:80]}")
            continue

        dicts.append(data)

    return dicts
