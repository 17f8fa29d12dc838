"""Static registry of structural query tables, keyed by language."""

import os
from typing import Optional

from repo_map.queries import go, java, javascript, python, rust, typescript
from repo_map.queries.base import (
    CATEGORY_ORDER,
    Category,
    ExportRule,
    ExtractionMode,
    LanguageQueries,
    QueryDefinition,
)

_REGISTRY: dict[str, LanguageQueries] = {
    "javascript": javascript.QUERIES,
    "typescript": typescript.QUERIES,
    "python": python.QUERIES,
    "go": go.QUERIES,
    "rust": rust.QUERIES,
    "java": java.QUERIES,
}

_ALIASES = {
    "js": "javascript",
    "node": "javascript",
    "ts": "typescript",
    "py": "python",
}


def canonical_language(language: str) -> Optional[str]:
    name = (language or "").lower()
    name = _ALIASES.get(name, name)
    return name if name in _REGISTRY else None


def get_queries(language: str) -> Optional[LanguageQueries]:
    """Query table for ``language`` (aliases accepted), or None if unsupported."""
    canonical = canonical_language(language)
    return _REGISTRY[canonical] if canonical else None


def dialect_for(path: str, language: str) -> str:
    """ast-grep ``--lang`` value for one file."""
    ext = os.path.splitext(path)[1].lower()
    canonical = canonical_language(language) or "javascript"
    if canonical == "javascript" and ext == ".jsx":
        return "jsx"
    if canonical == "typescript" and ext == ".tsx":
        return "tsx"
    return canonical


__all__ = [
    "CATEGORY_ORDER",
    "Category",
    "ExportRule",
    "ExtractionMode",
    "LanguageQueries",
    "QueryDefinition",
    "canonical_language",
    "dialect_for",
    "get_queries",
]
