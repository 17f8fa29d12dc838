"""Language detection from manifest files and file extensions."""

import logging
import os
from pathlib import Path
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

LANGUAGE_EXTENSIONS: dict[str, tuple[str, ...]] = {
    "javascript": (".js", ".jsx", ".mjs", ".cjs"),
    "typescript": (".ts", ".tsx", ".mts", ".cts"),
    "python": (".py", ".pyw"),
    "rust": (".rs",),
    "go": (".go",),
    "java": (".java",),
}

_EXTENSION_MAP: dict[str, str] = {
    ext: language
    for language, extensions in LANGUAGE_EXTENSIONS.items()
    for ext in extensions
}

CONFIG_INDICATORS: dict[str, tuple[str, ...]] = {
    "javascript": ("package.json", "jsconfig.json"),
    "typescript": ("tsconfig.json", "tsconfig.base.json"),
    "python": ("pyproject.toml", "setup.py", "requirements.txt", "Pipfile"),
    "rust": ("Cargo.toml",),
    "go": ("go.mod", "go.sum"),
    "java": ("pom.xml", "build.gradle", "build.gradle.kts"),
}


def language_for_path(path: str) -> Optional[str]:
    return _EXTENSION_MAP.get(os.path.splitext(path)[1].lower())


def detect_languages(
    repo_root: Path,
    sample_limit: int = 500,
    *,
    exclude_dirs: Iterable[str] = (),
    is_ignored=None,
) -> list[str]:
    """
    Detect the languages present in a repository.

    Union of languages whose manifest files sit at the root and languages
    seen among the first ``sample_limit`` source files of a walk.

    Returns:
        Sorted language names; empty if the root is inaccessible
    """
    from repo_map.walker import walk_repository

    root = Path(repo_root)
    if not root.is_dir():
        return []

    detected: set[str] = set()
    for language, indicators in CONFIG_INDICATORS.items():
        if any((root / name).exists() for name in indicators):
            detected.add(language)

    try:
        sample = walk_repository(
            root,
            _EXTENSION_MAP.keys(),
            exclude_dirs=exclude_dirs,
            is_ignored=is_ignored,
            limit=sample_limit,
        )
    except OSError as e:
        logger.debug(f"Extension sample failed for {root}: {e}")
        return sorted(detected)

    for rel in sample.files:
        language = language_for_path(rel)
        if language:
            detected.add(language)

    return sorted(detected)
