"""Read-only accessors over a loaded repository index."""

import logging
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from repo_map.languages import LANGUAGE_EXTENSIONS
from repo_map.models import FileRecord, RepositoryIndex, SymbolEntry
from repo_map.store import IndexStore

logger = logging.getLogger(__name__)

_CATEGORIES = ("exports", "functions", "classes", "types", "constants")

# Extensions tried for extensionless relative imports (``./util`` -> ``util.ts``)
_RELATIVE_EXTENSIONS = (
    LANGUAGE_EXTENSIONS["typescript"] + LANGUAGE_EXTENSIONS["javascript"]
)


@dataclass(frozen=True)
class SymbolLocation:
    path: str
    category: str
    entry: SymbolEntry


class IndexQuery:
    """Looks up files, symbols and reverse dependencies in a RepositoryIndex."""

    def __init__(self, index: RepositoryIndex) -> None:
        self._index = index

    @classmethod
    def from_store(cls, store: IndexStore, repo_root: Path) -> Optional["IndexQuery"]:
        index = store.load(repo_root)
        if index is None:
            return None
        return cls(index)

    @property
    def index(self) -> RepositoryIndex:
        return self._index

    def list_files(self, language: Optional[str] = None) -> list[str]:
        return sorted(
            path for path, record in self._index.files.items()
            if language is None or record.language == language
        )

    def get_file(self, path: str) -> Optional[FileRecord]:
        return self._index.files.get(path.replace("\\", "/"))

    def get_symbol(self, name: str) -> list[SymbolLocation]:
        """Every entry named ``name``, ordered by path then category."""
        found = []
        for path in sorted(self._index.files):
            symbols = self._index.files[path].symbols
            for category in _CATEGORIES:
                for entry in getattr(symbols, category):
                    if entry.name == name:
                        found.append(SymbolLocation(path=path, category=category, entry=entry))
        return found

    def get_dependents(self, path: str) -> list[str]:
        """Files with an import source that resolves to ``path``."""
        target = path.replace("\\", "/")
        dependents = []
        for importer, sources in sorted(self._index.dependencies.items()):
            if importer == target:
                continue
            record = self._index.files.get(importer)
            language = record.language if record else None
            if any(target in self._candidates(importer, source, language) or
                   self._suffix_match(target, importer, source, language)
                   for source in sources):
                dependents.append(importer)
        return dependents

    # ------------------------------------------------------------------
    # Source resolution
    # ------------------------------------------------------------------

    def _candidates(self, importer: str, source: str, language: Optional[str]) -> set[str]:
        candidates = {source}
        if source.startswith("./") or source.startswith("../"):
            base = posixpath.normpath(posixpath.join(posixpath.dirname(importer), source))
            candidates.add(base)
            for ext in _RELATIVE_EXTENSIONS:
                candidates.add(base + ext)
                candidates.add(f"{base}/index{ext}")
        elif language == "python" and source.startswith("."):
            candidates.update(_python_relative(importer, source))
        return candidates

    @staticmethod
    def _suffix_match(target: str, importer: str, source: str, language: Optional[str]) -> bool:
        """Absolute python modules may live under a source root (``src/pkg/mod.py``)."""
        if language != "python" or source.startswith("."):
            return False
        module = source.replace(".", "/")
        for candidate in (f"{module}.py", f"{module}/__init__.py"):
            if target == candidate or target.endswith("/" + candidate):
                return True
        return False


def _python_relative(importer: str, source: str) -> set[str]:
    dots = len(source) - len(source.lstrip("."))
    base = posixpath.dirname(importer)
    for _ in range(dots - 1):
        base = posixpath.dirname(base)
    rest = source[dots:].replace(".", "/")
    module = posixpath.join(base, rest) if rest else base
    module = module.lstrip("/")
    if not rest:
        return {posixpath.join(module, "__init__.py").lstrip("/")}
    return {f"{module}.py", f"{module}/__init__.py"}
