"""Batched structural scanning of source files into per-file symbol records."""

import hashlib
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from repo_map.errors import SubprocessFailure, SubprocessTimeout
from repo_map.exports import apply_export_rule, ensure_export_entries
from repo_map.extraction import extract_names, extract_sources, get_column, get_line
from repo_map.models import FileRecord, FileSymbols, ImportEntry, ScanError, SymbolEntry
from repo_map.queries import Category, QueryDefinition, dialect_for, get_queries
from repo_map.runner import AstGrepRunner
from repo_map.walker import normalize_path

logger = logging.getLogger(__name__)

HASH_LENGTH = 16

_SYMBOL_CATEGORIES = (
    Category.EXPORTS,
    Category.FUNCTIONS,
    Category.CLASSES,
    Category.TYPES,
    Category.CONSTANTS,
)
# Lookup order for synthesized export entries
_DECLARED_CATEGORIES = _SYMBOL_CATEGORIES[1:]


def hash_content(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()[:HASH_LENGTH]


def hash_file(path: Path) -> str:
    return hash_content(Path(path).read_bytes())


@dataclass
class ScanResult:
    files: dict[str, FileRecord] = field(default_factory=dict)
    dependencies: dict[str, list[str]] = field(default_factory=dict)
    errors: list[ScanError] = field(default_factory=list)


@dataclass
class _FileArena:
    """Mutable per-file state for the duration of one scan."""
    language: str
    content_hash: str
    size_bytes: int
    content: Optional[str] = None
    symbols: dict[Category, dict[str, dict[str, Any]]] = field(
        default_factory=lambda: {category: {} for category in _SYMBOL_CATEGORIES}
    )
    imports: list[ImportEntry] = field(default_factory=list)
    seen_imports: set[tuple[str, str]] = field(default_factory=set)


class BatchScanner:
    """Runs every query of a language over its files in fixed-size batches."""

    def __init__(
        self,
        runner: AstGrepRunner,
        *,
        batch_size: int = 100,
        hash_workers: int = 8,
        batch_timeout: float = 300.0,
        single_file_timeout: float = 30.0,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self._runner = runner
        self._batch_size = batch_size
        self._hash_workers = max(1, hash_workers)
        self._batch_timeout = batch_timeout
        self._single_file_timeout = single_file_timeout

    def scan(self, repo_root: Path, paths_by_language: Mapping[str, Iterable[str]]) -> ScanResult:
        """
        Scan files and build their records.

        Args:
            repo_root: Repository root; also the working directory of every invocation
            paths_by_language: Repo-relative paths per language. A path listed under
                more than one language is scanned only for the first.

        Returns:
            ScanResult with name-sorted symbols, dependency edges and per-file or
            per-invocation errors

        Raises:
            ToolUnavailable: If the structural search binary cannot be resolved
        """
        root = Path(repo_root)
        self._runner.resolve()

        result = ScanResult()
        arenas = self._read_files(root, paths_by_language, result.errors)
        if not arenas:
            return result

        groups: dict[tuple[str, str], list[str]] = {}
        for rel in sorted(arenas):
            language = arenas[rel].language
            groups.setdefault((language, dialect_for(rel, language)), []).append(rel)

        invocations = 0
        for (language, dialect), paths in groups.items():
            queries = get_queries(language)
            chunks = [paths[i:i + self._batch_size] for i in range(0, len(paths), self._batch_size)]
            for category, definition in queries.groups():
                for chunk in chunks:
                    invocations += 1
                    matches = self._run_chunk(root, definition, dialect, chunk, result.errors)
                    for match in matches:
                        self._route(root, arenas, category, definition, match)

        for rel in sorted(arenas):
            record = self._freeze(arenas[rel])
            result.files[rel] = record
            sources = record.import_sources()
            if sources:
                result.dependencies[rel] = sources

        logger.info(
            f"Scanned {len(result.files)} files with {invocations} invocations "
            f"({len(result.errors)} errors)"
        )
        return result

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def _read_files(
        self,
        root: Path,
        paths_by_language: Mapping[str, Iterable[str]],
        errors: list[ScanError],
    ) -> dict[str, _FileArena]:
        jobs: list[tuple[str, Any]] = []
        registered: set[str] = set()
        for language, paths in paths_by_language.items():
            queries = get_queries(language)
            if queries is None:
                logger.debug(f"No queries for language {language!r}, skipping")
                continue
            for path in paths:
                rel = normalize_path(path)
                if rel in registered:
                    continue
                registered.add(rel)
                jobs.append((rel, queries))

        arenas: dict[str, _FileArena] = {}
        if not jobs:
            return arenas

        workers = min(self._hash_workers, len(jobs))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [(rel, queries, pool.submit((root / rel).read_bytes)) for rel, queries in jobs]
            for rel, queries, future in futures:
                try:
                    data = future.result()
                except OSError as e:
                    logger.debug(f"Cannot read {rel}: {e}")
                    errors.append(ScanError(file=rel, stage="read", error=str(e)))
                    continue
                arenas[rel] = _FileArena(
                    language=queries.language,
                    content_hash=hash_content(data),
                    size_bytes=len(data),
                    content=data.decode("utf-8", errors="replace") if queries.needs_content else None,
                )
        return arenas

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------

    def _run_chunk(
        self,
        root: Path,
        definition: QueryDefinition,
        dialect: str,
        chunk: list[str],
        errors: list[ScanError],
    ) -> list[dict[str, Any]]:
        timeout = self._single_file_timeout if len(chunk) == 1 else self._batch_timeout
        file = chunk[0] if len(chunk) == 1 else None
        try:
            return self._runner.run(definition.pattern, dialect, chunk, cwd=root, timeout=timeout)
        except SubprocessTimeout as e:
            logger.warning(
                f"Pattern {definition.pattern!r} timed out after {timeout}s on {len(chunk)} file(s)"
            )
            errors.append(ScanError(file=file, stage="timeout", error=str(e)))
        except SubprocessFailure as e:
            logger.warning(
                f"Pattern {definition.pattern!r} failed on {len(chunk)} file(s): exit {e.returncode}"
            )
            errors.append(ScanError(file=file, stage="subprocess", error=str(e)))
        return []

    @staticmethod
    def _match_path(root: Path, matched: Any) -> Optional[str]:
        if not matched or not isinstance(matched, str):
            return None
        if not os.path.isabs(matched):
            return normalize_path(matched)

        rel = os.path.relpath(matched, root)
        if rel.startswith(".."):
            # Tool may report resolved paths (symlinked temp dirs)
            rel = os.path.relpath(os.path.realpath(matched), root.resolve())
        return normalize_path(rel)

    def _route(
        self,
        root: Path,
        arenas: dict[str, _FileArena],
        category: Category,
        definition: QueryDefinition,
        match: dict[str, Any],
    ) -> None:
        arena = arenas.get(self._match_path(root, match.get("file")))
        if arena is None:
            return

        kind = definition.kind or category.default_kind
        line = get_line(match)

        if category is Category.IMPORTS:
            for source in extract_sources(match, definition):
                key = (source, kind)
                if key in arena.seen_imports:
                    continue
                arena.seen_imports.add(key)
                arena.imports.append(ImportEntry(source=source, kind=kind, line=line))
            return

        column = get_column(match)
        top_level = column is None or column == 0
        target = arena.symbols[category]
        for name in extract_names(match, definition):
            existing = target.get(name)
            if existing is None:
                target[name] = {
                    "name": name,
                    "line": line,
                    "kind": kind,
                    "extra": definition.extra,
                    "top_level": top_level,
                }
            elif top_level and not existing["top_level"]:
                # A module-level declaration outranks a nested one of the same name
                existing.update(line=line, kind=kind, extra=definition.extra, top_level=True)

    # ------------------------------------------------------------------
    # Finalization
    # ------------------------------------------------------------------

    def _freeze(self, arena: _FileArena) -> FileRecord:
        queries = get_queries(arena.language)
        export_map = arena.symbols[Category.EXPORTS]
        declared = [arena.symbols[category] for category in _DECLARED_CATEGORIES]

        export_names = apply_export_rule(queries.export_rule, export_map.keys(), declared, arena.content)
        ensure_export_entries(export_map, export_names, declared)

        frozen = {
            category.value: _sorted_entries(arena.symbols[category], export_names)
            for category in _SYMBOL_CATEGORIES
        }
        return FileRecord(
            content_hash=arena.content_hash,
            language=arena.language,
            size_bytes=arena.size_bytes,
            symbols=FileSymbols(**frozen),
            imports=list(arena.imports),
        )


def _sorted_entries(symbol_map: dict[str, dict[str, Any]], export_names) -> list[SymbolEntry]:
    items = sorted(symbol_map.values(), key=lambda item: (item["name"].lower(), item["name"]))
    return [
        SymbolEntry(
            name=item["name"],
            line=item["line"],
            kind=item["kind"],
            exported=item["name"] in export_names,
            extra=item.get("extra"),
        )
        for item in items
    ]
