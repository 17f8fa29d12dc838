"""Data models for the repository symbol index."""

from datetime import UTC, datetime
from typing import Any, Iterator, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SCHEMA_VERSION = 1

ScanStage = Literal["read", "walk", "timeout", "subprocess"]


def utc_now_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase keys on disk."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SymbolEntry(CamelModel):
    name: str
    line: Optional[int] = None  # 1-based; null for undeclared exports
    kind: str
    exported: bool = False
    extra: Optional[dict[str, Any]] = None


class ImportEntry(CamelModel):
    source: str
    kind: str
    line: Optional[int] = None


class FileSymbols(CamelModel):
    exports: list[SymbolEntry] = Field(default_factory=list)
    functions: list[SymbolEntry] = Field(default_factory=list)
    classes: list[SymbolEntry] = Field(default_factory=list)
    types: list[SymbolEntry] = Field(default_factory=list)
    constants: list[SymbolEntry] = Field(default_factory=list)

    def declared(self) -> Iterator[tuple[str, SymbolEntry]]:
        """Yield (category, entry) for every declaration, exports excluded."""
        for category in ("functions", "classes", "types", "constants"):
            for entry in getattr(self, category):
                yield category, entry

    def count(self) -> int:
        return (
            len(self.functions) + len(self.classes)
            + len(self.types) + len(self.constants)
        )


class FileRecord(CamelModel):
    content_hash: str
    language: str
    size_bytes: int
    symbols: FileSymbols = Field(default_factory=FileSymbols)
    imports: list[ImportEntry] = Field(default_factory=list)

    def import_sources(self) -> list[str]:
        """Distinct import sources in first-seen order."""
        return list(dict.fromkeys(entry.source for entry in self.imports))


class GitRef(CamelModel):
    commit: Optional[str] = None
    branch: Optional[str] = None


class ScanError(CamelModel):
    file: Optional[str] = None
    stage: ScanStage
    error: str


class IndexStats(CamelModel):
    total_files: int = 0
    total_symbols: int = 0
    scan_duration_ms: int = 0
    errors: list[ScanError] = Field(default_factory=list)


class RepositoryIndex(CamelModel):
    schema_version: int = SCHEMA_VERSION
    generated: str = Field(default_factory=utc_now_iso)
    updated: Optional[str] = None
    git_ref: GitRef = Field(default_factory=GitRef)
    detected_languages: list[str] = Field(default_factory=list)
    files: dict[str, FileRecord] = Field(default_factory=dict)
    dependencies: dict[str, list[str]] = Field(default_factory=dict)
    stats: IndexStats = Field(default_factory=IndexStats)

    def set_file(self, path: str, record: FileRecord) -> None:
        """Replace the record for ``path`` and its dependency edge."""
        self.files[path] = record
        sources = record.import_sources()
        if sources:
            self.dependencies[path] = sources
        else:
            self.dependencies.pop(path, None)

    def remove_file(self, path: str) -> bool:
        removed = self.files.pop(path, None) is not None
        self.dependencies.pop(path, None)
        return removed

    def sort_entries(self) -> None:
        self.files = dict(sorted(self.files.items()))
        self.dependencies = dict(sorted(self.dependencies.items()))

    def recalculate_stats(self) -> None:
        self.stats.total_files = len(self.files)
        self.stats.total_symbols = sum(rec.symbols.count() for rec in self.files.values())

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


class FileChanges(BaseModel):
    """Paths touched between two commits, as reported by a name-status diff."""

    added: list[str] = Field(default_factory=list)
    modified: list[str] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)
    renamed: list[tuple[str, str]] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.added or self.modified or self.deleted or self.renamed)


class ChangeSummary(CamelModel):
    total: int = 0
    updated: int = 0
    added: int = 0
    deleted: int = 0
    renamed: int = 0


class UpdateResult(CamelModel):
    index: RepositoryIndex
    changes: ChangeSummary = Field(default_factory=ChangeSummary)
    needs_full_rebuild: bool = False
    errors: list[ScanError] = Field(default_factory=list)


class Staleness(CamelModel):
    is_stale: bool = False
    reason: Optional[str] = None
    commits_behind: int = 0
    suggest_full_rebuild: bool = False


class IndexStatus(CamelModel):
    exists: bool
    generated: Optional[str] = None
    updated: Optional[str] = None
    commit: Optional[str] = None
    branch: Optional[str] = None
    files: int = 0
    symbols: int = 0
    languages: list[str] = Field(default_factory=list)
    staleness: Optional[Staleness] = None
