"""Shared types for the per-language structural query tables."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ExtractionMode(str, Enum):
    SINGLE_NAME = "single-name"
    EXPORT_LIST = "export-list"
    OBJECT_LITERAL = "object-literal"


class Category(str, Enum):
    EXPORTS = "exports"
    FUNCTIONS = "functions"
    CLASSES = "classes"
    TYPES = "types"
    CONSTANTS = "constants"
    IMPORTS = "imports"

    @property
    def default_kind(self) -> str:
        return _DEFAULT_KINDS[self]


_DEFAULT_KINDS = {
    Category.EXPORTS: "export",
    Category.FUNCTIONS: "function",
    Category.CLASSES: "class",
    Category.TYPES: "type",
    Category.CONSTANTS: "constant",
    Category.IMPORTS: "import",
}

# Scan order; exports first so explicit export lines win
CATEGORY_ORDER = (
    Category.EXPORTS,
    Category.FUNCTIONS,
    Category.CLASSES,
    Category.TYPES,
    Category.CONSTANTS,
    Category.IMPORTS,
)


class ExportRule(str, Enum):
    EXPLICIT_ONLY = "explicit-only"
    DUNDER_LIST = "dunder-list"
    CAPITALIZATION = "capitalization"


@dataclass(frozen=True)
class QueryDefinition:
    pattern: str
    kind: Optional[str] = None  # category default when None
    mode: ExtractionMode = ExtractionMode.SINGLE_NAME
    name_var: Optional[str] = None
    source_var: Optional[str] = None
    multi_source: bool = False
    fallback_name: Optional[str] = None
    extra: Optional[dict[str, Any]] = None


def q(pattern: str, kind: Optional[str] = None, **options) -> QueryDefinition:
    """Shorthand used by the language tables; name_var defaults to NAME."""
    options.setdefault("name_var", "NAME")
    return QueryDefinition(pattern=pattern, kind=kind, **options)


def imp(pattern: str, kind: str, **options) -> QueryDefinition:
    options.setdefault("source_var", "SOURCE")
    return QueryDefinition(pattern=pattern, kind=kind, **options)


@dataclass(frozen=True)
class LanguageQueries:
    language: str
    export_rule: ExportRule
    exports: tuple[QueryDefinition, ...] = ()
    functions: tuple[QueryDefinition, ...] = ()
    classes: tuple[QueryDefinition, ...] = ()
    types: tuple[QueryDefinition, ...] = ()
    constants: tuple[QueryDefinition, ...] = ()
    imports: tuple[QueryDefinition, ...] = ()
    # Source text is kept during a scan only when the export rule reads it
    needs_content: bool = field(default=False)

    def for_category(self, category: Category) -> tuple[QueryDefinition, ...]:
        return getattr(self, category.value)

    def groups(self):
        """Yield (category, definition) pairs in scan order."""
        for category in CATEGORY_ORDER:
            for definition in self.for_category(category):
                yield category, definition
