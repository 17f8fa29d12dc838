"""Name and import-source extraction from ast-grep match records."""

import re
from typing import Any, Optional

from repo_map.queries.base import ExtractionMode, QueryDefinition

# Meta-variable names tried after the definition's own placeholder
FALLBACK_NAME_VARS = ("NAME", "FUNC", "CLASS", "IDENT", "N")

RE_DECLARATION = re.compile(
    r"(?:function|class|const|let|var|def|fn|pub\s+fn|type|struct|enum|trait|interface|record)"
    r"\s+([a-zA-Z_][a-zA-Z0-9_]*)"
)
RE_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")
RE_BRACES = re.compile(r"\{([^}]+)\}")
RE_QUOTED = re.compile(r"['\"]([^'\"]+)['\"]")
RE_AS = re.compile(r"\s+as\s+", re.IGNORECASE)
RE_NON_IDENT = re.compile(r"[^A-Za-z0-9_$]")


def is_valid_identifier(name: Optional[str]) -> bool:
    return bool(name) and RE_IDENTIFIER.match(name) is not None


def get_line(match: dict[str, Any]) -> Optional[int]:
    """1-based start line, or None when the record has no range."""
    line = ((match.get("range") or {}).get("start") or {}).get("line")
    return line + 1 if isinstance(line, int) else None


def get_column(match: dict[str, Any]) -> Optional[int]:
    column = ((match.get("range") or {}).get("start") or {}).get("column")
    return column if isinstance(column, int) else None


def get_meta_variable(match: dict[str, Any], key: str) -> Optional[dict[str, Any]]:
    """Look a placeholder up directly under metaVariables, then under ``single``."""
    meta = match.get("metaVariables")
    if not isinstance(meta, dict):
        return None
    direct = meta.get(key)
    if isinstance(direct, dict):
        return direct
    single = meta.get("single")
    if isinstance(single, dict) and isinstance(single.get(key), dict):
        return single[key]
    return None


def extract_name(match: dict[str, Any], name_var: Optional[str] = None) -> Optional[str]:
    keys = ([name_var] if name_var else []) + list(FALLBACK_NAME_VARS)
    for key in keys:
        variable = get_meta_variable(match, key)
        if variable and variable.get("text"):
            return variable["text"]

    text = match.get("text") or ""
    found = RE_DECLARATION.search(text)
    if found:
        return found.group(1)
    return None


def extract_export_list(text: str) -> list[str]:
    """Names from ``export { a, b as c }``; aliases win over originals."""
    found = RE_BRACES.search(text or "")
    if not found:
        return []

    names: dict[str, None] = {}
    for part in found.group(1).split(","):
        part = part.strip()
        if not part:
            continue
        pieces = [piece.strip() for piece in RE_AS.split(part)]
        name = RE_NON_IDENT.sub("", pieces[1] if len(pieces) > 1 else pieces[0])
        if is_valid_identifier(name):
            names[name] = None
    return list(names)


def _top_level_members(text: str) -> list[str]:
    """Comma-separated members of the first braces block, nested brackets kept whole."""
    start = text.find("{")
    if start < 0:
        return []

    members, current, depth = [], [], 0
    for ch in text[start + 1:]:
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            if depth == 0:
                break
            depth -= 1
        elif ch == "," and depth == 0:
            members.append("".join(current))
            current = []
            continue
        current.append(ch)
    members.append("".join(current))
    return [member.strip() for member in members if member.strip()]


def extract_object_literal(text: str) -> list[str]:
    """Shorthand and keyed property names from ``module.exports = { ... }``."""
    names: dict[str, None] = {}
    for member in _top_level_members(text or ""):
        if member.startswith("..."):
            continue
        # "key: value", "shorthand", or "method() { ... }"
        key = _strip_quotes(member.split(":", 1)[0].split("(", 1)[0].strip())
        if is_valid_identifier(key):
            names[key] = None
    return list(names)


def extract_names(match: dict[str, Any], definition: QueryDefinition) -> list[str]:
    """Apply the definition's extraction mode to one match."""
    if definition.mode is ExtractionMode.EXPORT_LIST:
        return extract_export_list(match.get("text") or "")
    if definition.mode is ExtractionMode.OBJECT_LITERAL:
        return extract_object_literal(match.get("text") or "")

    name = extract_name(match, definition.name_var)
    if name:
        return [name]
    if definition.fallback_name:
        return [definition.fallback_name]
    return []


def split_multi_source(raw: str) -> list[str]:
    """``os, sys as system`` -> ``["os", "sys"]``."""
    sources = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        name = RE_AS.split(part)[0].strip().strip("'\"")
        if name:
            sources.append(name)
    return sources


def extract_sources(match: dict[str, Any], definition: QueryDefinition) -> list[str]:
    """Import sources for one match (several for multi-source imports)."""
    variable = get_meta_variable(match, definition.source_var or "SOURCE")
    if variable and variable.get("text"):
        raw = _strip_quotes(variable["text"])
        if definition.multi_source:
            return split_multi_source(raw)
        return [raw] if raw else []

    found = RE_QUOTED.search(match.get("text") or "")
    if found:
        return [found.group(1)]
    return []


def _strip_quotes(text: str) -> str:
    if text[:1] in ("'", '"'):
        text = text[1:]
    if text[-1:] in ("'", '"'):
        text = text[:-1]
    return text
