"""Per-language public-surface inference."""

import re
from typing import Iterable, Mapping, MutableMapping, Optional

from repo_map.queries.base import ExportRule

RE_DUNDER_ALL = re.compile(r"__all__\s*=\s*[\[(]([\s\S]*?)[\])]")
RE_QUOTED_NAME = re.compile(r"['\"]([^'\"]+)['\"]")


def extract_dunder_all(content: Optional[str]) -> list[str]:
    """Quoted names listed in the first ``__all__ = [...]`` or ``(...)``."""
    if not content:
        return []
    found = RE_DUNDER_ALL.search(content)
    if not found:
        return []
    return [name for name in RE_QUOTED_NAME.findall(found.group(1)) if name]


def is_capitalized_name(name: str) -> bool:
    """Go export check: first character is an uppercase letter."""
    if not name:
        return False
    first = name[0]
    return first.upper() == first and first.lower() != first


def apply_export_rule(
    rule: ExportRule,
    explicit: Iterable[str],
    declared: list[Mapping[str, dict]],
    content: Optional[str] = None,
) -> dict[str, None]:
    """
    Compute the export name set for one file.

    Args:
        rule: The language's export rule
        explicit: Names matched by explicit export patterns
        declared: Symbol maps in the order functions, classes, types, constants;
            values carry a ``top_level`` flag
        content: Source text (only read by DUNDER_LIST)

    Returns:
        Ordered set (dict keys) of exported names
    """
    names = dict.fromkeys(explicit)

    if rule is ExportRule.DUNDER_LIST:
        listed = extract_dunder_all(content)
        if listed:
            names.update(dict.fromkeys(listed))
        else:
            for symbol_map in declared:
                for name, pending in symbol_map.items():
                    if pending.get("top_level", True) and not name.startswith("_"):
                        names[name] = None
    elif rule is ExportRule.CAPITALIZATION:
        for symbol_map in declared:
            for name in symbol_map:
                if is_capitalized_name(name):
                    names[name] = None
    elif rule is ExportRule.EXPLICIT_ONLY:
        pass
    else:
        raise ValueError(f"Unknown export rule: {rule!r}")

    return names


def ensure_export_entries(
    export_map: MutableMapping[str, dict],
    export_names: Iterable[str],
    declared: list[Mapping[str, dict]],
) -> None:
    """Synthesize an export entry for every exported name that has none."""
    for name in export_names:
        if name in export_map:
            continue

        entry = None
        for symbol_map in declared:
            if name in symbol_map:
                item = symbol_map[name]
                entry = {"name": name, "line": item["line"], "kind": item["kind"]}
                break

        if entry is None:
            entry = {"name": name, "line": None, "kind": "export"}

        export_map[name] = entry
