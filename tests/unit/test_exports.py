"""Tests for per-language export inference."""

from repo_map.exports import (
    apply_export_rule,
    ensure_export_entries,
    extract_dunder_all,
    is_capitalized_name,
)
from repo_map.queries.base import ExportRule


def _pending(name, line=1, kind="function", top_level=True):
    return {name: {"name": name, "line": line, "kind": kind, "top_level": top_level}}


class TestDunderAll:
    def test_list(self):
        assert extract_dunder_all('__all__ = ["a", \'b\']\n') == ["a", "b"]

    def test_tuple_multiline(self):
        assert extract_dunder_all('__all__ = (\n    "x",\n    "y",\n)\n') == ["x", "y"]

    def test_absent(self):
        assert extract_dunder_all("def f():\n    pass\n") == []
        assert extract_dunder_all(None) == []


class TestApplyExportRule:
    def test_explicit_only_keeps_explicit_matches(self):
        declared = [_pending("helper"), {}, {}, {}]
        names = apply_export_rule(ExportRule.EXPLICIT_ONLY, ["api"], declared)
        assert list(names) == ["api"]

    def test_dunder_list_overrides_naming(self):
        declared = [{**_pending("visible"), **_pending("listed")}, {}, {}, {}]
        names = apply_export_rule(ExportRule.DUNDER_LIST, [], declared, '__all__ = ["listed"]')
        assert list(names) == ["listed"]

    def test_underscore_convention_top_level_only(self):
        functions = {
            **_pending("public"),
            **_pending("_private"),
            **_pending("method", top_level=False),
        }
        classes = _pending("Widget", kind="class")
        names = apply_export_rule(ExportRule.DUNDER_LIST, [], [functions, classes, {}, {}], "")
        assert list(names) == ["public", "Widget"]

    def test_capitalization(self):
        functions = {**_pending("Exported"), **_pending("internal"), **_pending("_x")}
        types = _pending("Server", kind="type")
        names = apply_export_rule(ExportRule.CAPITALIZATION, [], [functions, {}, types, {}])
        assert list(names) == ["Exported", "Server"]

    def test_inferred_names_follow_explicit_without_duplicates(self):
        functions = {**_pending("Run"), **_pending("Stop")}
        names = apply_export_rule(ExportRule.CAPITALIZATION, ["Stop", "Extra"], [functions, {}, {}, {}])
        assert list(names) == ["Stop", "Extra", "Run"]


class TestCapitalizedName:
    def test_cases(self):
        assert is_capitalized_name("Foo") is True
        assert is_capitalized_name("foo") is False
        assert is_capitalized_name("_Foo") is False
        assert is_capitalized_name("1abc") is False
        assert is_capitalized_name("Ñame") is True
        assert is_capitalized_name("") is False


class TestEnsureExportEntries:
    def test_copies_first_declaring_category(self):
        functions = _pending("thing", line=3, kind="function")
        types = _pending("thing", line=9, kind="type")
        exports = {}
        ensure_export_entries(exports, ["thing"], [functions, {}, types, {}])
        assert exports["thing"] == {"name": "thing", "line": 3, "kind": "function"}

    def test_undeclared_name(self):
        exports = {}
        ensure_export_entries(exports, ["ghost"], [{}, {}, {}, {}])
        assert exports["ghost"] == {"name": "ghost", "line": None, "kind": "export"}

    def test_explicit_entry_untouched(self):
        exports = {"api": {"name": "api", "line": 1, "kind": "re-export"}}
        ensure_export_entries(exports, ["api"], [_pending("api", line=5), {}, {}, {}])
        assert exports["api"]["kind"] == "re-export"
