"""Tests for IndexQuery lookups and reverse-dependency resolution."""

import pytest

from repo_map.models import FileRecord, FileSymbols, ImportEntry, RepositoryIndex, SymbolEntry
from repo_map.query import IndexQuery
from repo_map.store import IndexStore


def _record(language, imports=(), functions=(), exports=()):
    return FileRecord(
        content_hash="0" * 16,
        language=language,
        size_bytes=1,
        symbols=FileSymbols(
            exports=[SymbolEntry(name=n, line=1, kind="function", exported=True) for n in exports],
            functions=[SymbolEntry(name=n, line=1, kind="function", exported=n in exports) for n in functions],
        ),
        imports=[ImportEntry(source=s, kind="import", line=i + 1) for i, s in enumerate(imports)],
    )


@pytest.fixture
def query():
    index = RepositoryIndex()
    index.set_file("src/util.ts", _record("typescript", functions=["format"], exports=["format"]))
    index.set_file("src/app.ts", _record("typescript", imports=["./util", "react"], functions=["main"]))
    index.set_file("src/views/page.tsx", _record("typescript", imports=["../util"]))
    index.set_file("src/widgets/index.js", _record("javascript", functions=["format"]))
    index.set_file("src/main.js", _record("javascript", imports=["./widgets"]))
    index.set_file("src/pkg/__init__.py", _record("python"))
    index.set_file("src/pkg/core.py", _record("python", imports=["."]))
    index.set_file("src/pkg/helpers.py", _record("python", imports=[".core"]))
    index.set_file("tools/cli.py", _record("python", imports=["pkg.helpers"]))
    return IndexQuery(index)


class TestLookups:
    def test_list_files(self, query):
        assert query.list_files("javascript") == ["src/main.js", "src/widgets/index.js"]
        assert len(query.list_files()) == 9

    def test_get_file(self, query):
        assert query.get_file("src/util.ts").language == "typescript"
        assert query.get_file("src\\util.ts") is not None
        assert query.get_file("missing.ts") is None

    def test_get_symbol(self, query):
        found = [(loc.path, loc.category) for loc in query.get_symbol("format")]
        assert found == [
            ("src/util.ts", "exports"),
            ("src/util.ts", "functions"),
            ("src/widgets/index.js", "functions"),
        ]

    def test_unknown_symbol(self, query):
        assert query.get_symbol("nothing") == []


class TestDependents:
    def test_relative_imports(self, query):
        assert query.get_dependents("src/util.ts") == ["src/app.ts", "src/views/page.tsx"]

    def test_directory_index(self, query):
        assert query.get_dependents("src/widgets/index.js") == ["src/main.js"]

    def test_python_relative(self, query):
        assert query.get_dependents("src/pkg/core.py") == ["src/pkg/helpers.py"]
        assert query.get_dependents("src/pkg/__init__.py") == ["src/pkg/core.py"]

    def test_python_absolute_under_source_root(self, query):
        assert query.get_dependents("src/pkg/helpers.py") == ["tools/cli.py"]

    def test_no_dependents(self, query):
        assert query.get_dependents("tools/cli.py") == []


class TestFromStore:
    def test_absent_cache(self, tmp_path):
        assert IndexQuery.from_store(IndexStore(), tmp_path) is None

    def test_loads_saved_index(self, tmp_path):
        store = IndexStore()
        index = RepositoryIndex()
        index.set_file("a.py", _record("python", functions=["f"]))
        store.save(tmp_path, index)
        assert IndexQuery.from_store(store, tmp_path).list_files() == ["a.py"]
