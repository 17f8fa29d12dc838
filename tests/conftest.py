"""Shared fixtures: an in-process stand-in for the ast-grep binary."""

import os
import re
from pathlib import Path

import pytest

from repo_map.errors import ToolUnavailable
from repo_map.runner import AstGrepRunner

_QUOTED = r"""(['"][^'"]+['"])"""
_JS = ("javascript", "jsx", "typescript", "tsx")

# (pattern, dialects) -> (line regex, meta-variable names for groups 2..n)
# Group 1 is always the leading indentation, so the column can be reported.
PATTERNS = {
    ("export function $NAME($$$) { $$$ }", _JS): (r"^(\s*)export\s+function\s+(\w+)\s*\(", ("NAME",)),
    ("export class $NAME { $$$ }", _JS): (r"^(\s*)export\s+class\s+(\w+)", ("NAME",)),
    ("export const $NAME = $$$", _JS): (r"^(\s*)export\s+const\s+(\w+)\s*=", ("NAME",)),
    ("export { $$$ }", _JS): (r"^(\s*)export\s*\{[^}]*\}\s*;?\s*$", ()),
    ("export default function ($$$) { $$$ }", _JS): (r"^(\s*)export\s+default\s+function\s*\(", ()),
    ("module.exports = { $$$ }", _JS): (r"^(\s*)module\.exports\s*=\s*\{.*\}", ()),
    ("function $NAME($$$) { $$$ }", _JS): (
        r"^(\s*)(?:export\s+(?:default\s+)?)?function\s+(\w+)\s*\(", ("NAME",)
    ),
    ("const $NAME = ($$$) => $$$", _JS): (
        r"^(\s*)(?:export\s+)?const\s+(\w+)\s*=\s*\([^)]*\)\s*=>", ("NAME",)
    ),
    ("class $NAME { $$$ }", _JS): (r"^(\s*)(?:export\s+(?:default\s+)?)?class\s+(\w+)", ("NAME",)),
    ("interface $NAME { $$$ }", ("typescript", "tsx")): (
        r"^(\s*)(?:export\s+)?interface\s+(\w+)", ("NAME",)
    ),
    ("import { $$$ } from $SOURCE", _JS): (r"^(\s*)import\s*\{[^}]*\}\s*from\s*" + _QUOTED, ("SOURCE",)),
    ("import $NAME from $SOURCE", _JS): (r"^(\s*)import\s+(\w+)\s+from\s*" + _QUOTED, ("NAME", "SOURCE")),
    ("const $NAME = require($SOURCE)", _JS): (
        r"^(\s*)const\s+(\w+)\s*=\s*require\(\s*" + _QUOTED + r"\s*\)", ("NAME", "SOURCE")
    ),
    ("def $NAME($$$): $$$", ("python",)): (r"^(\s*)def\s+(\w+)\s*\(", ("NAME",)),
    ("async def $NAME($$$): $$$", ("python",)): (r"^(\s*)async\s+def\s+(\w+)\s*\(", ("NAME",)),
    ("class $NAME($$$): $$$", ("python",)): (r"^(\s*)class\s+(\w+)\s*\(", ("NAME",)),
    ("class $NAME: $$$", ("python",)): (r"^(\s*)class\s+(\w+)\s*:", ("NAME",)),
    ("import $SOURCE", ("python",)): (
        r"^(\s*)import\s+([\w.]+(?:\s+as\s+\w+)?(?:\s*,\s*[\w.]+(?:\s+as\s+\w+)?)*)\s*$", ("SOURCE",)
    ),
    ("from $SOURCE import $NAME", ("python",)): (r"^(\s*)from\s+([\w.]+)\s+import\s+(\w+)", ("SOURCE", "NAME")),
    ("func $NAME($$$) { $$$ }", ("go",)): (r"^(\s*)func\s+(\w+)\s*\(", ("NAME",)),
    ("func ($$$) $NAME($$$) { $$$ }", ("go",)): (r"^(\s*)func\s+\([^)]*\)\s+(\w+)\s*\(", ("NAME",)),
    ("type $NAME struct { $$$ }", ("go",)): (r"^(\s*)type\s+(\w+)\s+struct\b", ("NAME",)),
    ("const $NAME = $$$", ("go",)): (r"^(\s*)const\s+(\w+)\s*=", ("NAME",)),
    ("import $SOURCE", ("go",)): (r'^(\s*)import\s+("[^"]+")', ("SOURCE",)),
}


class FakeRunner(AstGrepRunner):
    """Emulates ``ast-grep run --json=stream`` with per-line regular expressions.

    Every invocation is recorded in ``calls``. ``failures`` maps a pattern to an
    exception raised instead of matching; ``absolute_paths`` reports match paths
    the way ast-grep does for absolute inputs.
    """

    def __init__(self, available: bool = True, absolute_paths: bool = False) -> None:
        super().__init__()
        self.available = available
        self.absolute_paths = absolute_paths
        self.calls: list[dict] = []
        self.failures: dict[str, Exception] = {}

    def resolve(self) -> str:
        if not self.available:
            raise ToolUnavailable(("ast-grep", "sg"))
        return "ast-grep"

    def calls_for(self, pattern: str) -> list[dict]:
        return [call for call in self.calls if call["pattern"] == pattern]

    def run(self, pattern, dialect, files, *, cwd, timeout):
        self.resolve()
        self.calls.append({
            "pattern": pattern,
            "dialect": dialect,
            "files": list(files),
            "timeout": timeout,
        })
        if pattern in self.failures:
            raise self.failures[pattern]

        spec = None
        for (known, dialects), value in PATTERNS.items():
            if known == pattern and dialect in dialects:
                spec = value
                break
        if spec is None:
            return []

        regex, names = re.compile(spec[0]), spec[1]
        matches = []
        for rel in files:
            path = Path(cwd) / rel
            reported = str(path) if self.absolute_paths else rel
            for lineno, line in enumerate(path.read_text().splitlines()):
                found = regex.match(line)
                if not found:
                    continue
                single = {
                    name: {"text": found.group(i + 2)}
                    for i, name in enumerate(names)
                }
                matches.append({
                    "file": reported,
                    "text": line.strip(),
                    "range": {"start": {"line": lineno, "column": len(found.group(1))}},
                    "metaVariables": {"single": single, "multi": {}},
                })
        return matches


@pytest.fixture
def fake_runner():
    return FakeRunner()


def write_files(root: Path, files: dict[str, str]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


@pytest.fixture
def make_files():
    return write_files


@pytest.fixture
def deny_directory(monkeypatch):
    """Make ``os.scandir`` fail with EACCES for directories with the given name."""
    real_scandir = os.scandir

    def deny(name: str) -> None:
        def scandir(path="."):
            if os.path.basename(os.fspath(path)) == name:
                raise PermissionError(13, "Permission denied", os.fspath(path))
            return real_scandir(path)

        monkeypatch.setattr(os, "scandir", scandir)

    return deny
