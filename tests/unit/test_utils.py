"""Tests for atomic writes, JSONL parsing and subprocess helpers."""

import sys
from unittest.mock import patch

import pytest

from repo_map.models import GitRef
from repo_map.utils.atomic_io import atomic_write_model, atomic_write_text
from repo_map.utils.stream_parser import parse_jsonl_to_dicts
from repo_map.utils.subprocess_utils import SubprocessError, find_command, format_command, run_command


class TestAtomicWrite:
    def test_writes_content(self, tmp_path):
        path = tmp_path / "out.txt"
        atomic_write_text(path, "hello")
        assert path.read_text() == "hello"
        assert list(tmp_path.iterdir()) == [path]

    def test_model_uses_camel_case(self, tmp_path):
        path = tmp_path / "ref.json"
        atomic_write_model(path, GitRef(commit="abc1234", branch="main"))
        assert '"commit": "abc1234"' in path.read_text()

    def test_temp_file_removed_on_failure(self, tmp_path):
        path = tmp_path / "out.txt"
        with patch("repo_map.utils.atomic_io.os.replace", side_effect=OSError("nope")):
            with pytest.raises(OSError):
                atomic_write_text(path, "data", max_retries=2)
        assert list(tmp_path.iterdir()) == []


class TestParseJsonl:
    def test_drops_malformed_and_non_objects(self):
        content = '{"a": 1}\n\nnot json\n[1]\n{"b": 2}\n'
        assert parse_jsonl_to_dicts(content) == [{"a": 1}, {"b": 2}]

    def test_empty(self):
        assert parse_jsonl_to_dicts("") == []


class TestSubprocessHelpers:
    def test_format_command_truncates(self):
        text = format_command(["ast-grep"] + ["file.js"] * 100, max_len=50)
        assert len(text) == 50
        assert text.endswith("...")

    def test_find_command_first_match(self):
        with patch("repo_map.utils.subprocess_utils.shutil.which", side_effect=lambda c: c == "b"):
            assert find_command(["a", "b", "c"]) == "b"

    def test_run_command_check(self, tmp_path):
        with pytest.raises(SubprocessError) as exc_info:
            run_command([sys.executable, "-c", "import sys; sys.exit(3)"], cwd=tmp_path)
        assert exc_info.value.returncode == 3

    def test_run_command_no_check(self, tmp_path):
        result = run_command([sys.executable, "-c", "print('ok')"], cwd=tmp_path, check=False)
        assert result.returncode == 0
        assert result.stdout.strip() == "ok"
