"""End-to-end incremental updates against a real git repository.

The ast-grep binary is replaced by the in-process FakeRunner; git is real.
"""

import shutil
import subprocess

import pytest

from repo_map.indexer import RepoMapIndexer

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def _git(root, *args):
    result = subprocess.run(
        ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com", *args],
        cwd=root,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def _commit(root, message):
    _git(root, "add", "-A")
    _git(root, "commit", "-q", "-m", message)
    return _git(root, "rev-parse", "HEAD")


@pytest.fixture
def repo(tmp_path, make_files):
    _git(tmp_path, "init", "-q")
    _git(tmp_path, "symbolic-ref", "HEAD", "refs/heads/main")
    make_files(tmp_path, {
        ".gitignore": ".claude/\n",
        "package.json": "{}\n",
        "src/a.js": "export function alpha() {}\n",
        "src/b.js": "import { alpha } from './a';\nexport function beta() {}\n",
        "src/c.js": "function gamma() {}\n",
    })
    _commit(tmp_path, "initial")
    return tmp_path


@pytest.fixture
def indexer(fake_runner):
    return RepoMapIndexer(runner=fake_runner)


class TestGitUpdateFlow:
    def test_build_records_head(self, repo, indexer):
        index = indexer.build(repo)
        assert index.git_ref.commit == _git(repo, "rev-parse", "HEAD")
        assert index.git_ref.branch == "main"
        assert sorted(index.files) == ["src/a.js", "src/b.js", "src/c.js"]

    def test_modify_add_delete(self, repo, indexer, fake_runner):
        indexer.build(repo)
        (repo / "src/a.js").write_text("export function alpha() {}\nexport function omega() {}\n")
        (repo / "src/b.js").unlink()
        (repo / "src/d.js").write_text("export function delta() {}\n")
        head = _commit(repo, "change things")
        fake_runner.calls.clear()

        result = indexer.update(repo)

        assert result.needs_full_rebuild is False
        assert sorted(result.index.files) == ["src/a.js", "src/c.js", "src/d.js"]
        assert [e.name for e in result.index.files["src/a.js"].symbols.exports] == ["alpha", "omega"]
        assert "src/b.js" not in result.index.dependencies
        assert result.index.git_ref.commit == head
        assert {f for call in fake_runner.calls for f in call["files"]} == {"src/a.js", "src/d.js"}
        assert indexer.load(repo).git_ref.commit == head

    def test_rename(self, repo, indexer):
        indexer.build(repo)
        _git(repo, "mv", "src/c.js", "src/renamed.js")
        _commit(repo, "rename")

        result = indexer.update(repo)

        assert "src/c.js" not in result.index.files
        assert [e.name for e in result.index.files["src/renamed.js"].symbols.functions] == ["gamma"]
        assert result.changes.renamed == 1

    def test_non_ascii_paths(self, repo, indexer, make_files):
        make_files(repo, {
            "src/café.js": "export function gone() {}\n",
            "src/naïve.js": "export function before() {}\n",
        })
        _commit(repo, "accented names")
        indexer.build(repo)
        (repo / "src/café.js").unlink()
        (repo / "src/naïve.js").write_text("export function after() {}\n")
        _commit(repo, "edit accented names")

        result = indexer.update(repo)

        assert "src/café.js" not in result.index.files
        assert [e.name for e in result.index.files["src/naïve.js"].symbols.exports] == ["after"]
        assert result.changes.deleted == 1
        assert result.changes.updated == 1

    def test_incremental_matches_full_build(self, repo, indexer):
        indexer.build(repo)
        (repo / "src/c.js").write_text("function gamma() {}\nexport function zeta() {}\n")
        (repo / "src/a.js").unlink()
        _commit(repo, "edit")

        incremental = indexer.update(repo).index
        full = indexer.build(repo)

        assert incremental.files == full.files
        assert incremental.dependencies == full.dependencies

    def test_rewritten_base_triggers_full_rebuild(self, repo, indexer):
        index = indexer.build(repo)
        index.git_ref.commit = "0" * 40
        indexer.store.save(repo, index)

        result = indexer.update(repo)

        assert result.needs_full_rebuild is False
        assert result.index.git_ref.commit == _git(repo, "rev-parse", "HEAD")
        assert indexer.load(repo).git_ref.commit == result.index.git_ref.commit


class TestStatusAgainstGit:
    def test_fresh_then_behind(self, repo, indexer):
        indexer.build(repo)
        assert indexer.status(repo).staleness.is_stale is False

        (repo / "src/e.js").write_text("function e() {}\n")
        _commit(repo, "one more")

        staleness = indexer.status(repo).staleness
        assert staleness.is_stale is True
        assert staleness.commits_behind == 1
        assert staleness.suggest_full_rebuild is False

    def test_branch_switch(self, repo, indexer):
        indexer.build(repo)
        _git(repo, "checkout", "-q", "-b", "feature")
        staleness = indexer.status(repo).staleness
        assert staleness.is_stale is True
        assert staleness.suggest_full_rebuild is True
