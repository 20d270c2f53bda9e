"""Test gitbridge CLI commands."""

import json

from gitbridge import __version__
from gitbridge.cli import gitbridge
from gitbridge.errors import EXIT_ERROR, EXIT_NOT_READY


def test_version(runner):
    result = runner.invoke(gitbridge, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_check_text(runner):
    result = runner.invoke(gitbridge, ["check"])
    assert result.exit_code == 0
    assert result.output.startswith("git ")


def test_check_json(runner):
    result = runner.invoke(gitbridge, ["check", "--json"])
    assert result.exit_code == 0

    data = json.loads(result.output)
    assert data["command"] == "check"
    assert data["version"]
    assert data["executable"]


def test_check_missing_git(runner, monkeypatch):
    monkeypatch.setenv("GITBRIDGE_GIT_EXECUTABLE", "definitely-not-git-xyz")
    result = runner.invoke(gitbridge, ["check"])
    assert result.exit_code == EXIT_NOT_READY
    assert "Git not found" in result.output


def test_check_version_too_old(runner, monkeypatch):
    monkeypatch.setenv("GITBRIDGE_MIN_GIT_VERSION", "999.0")
    result = runner.invoke(gitbridge, ["check"])
    assert result.exit_code == EXIT_NOT_READY
    assert "not supported" in result.output


def test_tree_json(runner, git_repo, run_git):
    result = runner.invoke(gitbridge, ["tree", str(git_repo), "main", "--json"])
    assert result.exit_code == 0

    data = json.loads(result.output)
    assert data["command"] == "tree"
    assert data["id"] == run_git(git_repo, "rev-parse", "main^{tree}")
    assert data["resolved_id"] == run_git(git_repo, "rev-parse", "main")
    assert sorted(e["name"] for e in data["entries"]) == ["README.md", "src"]


def test_tree_text(runner, git_repo, run_git):
    result = runner.invoke(gitbridge, ["tree", str(git_repo), "HEAD"])
    assert result.exit_code == 0
    assert f"tree {run_git(git_repo, 'rev-parse', 'HEAD^{tree}')}" in result.output
    assert "README.md" in result.output


def test_tree_unknown_ref(runner, git_repo):
    result = runner.invoke(gitbridge, ["tree", str(git_repo), "no-such-branch"])
    assert result.exit_code == EXIT_ERROR
    assert "Error:" in result.output


def test_tree_not_a_repo(runner, tmp_path):
    plain = tmp_path / "plain"
    plain.mkdir()
    result = runner.invoke(gitbridge, ["tree", str(plain), "HEAD"])
    assert result.exit_code == EXIT_ERROR
    assert "Not a Git repository" in result.output


def test_commit_tree(runner, git_repo, run_git):
    head = run_git(git_repo, "rev-parse", "HEAD")
    result = runner.invoke(
        gitbridge,
        [
            "commit-tree",
            str(git_repo),
            "HEAD",
            "-m",
            "from cli",
            "-p",
            head,
            "--name",
            "Cli User",
            "--email",
            "cli@example.com",
            "--no-gpg-sign",
        ],
    )
    assert result.exit_code == 0

    commit_id = result.output.strip()
    raw = run_git(git_repo, "cat-file", "commit", commit_id)
    assert f"parent {head}" in raw
    assert "author Cli User <cli@example.com>" in raw
    assert raw.endswith("from cli")


def test_commit_tree_uses_git_identity(runner, git_repo, run_git):
    """Without --name/--email the repository's configured identity is used."""
    result = runner.invoke(gitbridge, ["commit-tree", str(git_repo), "HEAD", "-m", "x"])
    assert result.exit_code == 0
    raw = run_git(git_repo, "cat-file", "commit", result.output.strip())
    assert "author Test User <test@example.com>" in raw
    assert "committer Test User <test@example.com>" in raw


def test_commit_tree_global_identity(runner, git_repo, run_git):
    run_git(git_repo, "config", "--global", "user.name", "Global User")
    run_git(git_repo, "config", "--unset", "user.name")
    result = runner.invoke(gitbridge, ["commit-tree", str(git_repo), "HEAD", "-m", "x"])
    assert result.exit_code == 0
    raw = run_git(git_repo, "cat-file", "commit", result.output.strip())
    assert "author Global User <test@example.com>" in raw


def test_commit_tree_default_identity(runner, git_repo, run_git):
    """With no identity anywhere, the defaults written at startup apply."""
    run_git(git_repo, "config", "--unset", "user.name")
    run_git(git_repo, "config", "--unset", "user.email")
    result = runner.invoke(gitbridge, ["commit-tree", str(git_repo), "HEAD", "-m", "x"])
    assert result.exit_code == 0
    raw = run_git(git_repo, "cat-file", "commit", result.output.strip())
    assert "author Gitbridge <gitbridge@fake.local>" in raw


def test_fsck_ok(runner, git_repo):
    result = runner.invoke(gitbridge, ["fsck", str(git_repo), "--timeout", "60", "--no-dangling"])
    assert result.exit_code == 0
    assert "ok" in result.output
