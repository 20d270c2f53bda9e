"""Test fixtures and utilities."""

import subprocess
from pathlib import Path
from typing import Generator

import click.testing
import pytest

from gitbridge.gate import GitEnvironment, initialize, reset_git_environment


def git(repo: Path, *args: str) -> str:
    """Run git in repo and return stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=repo,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


@pytest.fixture(autouse=True)
def isolated_git_config(tmp_path: Path, monkeypatch) -> Path:
    """Point global git config at a throwaway file so tests never touch ~/.gitconfig."""
    home = tmp_path / "home"
    home.mkdir()
    global_config = home / ".gitconfig"
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(global_config))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    # Keep repository-local config of the caller's cwd out of reads
    monkeypatch.chdir(home)
    for var in (
        "GIT_AUTHOR_NAME",
        "GIT_AUTHOR_EMAIL",
        "GIT_AUTHOR_DATE",
        "GIT_COMMITTER_NAME",
        "GIT_COMMITTER_EMAIL",
        "GIT_COMMITTER_DATE",
        "GIT_DIR",
    ):
        monkeypatch.delenv(var, raising=False)
    for var in (
        "GITBRIDGE_CONFIG",
        "GITBRIDGE_GIT_EXECUTABLE",
        "GITBRIDGE_MIN_GIT_VERSION",
        "GITBRIDGE_DEFAULT_NAME",
        "GITBRIDGE_DEFAULT_EMAIL",
        "GITBRIDGE_FSCK_TIMEOUT",
        "GITBRIDGE_DEBUG",
    ):
        monkeypatch.delenv(var, raising=False)
    return global_config


@pytest.fixture(autouse=True)
def fresh_git_environment() -> Generator[None, None, None]:
    """Drop cached git discovery results between tests."""
    reset_git_environment()
    yield
    reset_git_environment()


@pytest.fixture
def git_env() -> GitEnvironment:
    """Initialized git environment (writes only to the isolated global config)."""
    return initialize()


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Create a temporary Git repository with one commit on main."""
    repo_dir = tmp_path / "repo"
    repo_dir.mkdir()

    git(repo_dir, "init")
    git(repo_dir, "config", "user.email", "test@example.com")
    git(repo_dir, "config", "user.name", "Test User")
    git(repo_dir, "config", "commit.gpgsign", "false")
    git(repo_dir, "symbolic-ref", "HEAD", "refs/heads/main")

    (repo_dir / "README.md").write_text("# Test\n")
    (repo_dir / "src").mkdir()
    (repo_dir / "src" / "app.py").write_text("print('hi')\n")
    git(repo_dir, "add", ".")
    git(repo_dir, "commit", "-m", "Initial")

    return repo_dir


@pytest.fixture
def run_git():
    """Helper running git in a repository, returning stripped stdout."""
    return git


@pytest.fixture
def runner() -> click.testing.CliRunner:
    """Click CliRunner for testing CLI commands."""
    return click.testing.CliRunner()
