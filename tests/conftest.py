"""Pytest configuration and shared fixtures."""

import shutil
import subprocess
from pathlib import Path

import pytest

from bash_prompt_vars import config
from bash_prompt_vars.host import HostInfo


def run_git(repo_path: Path, *args: str) -> str:
    """Run a git command in ``repo_path`` and return its stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=str(repo_path),
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


@pytest.fixture(autouse=True)
def no_config_file(monkeypatch, tmp_path):
    """Keep the user's real config file and environment out of every test."""
    monkeypatch.setattr(config, "CONFIG_PATHS", [tmp_path / "missing.yml"])
    monkeypatch.delenv("BASH_PROMPT_SKIP_VCS_CHECK", raising=False)
    monkeypatch.delenv("BASH_PROMPT_LOG_LEVEL", raising=False)
    monkeypatch.delenv("BASH_PROMPT_HG_EXECUTABLE", raising=False)


@pytest.fixture
def git_repo(tmp_path):
    """Create a git repository named ``demo`` with one commit on ``main``.

    Yields:
        Path to the repository working tree
    """
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    repo_path = tmp_path / "demo"
    repo_path.mkdir()

    run_git(repo_path, "init")
    run_git(repo_path, "config", "user.email", "test@example.com")
    run_git(repo_path, "config", "user.name", "Test User")
    run_git(repo_path, "config", "commit.gpgsign", "false")
    run_git(repo_path, "symbolic-ref", "HEAD", "refs/heads/main")

    for name in ("a.txt", "b.txt", "c.txt"):
        (repo_path / name).write_text(f"{name}\n")
    run_git(repo_path, "add", ".")
    run_git(repo_path, "commit", "-m", "Initial commit")

    yield repo_path


@pytest.fixture
def host_info():
    return HostInfo(
        load=(0.5, 1.25, 2.0),
        os_name="Linux",
        os_version="6.1.0",
        terminal="pts/3",
        users=2,
    )
