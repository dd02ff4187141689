"""Tests for the command line interface."""

import os
import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from bash_prompt_vars.cli import app, format_assignments
from bash_prompt_vars.exceptions import HostInfoError

SRC_DIR = Path(__file__).resolve().parent.parent / "src"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def fixed_host(host_info):
    with patch("bash_prompt_vars.cli.collect_host_info", return_value=host_info) as collect:
        yield collect


def _values(output: str) -> dict[str, str]:
    values = {}
    for line in output.splitlines():
        key, _, value = line.partition("=")
        values[key] = value
    return values


def test_format_assignments(host_info):
    lines = format_assignments(host_info, "git demo main abc1234 2m 1a 0d 3u")

    assert lines == [
        'load="0.50 1.25 2.00"',
        'myos="Linux"',
        'myversion="6.1.0"',
        'tty="pts/3"',
        'users="2"',
        'vcs="git demo main abc1234 2m 1a 0d 3u"',
    ]


def test_cli_help(runner):
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "Usage:" in result.output


def test_six_lines_without_repository(runner, fixed_host, tmp_path):
    result = runner.invoke(app, ["--cwd", str(tmp_path)])

    assert result.exit_code == 0
    assert list(_values(result.stdout)) == ["load", "myos", "myversion", "tty", "users", "vcs"]
    assert _values(result.stdout)["vcs"] == '""'


def test_repository_summary(runner, fixed_host, git_repo):
    (git_repo / "a.txt").write_text("changed\n")
    (git_repo / "untracked.txt").write_text("new\n")

    result = runner.invoke(app, ["--cwd", str(git_repo)])

    assert result.exit_code == 0
    vcs = _values(result.stdout)["vcs"]
    assert vcs.startswith('"git demo main ')
    assert vcs.endswith(' 1m 0a 0d 1u"')


def test_skip_env_var_empties_vcs(runner, fixed_host, git_repo):
    with patch("bash_prompt_vars.cli.vcs_status") as vcs_status:
        result = runner.invoke(
            app, ["--cwd", str(git_repo)], env={"BASH_PROMPT_SKIP_VCS_CHECK": ""}
        )

    assert result.exit_code == 0
    assert _values(result.stdout)["vcs"] == '""'
    vcs_status.assert_not_called()


def test_skip_option_empties_vcs(runner, fixed_host, git_repo):
    result = runner.invoke(app, ["--cwd", str(git_repo), "--skip-vcs"])

    assert result.exit_code == 0
    assert _values(result.stdout)["vcs"] == '""'


def test_host_failure_aborts_without_output(runner):
    error = HostInfoError("Could not get load average", {"cause": "no /proc"})

    with patch("bash_prompt_vars.cli.collect_host_info", side_effect=error):
        result = runner.invoke(app, [])

    assert result.exit_code == 1
    assert "load=" not in result.output
    assert "Error: Could not get load average: no /proc" in result.output
    assert "Context" not in result.output


def test_runs_without_git_on_path(tmp_path):
    empty_bin = tmp_path / "bin"
    empty_bin.mkdir()
    env = {
        **os.environ,
        "PATH": str(empty_bin),
        "PYTHONPATH": str(SRC_DIR),
        "HOME": str(tmp_path),
    }
    env.pop("BASH_PROMPT_SKIP_VCS_CHECK", None)
    env.pop("GIT_PYTHON_GIT_EXECUTABLE", None)

    result = subprocess.run(
        [sys.executable, "-m", "bash_prompt_vars", "--cwd", str(tmp_path)],
        stdin=subprocess.DEVNULL,
        capture_output=True,
        text=True,
        env=env,
    )

    assert result.returncode == 0, result.stderr
    values = _values(result.stdout)
    assert list(values) == ["load", "myos", "myversion", "tty", "users", "vcs"]
    assert values["vcs"] == '""'


def test_host_failure_without_cause(runner):
    error = HostInfoError("Failed to get parent process", {"pid": 1})

    with patch("bash_prompt_vars.cli.collect_host_info", side_effect=error):
        result = runner.invoke(app, [])

    assert result.exit_code == 1
    assert "Error: Failed to get parent process" in result.output
    assert "pid" not in result.output
