"""Command line interface for bash-prompt-vars.

Prints shell assignments meant to be evaluated by a prompt hook::

    eval "$(bash-prompt-vars)"

Diagnostics go to stderr so stdout can always be evaluated as-is.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

import typer

from bash_prompt_vars.config import Settings
from bash_prompt_vars.exceptions import HostInfoError
from bash_prompt_vars.host import HostInfo, collect_host_info
from bash_prompt_vars.vcs import default_providers, vcs_status

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False)


def configure_logging(level_name: str) -> None:
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def format_assignments(host: HostInfo, vcs: str) -> list[str]:
    """Render the six ``key="value"`` lines, in prompt order."""
    load_1min, load_5min, load_15min = host.load
    return [
        f'load="{load_1min:.2f} {load_5min:.2f} {load_15min:.2f}"',
        f'myos="{host.os_name}"',
        f'myversion="{host.os_version}"',
        f'tty="{host.terminal}"',
        f'users="{host.users}"',
        f'vcs="{vcs}"',
    ]


@app.command()
def show(
    cwd: Optional[Path] = typer.Option(
        None,
        "--cwd",
        help="Directory to inspect for a repository (default: current directory).",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level for stderr diagnostics (default: BASH_PROMPT_LOG_LEVEL or WARNING).",
    ),
    skip_vcs: bool = typer.Option(
        False,
        "--skip-vcs",
        help="Do not look for a repository; same as setting BASH_PROMPT_SKIP_VCS_CHECK.",
    ),
) -> None:
    """Print load, OS, terminal, user and repository status as shell variables."""
    settings = Settings()
    configure_logging(log_level or settings.BASH_PROMPT_LOG_LEVEL)

    try:
        host = collect_host_info()
    except HostInfoError as e:
        cause = e.context.get("cause")
        typer.echo(f"Error: {e.message}: {cause}" if cause else f"Error: {e.message}", err=True)
        raise SystemExit(1)

    workdir = (cwd or Path(os.getcwd())).resolve()
    if skip_vcs or settings.skip_vcs_check:
        logger.debug("Repository detection skipped")
        vcs = ""
    else:
        vcs = vcs_status(workdir, default_providers(settings.BASH_PROMPT_HG_EXECUTABLE))

    for line in format_assignments(host, vcs):
        typer.echo(line)


# Entry point for console script
def main() -> None:
    app()
