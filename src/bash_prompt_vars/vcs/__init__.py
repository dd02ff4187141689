"""
Repository detection and status summaries for the ``vcs`` prompt variable.

Backends are tried in a fixed order, git first and Mercurial second. The
first one that both finds and reads a repository provides the summary; if
none does, the summary is the empty string.
"""

import logging
from pathlib import Path
from typing import Sequence

from .base import (
    FileState,
    FileStatus,
    Located,
    NotFound,
    RepositoryHandle,
    StatusSummary,
    VcsKind,
    VcsProvider,
    summarize,
)
from .git import GitProvider
from .hg import HgProvider

logger = logging.getLogger(__name__)


def default_providers(hg_executable: str = "hg") -> list[VcsProvider]:
    return [GitProvider(), HgProvider(hg_executable)]


def vcs_status(cwd: Path, providers: Sequence[VcsProvider]) -> str:
    """Return the formatted summary of the first readable repository at ``cwd``."""
    for provider in providers:
        located = provider.locate(cwd)
        if isinstance(located, NotFound):
            continue

        with located.handle as handle:
            result = provider.summarize(handle)

        if isinstance(result, StatusSummary):
            return result.format()
        logger.debug(f"Skipping {provider.kind.value}: {result.reason}")

    return ""


__all__ = [
    "FileState",
    "FileStatus",
    "GitProvider",
    "HgProvider",
    "Located",
    "NotFound",
    "RepositoryHandle",
    "StatusSummary",
    "VcsKind",
    "VcsProvider",
    "default_providers",
    "summarize",
    "vcs_status",
]
