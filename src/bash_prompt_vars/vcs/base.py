"""Shared types for version-control status summaries.

A provider opens a :class:`RepositoryHandle` for one backend and turns it into
a :class:`StatusSummary`. Providers report failure with :class:`NotFound`
values instead of raising, so callers can walk a fixed list of providers
with a plain loop.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Union

from bash_prompt_vars.exceptions import RepositoryError

logger = logging.getLogger(__name__)

BUCKETS = ("modified", "added", "deleted", "untracked")


class VcsKind(str, Enum):
    GIT = "git"
    HG = "hg"


class FileState(Enum):
    """Normalized per-file change kind."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    UNTRACKED = "untracked"
    OTHER = "other"


@dataclass(frozen=True)
class FileStatus:
    """One file that is not clean relative to the checked-out revision.

    Attributes:
        path: Repository-relative path (not part of the summary)
        state: Normalized change kind
        code: Raw backend status code, kept for classification and logging
    """

    path: str
    state: FileState
    code: str


@dataclass(frozen=True)
class StatusSummary:
    """Compact repository status rendered into the ``vcs`` prompt variable."""

    kind: VcsKind
    root: str
    branch: str
    revision: str
    modified: int = 0
    added: int = 0
    deleted: int = 0
    untracked: int = 0

    def format(self) -> str:
        return (
            f"{self.kind.value} {self.root} {self.branch} {self.revision} "
            f"{self.modified}m {self.added}a {self.deleted}d {self.untracked}u"
        )

    def __str__(self) -> str:
        return self.format()


@dataclass(frozen=True)
class NotFound:
    """A provider found no usable repository, or could not read it."""

    kind: VcsKind
    reason: str


@dataclass(frozen=True)
class Located:
    """A provider opened a repository handle."""

    handle: "RepositoryHandle"


LocateResult = Union[Located, NotFound]
SummaryResult = Union[StatusSummary, NotFound]


def root_name_from_url(url: str, suffix: str) -> str:
    """Return the last path segment of a remote URL without ``suffix``.

    Handles plain paths, URLs and scp-style ``host:path`` remotes.

        >>> root_name_from_url("git@github.com:me/proj.git", ".git")
        'proj'
    """
    segment = re.split(r"[/\\:]", url.rstrip("/\\"))[-1]
    if suffix and segment.endswith(suffix):
        segment = segment[: -len(suffix)]
    return segment


class RepositoryHandle(ABC):
    """Read-only session on one repository.

    Handles are context managers; leaving the block releases whatever the
    backend holds open.
    """

    kind: VcsKind

    def __init__(self, root_name: str):
        self.root_name = root_name

    @abstractmethod
    def branch_name(self) -> str:
        """Current branch without any ref namespace prefix."""

    @abstractmethod
    def revision_id(self) -> str:
        """Checked-out revision in the backend's native short form."""

    @abstractmethod
    def file_statuses(self) -> Iterable[FileStatus]:
        """Every file that differs from the checked-out revision."""

    @abstractmethod
    def classify(self, status: FileStatus) -> Optional[str]:
        """Return the counter bucket for ``status``, or None to ignore it."""

    def close(self) -> None:
        pass

    def __enter__(self) -> "RepositoryHandle":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def summarize(handle: RepositoryHandle) -> StatusSummary:
    """Count ``handle``'s file statuses into the four summary buckets.

    Raises:
        RepositoryError: If the branch, revision or status cannot be read.
    """
    branch = handle.branch_name()
    revision = handle.revision_id()

    counts: Counter[str] = Counter()
    for status in handle.file_statuses():
        bucket = handle.classify(status)
        if bucket is None:
            logger.debug(f"Ignoring {handle.kind.value} status {status.code!r} for {status.path}")
            continue
        counts[bucket] += 1

    return StatusSummary(
        kind=handle.kind,
        root=handle.root_name,
        branch=branch,
        revision=revision,
        modified=counts["modified"],
        added=counts["added"],
        deleted=counts["deleted"],
        untracked=counts["untracked"],
    )


class VcsProvider(ABC):
    """One backend in the repository detection chain."""

    kind: VcsKind

    @abstractmethod
    def open(self, cwd: Path) -> RepositoryHandle:
        """Open the repository containing ``cwd``.

        Raises:
            RepositoryError: If ``cwd`` is not inside a usable repository.
        """

    def locate(self, cwd: Path) -> LocateResult:
        try:
            return Located(self.open(cwd))
        except RepositoryError as e:
            logger.debug(f"No {self.kind.value} repository at {cwd}: {e}")
            return NotFound(self.kind, str(e))

    def summarize(self, handle: RepositoryHandle) -> SummaryResult:
        try:
            return summarize(handle)
        except RepositoryError as e:
            logger.warning(f"Could not read {self.kind.value} status: {e}")
            return NotFound(self.kind, str(e))
