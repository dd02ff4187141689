"""Mercurial status through python-hglib.

hglib keeps one ``hg serve --cmdserver pipe`` process per client, so every
:class:`HgRepo` must be closed to stop it.
"""

import logging
from pathlib import Path
from typing import Optional

import hglib
import hglib.error

from bash_prompt_vars.exceptions import RepositoryError
from bash_prompt_vars.vcs.base import (
    FileState,
    FileStatus,
    RepositoryHandle,
    VcsKind,
    VcsProvider,
    root_name_from_url,
)

logger = logging.getLogger(__name__)

REVISION_LENGTH = 7

HGLIB_ERRORS = (
    hglib.error.ServerError,
    hglib.error.CommandError,
    hglib.error.ResponseError,
    hglib.error.CapabilityError,
)

_STATES = {
    "M": FileState.MODIFIED,
    "A": FileState.ADDED,
    "R": FileState.DELETED,
    "!": FileState.DELETED,
    "?": FileState.UNTRACKED,
}

# "D" is counted nowhere; any code not listed lands in untracked.
_BUCKETS = {
    "M": "modified",
    "A": "added",
    "D": None,
    "R": "deleted",
}


def _text(value) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", "replace")
    return value


def find_repo_root(cwd: Path) -> Optional[Path]:
    """Return the nearest directory at or above ``cwd`` holding ``.hg``."""
    for candidate in (cwd, *cwd.parents):
        if (candidate / ".hg").is_dir():
            return candidate
    return None


def to_file_statuses(entries) -> list[FileStatus]:
    """Convert hglib ``(code, path)`` status tuples."""
    statuses = []
    for code, path in entries:
        code = _text(code)
        statuses.append(
            FileStatus(path=_text(path), state=_STATES.get(code, FileState.OTHER), code=code)
        )
    return statuses


class HgRepo(RepositoryHandle):
    kind = VcsKind.HG

    def __init__(self, client: "hglib.client.hgclient", root_name: str):
        super().__init__(root_name)
        self.client = client
        self._identity: Optional[tuple[str, str]] = None

    def _identify(self) -> tuple[str, str]:
        if self._identity is None:
            try:
                output = _text(self.client.identify(id=True, branch=True))
            except HGLIB_ERRORS as e:
                raise RepositoryError("hg identify failed", {"cause": str(e)}) from e
            fields = output.strip().split(" ")
            if len(fields) < 2:
                raise RepositoryError("unexpected hg identify output", {"output": output})
            self._identity = (fields[0][:REVISION_LENGTH], fields[1])
        return self._identity

    def branch_name(self) -> str:
        return self._identify()[1]

    def revision_id(self) -> str:
        return self._identify()[0]

    def file_statuses(self) -> list[FileStatus]:
        try:
            entries = self.client.status()
        except HGLIB_ERRORS as e:
            raise RepositoryError("hg status failed", {"cause": str(e)}) from e
        return to_file_statuses(entries)

    def classify(self, status: FileStatus) -> Optional[str]:
        return _BUCKETS.get(status.code, "untracked")

    def close(self) -> None:
        try:
            self.client.close()
        except HGLIB_ERRORS as e:
            logger.debug(f"hg command server did not shut down cleanly: {e}")


class HgProvider(VcsProvider):
    kind = VcsKind.HG

    def __init__(self, executable: str = "hg"):
        self.executable = executable

    def open(self, cwd: Path) -> HgRepo:
        repo_root = find_repo_root(cwd)
        if repo_root is None:
            raise RepositoryError("not a mercurial repository", {"cwd": str(cwd)})

        # hglib reads the executable from this module attribute when it spawns
        hglib.HGPATH = self.executable
        try:
            client = hglib.open(str(repo_root), encoding="UTF-8")
        except (OSError, *HGLIB_ERRORS) as e:
            raise RepositoryError(
                "could not start hg command server", {"root": str(repo_root), "cause": str(e)}
            ) from e

        repo = HgRepo(client, self._root_name(client, cwd))
        logger.debug(f"Opened hg repository {repo_root} as {repo.root_name!r}")
        return repo

    @staticmethod
    def _root_name(client: "hglib.client.hgclient", cwd: Path) -> str:
        try:
            paths = client.paths()
        except HGLIB_ERRORS as e:
            logger.debug(f"hg paths failed, using directory name: {e}")
            paths = {}

        # hglib keeps the order hg printed, so the first value is the first path
        for url in paths.values():
            return root_name_from_url(_text(url).strip(), ".hg") or cwd.name
        return cwd.name
