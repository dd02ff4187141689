"""Git status through GitPython."""

import configparser
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, Optional

from bash_prompt_vars.exceptions import RepositoryError
from bash_prompt_vars.vcs.base import (
    FileState,
    FileStatus,
    RepositoryHandle,
    VcsKind,
    VcsProvider,
    root_name_from_url,
)

if TYPE_CHECKING:
    import git

logger = logging.getLogger(__name__)

BRANCH_PREFIX = "refs/heads/"
REVISION_LENGTH = 7

_PORCELAIN_STATES = {
    "A": FileState.ADDED,
    "M": FileState.MODIFIED,
    "D": FileState.DELETED,
    "R": FileState.RENAMED,
}

# Renames and every other state are left out of the counters.
_BUCKETS = {
    FileState.ADDED: "added",
    FileState.MODIFIED: "modified",
    FileState.DELETED: "deleted",
    FileState.UNTRACKED: "untracked",
}


def parse_porcelain(output: str) -> Iterator[FileStatus]:
    """Parse ``git status --porcelain -z`` output.

    The index column wins over the work-tree column, so a file that is
    staged as added and then edited counts once, as added.
    """
    entries = iter(output.split("\0"))
    for entry in entries:
        if len(entry) < 4:
            continue
        code, path = entry[:2], entry[3:]
        if code[0] in "RC":
            # -z puts the rename/copy source in its own field
            next(entries, None)

        if code == "??":
            state = FileState.UNTRACKED
        else:
            state = _PORCELAIN_STATES.get(code[0]) or _PORCELAIN_STATES.get(code[1], FileState.OTHER)
        yield FileStatus(path=path, state=state, code=code)


def _import_git():
    """Import GitPython, which refuses to load when no git executable is found."""
    try:
        import git
    except ImportError as e:
        raise RepositoryError("GitPython is unavailable", {"cause": str(e)}) from e
    return git


class GitRepo(RepositoryHandle):
    kind = VcsKind.GIT

    def __init__(self, repo: "git.Repo", root_name: str):
        super().__init__(root_name)
        self.repo = repo
        self._git = _import_git()

    def branch_name(self) -> str:
        try:
            ref = self.repo.head.reference
        except TypeError as e:
            raise RepositoryError("HEAD is detached", {"cause": str(e)}) from e
        return ref.path.removeprefix(BRANCH_PREFIX)

    def revision_id(self) -> str:
        try:
            return self.repo.head.commit.hexsha[:REVISION_LENGTH]
        except ValueError as e:
            raise RepositoryError("HEAD does not point at a commit", {"cause": str(e)}) from e

    def file_statuses(self) -> list[FileStatus]:
        try:
            output = self.repo.git.status("--porcelain", "-z", "--untracked-files=all")
        except self._git.GitError as e:
            raise RepositoryError("git status failed", {"cause": str(e)}) from e
        return list(parse_porcelain(output))

    def classify(self, status: FileStatus) -> Optional[str]:
        return _BUCKETS.get(status.state)

    def close(self) -> None:
        self.repo.close()


class GitProvider(VcsProvider):
    kind = VcsKind.GIT

    def open(self, cwd: Path) -> GitRepo:
        git = _import_git()
        try:
            repo = git.Repo(cwd, search_parent_directories=True)
        except (git.InvalidGitRepositoryError, git.NoSuchPathError) as e:
            raise RepositoryError("not a git repository", {"cwd": str(cwd)}) from e
        except (git.GitError, OSError) as e:
            raise RepositoryError("could not open git repository", {"cause": str(e)}) from e

        try:
            root_name = self._root_name(repo, cwd)
        except (configparser.Error, git.GitError, OSError, ValueError) as e:
            repo.close()
            raise RepositoryError("could not read git remotes", {"cause": str(e)}) from e

        logger.debug(f"Opened git repository {repo.working_dir} as {root_name!r}")
        return GitRepo(repo, root_name)

    @staticmethod
    def _root_name(repo: "git.Repo", cwd: Path) -> str:
        if repo.remotes:
            name = root_name_from_url(repo.remotes[0].url, ".git")
            if name:
                return name
        return cwd.name
