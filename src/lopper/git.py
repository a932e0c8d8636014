"""Git repository operations."""

import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional, Union

from git import GitCommandError, Head, InvalidGitRepositoryError, NoSuchPathError, Repo
from git.exc import ODBError

DEFAULT_BRANCH = "master"

_EPOCH = datetime(1970, 1, 1)


class GitError(Exception):
    """Git operation error."""


def normalize_commit_time(seconds: int, offset_minutes: int) -> datetime:
    """Convert a git timestamp into the wall-clock time at the commit's offset.

    Args:
        seconds: Seconds since the epoch, as stored in the commit
        offset_minutes: UTC offset of the commit in minutes east of UTC

    Returns:
        A naive datetime, e.g. ``(0, 120)`` gives ``1970-01-01 02:00:00``
    """
    return _EPOCH + timedelta(seconds=seconds) + timedelta(minutes=offset_minutes)


def _decode_text(value: Union[str, bytes], encoding: str = "utf-8") -> str:
    # GitPython leaves the message as bytes when the declared encoding is unknown
    if isinstance(value, bytes):
        try:
            return value.decode(encoding, "replace")
        except LookupError:
            return value.decode("utf-8", "replace")
    return value


def _decode_ref_name(name: str) -> str:
    # Loose ref names come from os.listdir and may hold surrogate escapes
    return os.fsencode(name).decode("utf-8", "replace")


@dataclass(frozen=True)
class Commit:
    """Tip commit of a branch."""

    id: str
    message: str
    time: datetime

    @property
    def short_id(self) -> str:
        return self.id[:7]


@dataclass(repr=False)
class BranchRecord:
    """A local branch as seen during one enumeration pass."""

    name: str
    last_commit: Commit
    head: Head = field(compare=False)

    @property
    def ref_name(self) -> str:
        """The branch name exactly as git stores it, for passing back to git."""
        return self.head.name

    @property
    def is_current(self) -> bool:
        """Whether this branch is checked out in the working tree."""
        head = self.head.repo.head
        if head.is_detached:
            return False
        return head.ref == self.head

    def __repr__(self) -> str:
        return f"BranchRecord(name={self.name!r}, time={self.last_commit.time}, id={self.last_commit.id})"


class GitRepo:
    """Git repository operations."""

    def __init__(self, path: Optional[Path] = None) -> None:
        """Open the repository at path, or discover it from the environment.

        Without a path, GIT_DIR is honoured and the current directory and its
        parents are searched, like the git command line does.
        """
        try:
            self.repo: Repo = Repo(path, search_parent_directories=True)
        except (GitCommandError, ValueError, InvalidGitRepositoryError, NoSuchPathError) as err:
            raise GitError(f"Failed to open repository: {err}") from err
        if self.repo.bare:
            raise GitError("Cannot operate on bare repository")

    def list_local_branches(self) -> list[BranchRecord]:
        """Get every local branch with its tip commit, sorted by name."""
        branches = []
        try:
            for head in self.repo.heads:
                commit = head.commit
                last_commit = Commit(
                    id=commit.hexsha,
                    message=_decode_text(commit.message, commit.encoding),
                    # committer_tz_offset is in seconds west of UTC
                    time=normalize_commit_time(commit.committed_date, -commit.committer_tz_offset // 60),
                )
                branches.append(BranchRecord(name=_decode_ref_name(head.name), last_commit=last_commit, head=head))
        except (GitCommandError, ValueError, TypeError, ODBError) as err:
            # TypeError: the ref peels to something other than a commit
            raise GitError(f"Failed to list branches: {err}") from err

        branches.sort(key=lambda branch: branch.name)
        return branches

    def delete_branch(self, branch_name: str) -> None:
        """Delete a local branch by name.

        The branch is looked up when this is called, so it does not matter
        whether an earlier enumeration is stale. No protection checks are
        made here.

        Raises:
            GitError: If the branch does not exist or cannot be deleted
        """
        try:
            self.repo.git.branch("-D", "--", branch_name)
        except GitCommandError as err:
            raise GitError(f"Failed to delete branch {branch_name}: {err}") from err
