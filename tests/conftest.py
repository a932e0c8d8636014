"""Test configuration and fixtures."""

import os
from pathlib import Path
from typing import Callable, Generator

import pytest
from git import Actor, Repo

AUTHOR = Actor("Test User", "test@example.com")

# git's internal date format: seconds since the epoch and a UTC offset
COMMIT_DATES = {
    "master": "1600000000 +0200",
    "feature-x": "1600003600 -0500",
    "fix-y": "1600007200 +0530",
}


def commit_file(repo: Repo, path: Path, name: str, content: str, message: str, date: str) -> None:
    """Write a file and commit it with a fixed author and commit date."""
    (path / name).write_text(content)
    repo.index.add([name])
    repo.index.commit(message, author=AUTHOR, committer=AUTHOR, author_date=date, commit_date=date)


def write_loose_ref(path: Path, raw_name: bytes, sha: str) -> None:
    """Write refs/heads/<raw_name> directly, bypassing git's own checks."""
    heads = os.path.join(os.fsencode(path), b".git", b"refs", b"heads")
    with open(os.path.join(heads, raw_name), "w") as ref:
        ref.write(f"{sha}\n")


@pytest.fixture
def test_repo(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a repository with master, feature-x and fix-y, with feature-x checked out."""
    local_path = tmp_path / "local"
    local_path.mkdir()
    repo = Repo.init(local_path)
    repo.config_writer().set_value("user", "name", AUTHOR.name).release()
    repo.config_writer().set_value("user", "email", AUTHOR.email).release()

    commit_file(repo, local_path, "README.md", "# Test Repository", "Initial commit", COMMIT_DATES["master"])
    # Whatever init.defaultBranch says, the first branch is master
    repo.git.branch("-M", "master")

    for name in ("feature-x", "fix-y"):
        repo.create_head(name, "master").checkout()
        commit_file(repo, local_path, f"{name}.txt", f"{name} content", f"Add {name}", COMMIT_DATES[name])

    repo.heads["feature-x"].checkout()

    yield local_path


@pytest.fixture
def empty_repo(tmp_path: Path) -> Path:
    """Create a repository without any commits, and so without branches."""
    path = tmp_path / "empty"
    path.mkdir()
    Repo.init(path)
    return path


@pytest.fixture
def loose_ref() -> Callable[[Path, bytes, str], None]:
    """Give tests a way to plant refs git itself would not create."""
    return write_loose_ref
