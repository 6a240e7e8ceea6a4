"""Thin helpers for opening a repo and reading its refs and commit graph."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from git import Repo
from git.exc import GitError, InvalidGitRepositoryError, NoSuchPathError, ODBError

logger = logging.getLogger(__name__)

# Everything GitPython (and gitdb underneath it) raises for unreadable refs or objects.
_READ_ERRORS = (OSError, ValueError, GitError, ODBError)


class RepositoryAccessError(Exception):
    """The ref database or the object store could not be read."""


class RepositoryReader(Protocol):
    """Read-only view of a repository used by the resolvers."""

    def local_branches(self) -> dict[str, str | None]:
        """Return local branch short name → tip commit SHA, None when the tip does not resolve."""
        ...

    def parents(self, commit_id: str) -> list[str]:
        """Return the parent SHAs of *commit_id*, first parent first."""
        ...

    def head_commit(self) -> str | None:
        """Return the checked-out commit SHA, or None on an unborn branch."""
        ...


def open_repo(path: str | Path = ".") -> Repo | None:
    """Open the git repository at *path* (or any of its parents), None if there is none."""
    try:
        return Repo(str(path), search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError):
        logger.debug("No git repository found at or above: %s", path)
        return None


def current_branch(repo: Repo) -> str | None:
    """Return the checked-out branch name, or None when HEAD is detached."""
    try:
        return repo.active_branch.name
    except TypeError:
        return None


class GitRepository:
    """:class:`RepositoryReader` backed by a GitPython ``Repo``.

    Branches whose tip does not resolve to a commit are reported with a None
    tip by :meth:`local_branches` rather than failing the whole enumeration.
    """

    def __init__(self, repo: Repo):
        self.repo = repo

    def local_branches(self) -> dict[str, str | None]:
        try:
            heads = list(self.repo.branches)
        except _READ_ERRORS as exc:
            raise RepositoryAccessError(f"Unable to enumerate local branches: {exc}") from exc

        tips: dict[str, str | None] = {}
        for head in heads:
            try:
                tips[head.name] = head.commit.hexsha
            except _READ_ERRORS as exc:
                logger.debug("Branch %s has an unresolvable tip: %s", head.path, exc)
                tips[head.name] = None
        return tips

    def parents(self, commit_id: str) -> list[str]:
        try:
            return [parent.hexsha for parent in self.repo.commit(commit_id).parents]
        except _READ_ERRORS as exc:
            raise RepositoryAccessError(f"Unable to read commit {commit_id}: {exc}") from exc

    def head_commit(self) -> str | None:
        try:
            return self.repo.head.commit.hexsha
        except ValueError:
            # HEAD points at a branch without commits yet
            return None
        except (OSError, GitError, ODBError) as exc:
            raise RepositoryAccessError(f"Unable to resolve HEAD: {exc}") from exc
