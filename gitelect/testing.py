"""In-memory :class:`~gitelect.repo.RepositoryReader` for tests.

Usage:
    from gitelect.testing import InMemoryRepository

    repo = InMemoryRepository()
    base = repo.line("m1", "m2", "m3")
    repo.set_branch("master", base)
    repo.set_branch("feature", repo.line("f1", "f2", parent=base))
"""

from __future__ import annotations

from gitelect.repo import RepositoryAccessError


class InMemoryRepository:
    """Commit graph and branch refs held in dicts.

    Set ``refs_broken`` to make branch enumeration fail like a corrupt ref
    database, or add SHAs to ``unreadable`` to make single commits fail.
    """

    def __init__(self) -> None:
        self.graph: dict[str, list[str]] = {}
        self.branches: dict[str, str | None] = {}
        self.head: str | None = None
        self.refs_broken = False
        self.unreadable: set[str] = set()

    def commit(self, commit_id: str, *parents: str) -> str:
        self.graph[commit_id] = list(parents)
        return commit_id

    def line(self, *commit_ids: str, parent: str | None = None) -> str:
        """Add a linear run of commits, oldest first, and return the newest."""
        for commit_id in commit_ids:
            self.commit(commit_id, *([parent] if parent else []))
            parent = commit_id
        return parent

    def set_branch(self, name: str, commit_id: str | None) -> None:
        self.branches[name] = commit_id

    def local_branches(self) -> dict[str, str | None]:
        if self.refs_broken:
            raise RepositoryAccessError("ref database unreadable")
        return dict(self.branches)

    def parents(self, commit_id: str) -> list[str]:
        if commit_id in self.unreadable or commit_id not in self.graph:
            raise RepositoryAccessError(f"missing object {commit_id}")
        return list(self.graph[commit_id])

    def head_commit(self) -> str | None:
        return self.head
