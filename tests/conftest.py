from __future__ import annotations

import sys
from pathlib import Path

import pytest
from git import Actor, Repo

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

AUTHOR = Actor("Test", "test@example.com")


class RepoBuilder:
    """Create commits and branches directly in the object store, without checkouts."""

    def __init__(self, path: Path):
        path.mkdir()
        self.path = path
        self.repo = Repo.init(path)
        (path / "README.md").write_text("# Test repo\n")
        self.repo.index.add(["README.md"])

    def commit(self, message: str, *parents):
        return self.repo.index.commit(
            message,
            parent_commits=list(parents),
            head=False,
            author=AUTHOR,
            committer=AUTHOR,
        )

    def line(self, *messages: str, parent=None):
        for message in messages:
            parent = self.commit(message, *([parent] if parent is not None else []))
        return parent

    def branch(self, name: str, commit):
        return self.repo.create_head(name, commit)

    def checkout(self, name: str) -> None:
        self.repo.head.reference = self.repo.heads[name]

    def detach(self, commit) -> None:
        self.repo.head.reference = commit


@pytest.fixture
def make_repo(tmp_path: Path):
    def _make(name: str = "repo") -> RepoBuilder:
        return RepoBuilder(tmp_path / name)

    return _make


@pytest.fixture
def analyzed_branch_repo(make_repo) -> RepoBuilder:
    """master (3 commits), closest_branch forked from its tip, unrelated foo."""
    b = make_repo("analyzed-branch")
    m3 = b.line("m1", "m2", "m3")
    b.branch("master", m3)
    b.branch("closest_branch", b.line("c1", parent=m3))
    b.branch("foo", b.line("f1"))
    b.checkout("closest_branch")
    return b


@pytest.fixture
def closest_branch_repo(make_repo) -> RepoBuilder:
    """Detached HEAD one commit past closest_branch, which forked from master's second commit."""
    b = make_repo("closest-branch")
    m2 = b.line("m1", "m2")
    b.branch("master", b.line("m3", parent=m2))
    c1 = b.line("c1", parent=m2)
    b.branch("closest_branch", c1)
    b.branch("foo", b.line("f1"))
    b.detach(b.line("d1", parent=c1))
    return b


@pytest.fixture
def child_from_non_analyzed_repo(make_repo) -> RepoBuilder:
    """not_analyzed_branch forked from master's tip, branch_to_analyze from an older master commit."""
    b = make_repo("child-from-non-analyzed")
    m2 = b.line("m1", "m2")
    m3 = b.line("m3", parent=m2)
    b.branch("master", m3)
    b.branch("branch_to_analyze", b.line("b1", parent=m2))
    b.branch("not_analyzed_branch", b.line("n1", parent=m3))
    b.branch("foo", b.line("f1"))
    b.checkout("not_analyzed_branch")
    return b
