"""Tests for the commit ancestry cache builder, using the in-memory repository."""

import logging

import pytest

from gitelect.repo import RepositoryAccessError
from gitelect.resolvers import build_commits_cache, load_ancestry, walk_ancestry
from gitelect.testing import InMemoryRepository


@pytest.fixture
def repo() -> InMemoryRepository:
    r = InMemoryRepository()
    m3 = r.line("m1", "m2", "m3")
    r.set_branch("master", m3)
    r.set_branch("feature", r.line("f1", "f2", parent="m2"))
    return r


def test_chain_runs_from_tip_to_root(repo):
    cache = build_commits_cache(repo)
    assert cache == {
        "master": ["m3", "m2", "m1"],
        "feature": ["f2", "f1", "m2", "m1"],
    }


def test_max_depth_bounds_each_chain(repo):
    cache = build_commits_cache(repo, max_depth=2)
    assert cache["master"] == ["m3", "m2"]
    assert cache["feature"] == ["f2", "f1"]


def test_first_parent_skips_merged_history():
    r = InMemoryRepository()
    r.line("a", "b")
    r.line("t1", parent="a")
    r.commit("x", "b", "t1")
    assert walk_ancestry(r, "x") == ["x", "b", "a"]


def test_all_parents_lists_each_commit_once_by_generation():
    r = InMemoryRepository()
    r.line("a", "b")
    r.line("t1", parent="a")
    r.commit("x", "b", "t1")
    assert walk_ancestry(r, "x", first_parent=False) == ["x", "b", "t1", "a"]


def test_empty_repository_gives_empty_available_cache():
    cache = load_ancestry(InMemoryRepository())
    assert cache.available
    assert cache.chains == {}


def test_broken_ref_database_gives_empty_cache(repo, caplog):
    repo.refs_broken = True
    with caplog.at_level(logging.WARNING):
        assert build_commits_cache(repo) == {}
    assert "Commit ancestry unavailable" in caplog.text


def test_broken_ref_database_marks_cache_unavailable(repo):
    repo.refs_broken = True
    cache = load_ancestry(repo)
    assert not cache.available
    assert cache.chains == {}


def test_branch_with_unreadable_history_is_omitted(repo):
    repo.unreadable.add("f1")
    assert build_commits_cache(repo) == {"master": ["m3", "m2", "m1"]}


def test_branch_with_dangling_tip_is_omitted(repo):
    repo.set_branch("gone", "deadbeef")
    assert "gone" not in build_commits_cache(repo)
    assert len(build_commits_cache(repo)) == 2


def test_walk_raises_on_unreadable_commit(repo):
    repo.unreadable.add("m2")
    with pytest.raises(RepositoryAccessError):
        walk_ancestry(repo, "m3")


def test_unreadable_branches_are_recorded_as_skipped(repo):
    repo.unreadable.add("f1")
    repo.set_branch("dangling", None)
    cache = load_ancestry(repo)
    assert set(cache.chains) == {"master"}
    assert cache.skipped == {"feature", "dangling"}


@pytest.mark.parametrize("depth", [0, -3])
def test_non_positive_depth_is_rejected(repo, depth):
    with pytest.raises(ValueError):
        build_commits_cache(repo, max_depth=depth)
    with pytest.raises(ValueError):
        walk_ancestry(repo, "m3", max_depth=depth)
