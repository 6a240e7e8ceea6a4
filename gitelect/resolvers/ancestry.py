"""Build the per-branch commit ancestry cache."""

from __future__ import annotations

import logging
import sys
from collections import deque

from gitelect.models import AncestryCache, check_max_depth, to_json
from gitelect.repo import GitRepository, RepositoryAccessError, RepositoryReader, open_repo

logger = logging.getLogger(__name__)


def walk_ancestry(
    repo: RepositoryReader,
    tip: str,
    first_parent: bool = True,
    max_depth: int | None = None,
) -> list[str]:
    """Return the commit SHAs reachable from *tip*, tip first.

    With *first_parent* the walk follows the mainline of merge commits only.
    Otherwise every parent is visited breadth-first and each commit is listed
    once, so a commit's index is its generation distance from *tip*.

    Raises :class:`RepositoryAccessError` if any commit on the way is unreadable.
    """
    check_max_depth(max_depth)
    chain: list[str] = []
    seen: set[str] = set()
    pending = deque([tip])
    while pending:
        if max_depth is not None and len(chain) >= max_depth:
            break
        commit_id = pending.popleft()
        if commit_id in seen:
            continue
        seen.add(commit_id)
        chain.append(commit_id)
        parents = repo.parents(commit_id)
        pending.extend(parents[:1] if first_parent else parents)
    return chain


def load_ancestry(
    repo: RepositoryReader,
    first_parent: bool = True,
    max_depth: int | None = None,
) -> AncestryCache:
    """Walk every local branch of *repo* and return the resulting :class:`AncestryCache`.

    A branch whose tip or history cannot be read is left out of ``chains`` and
    recorded in ``skipped``. If the refs themselves cannot be listed the cache
    comes back marked unavailable.
    """
    check_max_depth(max_depth)
    try:
        tips = repo.local_branches()
    except RepositoryAccessError as exc:
        logger.warning("Commit ancestry unavailable: %s", exc)
        return AncestryCache.unavailable()

    cache = AncestryCache()
    for name, tip in tips.items():
        if tip is None:
            logger.debug("Skipping branch %s: tip does not resolve to a commit", name)
            cache.skipped.add(name)
            continue
        try:
            cache.chains[name] = walk_ancestry(repo, tip, first_parent=first_parent, max_depth=max_depth)
        except RepositoryAccessError as exc:
            logger.debug("Skipping branch %s: %s", name, exc)
            cache.skipped.add(name)
    return cache


def build_commits_cache(
    repo: RepositoryReader,
    first_parent: bool = True,
    max_depth: int | None = None,
) -> dict[str, list[str]]:
    """Return branch short name → commit SHAs (tip first) for every local branch.

    Never raises for repository read failures; the mapping is simply empty or
    missing the affected branches.
    """
    return load_ancestry(repo, first_parent=first_parent, max_depth=max_depth).chains


if __name__ == "__main__":
    repo_path = sys.argv[1] if len(sys.argv) > 1 else "."

    r = open_repo(repo_path)
    if r is None:
        sys.exit(f"No git repository found at or above: {repo_path}")
    cache = build_commits_cache(GitRepository(r))
    print(f"Ancestry for {len(cache)} local branch(es):\n")
    print(to_json({name: len(chain) for name, chain in cache.items()}))
