"""Elect the server branch that best matches a local branch.

The election runs in tiers and the first one that produces a branch wins:

- **exact**: a server branch carries the local branch's name.
- **ancestry**: the non-main server branch whose history meets the local
  history closest to the local tip. Distance is the number of commits between
  the local tip and the first local commit also reachable from the candidate.
- **main_fallback**: nothing shares history (or history could not be read),
  so the main-flagged server branch is used.
- **no_match**: none of the above applies.

Repository read failures never escape; they only remove the ancestry tier.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from gitelect.models import AncestryCache, Election, ResolutionOptions, ServerBranch, Tier
from gitelect.repo import GitRepository, RepositoryAccessError, RepositoryReader, current_branch, open_repo
from gitelect.resolvers.ancestry import load_ancestry, walk_ancestry

logger = logging.getLogger(__name__)

DETACHED_HEAD = "HEAD"


def _ordered(server_branches: Iterable[ServerBranch]) -> list[ServerBranch]:
    # Sets have no stable iteration order, so ties would not be deterministic.
    if isinstance(server_branches, (set, frozenset)):
        return sorted(server_branches, key=lambda b: b.name)
    return list(server_branches)


def _local_chain(
    local_branch_name: str,
    repo: RepositoryReader,
    cache: AncestryCache,
    options: ResolutionOptions,
) -> list[str]:
    if local_branch_name in cache.chains:
        return cache.chains[local_branch_name]
    if local_branch_name in cache.skipped:
        # A real ref with unreadable history; HEAD may be on another branch.
        return []

    # Not a local ref: detached HEAD or a synthetic working branch.
    try:
        head = repo.head_commit()
        if head is None:
            return []
        return walk_ancestry(repo, head, first_parent=options.first_parent, max_depth=options.max_depth)
    except RepositoryAccessError as exc:
        logger.debug("Unable to walk history of %s from HEAD: %s", local_branch_name, exc)
        return []


def _closest_by_ancestry(
    local_branch_name: str,
    repo: RepositoryReader,
    candidates: list[ServerBranch],
    main: ServerBranch | None,
    options: ResolutionOptions,
) -> tuple[str, int] | None:
    """Return (branch name, distance) of the closest candidate, or None."""
    cache = load_ancestry(repo, first_parent=options.first_parent, max_depth=options.max_depth)
    if not cache.available:
        return None

    local_chain = _local_chain(local_branch_name, repo, cache, options)
    if not local_chain:
        logger.debug("No history found for local branch %s", local_branch_name)
        return None

    position = {commit_id: index for index, commit_id in enumerate(local_chain)}

    best: tuple[int, int, int, str] | None = None
    for order, branch in enumerate(candidates):
        if branch.is_main and not (options.main_competes and branch is main):
            continue
        chain = cache.chains.get(branch.name)
        if chain is None:
            continue
        distance = min((position[c] for c in chain if c in position), default=None)
        if distance is None:
            continue
        # Lower is better: distance, then main before others, then supplied order.
        rank = (distance, 0 if branch is main else 1, order, branch.name)
        if best is None or rank < best:
            best = rank

    if best is None:
        return None
    return best[3], best[0]


def explain_election(
    local_branch_name: str,
    repo: RepositoryReader,
    server_branches: Iterable[ServerBranch],
    options: ResolutionOptions | None = None,
) -> Election:
    """Elect a server branch for *local_branch_name* and report which tier decided.

    Parameters
    ----------
    local_branch_name:
        Name of the local branch being analysed. Must not be empty. A name that
        is not a local ref is resolved from the checked-out commit.
    repo:
        Any :class:`RepositoryReader`, e.g. :class:`gitelect.repo.GitRepository`.
    server_branches:
        Branches known to the server. Ties go to the earlier entry; sets are
        ordered by name first.
    options:
        Walk and ranking options, see :class:`ResolutionOptions`.
    """
    if not local_branch_name:
        raise ValueError("local_branch_name must not be empty")
    options = options or ResolutionOptions()
    candidates = _ordered(server_branches)

    for branch in candidates:
        if branch.name == local_branch_name:
            return Election(branch=branch.name, tier=Tier.EXACT)

    main = next((b for b in candidates if b.is_main), None)

    closest = _closest_by_ancestry(local_branch_name, repo, candidates, main, options)
    if closest is not None:
        name, distance = closest
        return Election(branch=name, tier=Tier.ANCESTRY, distance=distance)

    if main is not None:
        return Election(branch=main.name, tier=Tier.MAIN_FALLBACK)
    return Election(branch=None, tier=Tier.NO_MATCH)


def elect_server_branch(
    local_branch_name: str,
    repo: RepositoryReader,
    server_branches: Iterable[ServerBranch],
    options: ResolutionOptions | None = None,
) -> str | None:
    """Return the name of the server branch matching *local_branch_name*, or None."""
    return explain_election(local_branch_name, repo, server_branches, options).branch


def elect_for_directory(
    path: str | Path,
    server_branches: Iterable[ServerBranch],
    local_branch_name: str | None = None,
    options: ResolutionOptions | None = None,
) -> Election:
    """Open the repository at *path* and elect a server branch for its checked-out branch.

    A directory without git metadata yields a ``no_match`` election. With a
    detached HEAD the history is taken from the checked-out commit.
    """
    repo = open_repo(path)
    if repo is None:
        return Election(branch=None, tier=Tier.NO_MATCH)
    try:
        local = local_branch_name or current_branch(repo) or DETACHED_HEAD
        return explain_election(local, GitRepository(repo), server_branches, options)
    finally:
        repo.close()
