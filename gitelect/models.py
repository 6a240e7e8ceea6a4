"""Shared dataclasses for ancestry caches, server branches and elections."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


def _default_serializer(obj: Any) -> Any:
    if isinstance(obj, Enum):
        return obj.value
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def to_json(data: Any, indent: int = 2) -> str:
    if isinstance(data, list):
        serializable = [asdict(item) if hasattr(item, "__dataclass_fields__") else item for item in data]
    elif hasattr(data, "__dataclass_fields__"):
        serializable = asdict(data)
    else:
        serializable = data
    return json.dumps(serializable, indent=indent, default=_default_serializer)


class Tier(str, Enum):
    """Which step of the election produced the result."""

    EXACT = "exact"
    ANCESTRY = "ancestry"
    MAIN_FALLBACK = "main_fallback"
    NO_MATCH = "no_match"


@dataclass(frozen=True)
class ServerBranch:
    name: str
    is_main: bool = False


def check_max_depth(max_depth: int | None) -> None:
    if max_depth is not None and max_depth < 1:
        raise ValueError(f"max_depth must be at least 1, got {max_depth}")


@dataclass(frozen=True)
class ResolutionOptions:
    first_parent: bool = True  # False walks every parent of merge commits
    max_depth: int | None = None  # commits per branch, None = down to the root
    main_competes: bool = False  # main takes part in the ancestry ranking and wins ties

    def __post_init__(self) -> None:
        check_max_depth(self.max_depth)


@dataclass
class AncestryCache:
    """Branch short name → commit SHAs from the tip backward.

    ``available`` is False when the refs could not be enumerated at all, which
    is not the same thing as a repository that simply has no branches.
    ``skipped`` holds branches that exist but whose tip or history could not
    be read; they have no entry in ``chains``.
    """

    chains: dict[str, list[str]] = field(default_factory=dict)
    available: bool = True
    skipped: set[str] = field(default_factory=set)

    @classmethod
    def unavailable(cls) -> AncestryCache:
        return cls(chains={}, available=False)


@dataclass
class Election:
    branch: str | None
    tier: Tier
    distance: int | None = None  # commits between the local tip and the shared commit (ancestry tier only)
