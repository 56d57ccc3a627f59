"""Data models for pull requests considered for a branch update."""

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Optional


@dataclass(frozen=True)
class BranchRef:
    """One side (base or head) of a pull request."""
    ref: str
    label: str    # "{owner}:{ref}" when the repository is known, else the bare ref
    sha: str = ""


@dataclass(frozen=True)
class HeadRepository:
    """Repository hosting the head branch (the fork, for fork PRs)."""
    name: str
    owner_login: str


@dataclass(frozen=True)
class PullRequestSummary:
    """
    Canonical view of a pull request, independent of the API it came from.

    Built only by the conversion functions in
    ``pr_autoupdate.orchestrator.enumerator``; never mutated afterwards.
    """
    number: int
    state: str                    # "open" or "closed"
    merged: bool
    draft: bool
    base: BranchRef
    head: BranchRef
    head_repo: Optional[HeadRepository] = None  # None when the fork was deleted
    labels: FrozenSet[str] = field(default_factory=frozenset)
    auto_merge: Optional[Any] = None            # only presence is meaningful

    @property
    def is_open(self) -> bool:
        return self.state == "open"

    @property
    def has_auto_merge(self) -> bool:
        return self.auto_merge is not None
