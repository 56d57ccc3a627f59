"""Data models for branch update (merge) attempts."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .pull_request import PullRequestSummary


class MergeState(Enum):
    """States of a single merge attempt sequence."""
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"                      # merged, or already up to date
    CONFLICT_SKIPPED = "conflict_skipped"        # conflict, MERGE_CONFLICT_ACTION=ignore
    AUTH_DENIED = "auth_denied"                  # 403 against a fork we don't own
    CONFLICT_FATAL = "conflict_fatal"
    RETRY_EXHAUSTED_FATAL = "retry_exhausted_fatal"

    @property
    def is_terminal(self) -> bool:
        return self is not MergeState.ATTEMPTING

    @property
    def is_fatal(self) -> bool:
        return self in (MergeState.CONFLICT_FATAL, MergeState.RETRY_EXHAUSTED_FATAL)


class MergeConflictAction(Enum):
    """What to do when the base branch can't be merged cleanly."""
    FAIL = "fail"
    IGNORE = "ignore"


@dataclass(frozen=True)
class MergeRequest:
    """
    Parameters for one "merge base into head" call.

    ``base`` and ``head`` are swapped relative to the pull request on
    purpose: the pull request's base branch is merged into its head branch,
    inside the head repository.
    """
    owner: str
    repo: str
    base: str
    head: str
    commit_message: Optional[str] = None

    @classmethod
    def for_pull_request(
        cls,
        pull: PullRequestSummary,
        merge_msg: Optional[str] = None
    ) -> "MergeRequest":
        """
        Build the merge request for a pull request.

        Raises:
            ValueError: If the head repository is unknown
        """
        if pull.head_repo is None:
            raise ValueError(f"PR #{pull.number} has no head repository")

        return cls(
            owner=pull.head_repo.owner_login,
            repo=pull.head_repo.name,
            base=pull.head.ref,
            head=pull.base.ref,
            commit_message=merge_msg or None,
        )


@dataclass
class MergeResult:
    """Terminal outcome of a merge attempt sequence."""
    pr_number: int
    state: MergeState
    attempts: int = 0
    conflicted: bool = False
    commit_sha: Optional[str] = None   # None when already up to date or dry run
    dry_run: bool = False
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.state == MergeState.SUCCEEDED
