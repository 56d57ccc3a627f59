"""Data models for pull request branch updates."""

from .pull_request import BranchRef, HeadRepository, PullRequestSummary
from .merge import MergeConflictAction, MergeRequest, MergeResult, MergeState

__all__ = [
    "BranchRef",
    "HeadRepository",
    "PullRequestSummary",
    "MergeConflictAction",
    "MergeRequest",
    "MergeResult",
    "MergeState",
]
