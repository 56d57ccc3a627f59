"""Pull request branch updates.

This module provides:
- UpdateOrchestrator: Runs enumerate -> decide -> merge for a base branch
- PagedPullRequestEnumerator / GraphPullRequestEnumerator: PR sources
- UpdateDecisionEngine: Decides whether a PR branch needs updating
- BranchMerger: Merges the base branch into a PR branch, with retries
"""

from .orchestrator import UpdateOrchestrator
from .enumerator import (
    GraphPullRequestEnumerator,
    PagedPullRequestEnumerator,
    PullRequestEnumerator,
    summary_from_graph,
    summary_from_rest,
)
from .decision import Decision, GuardOutcome, UpdateDecisionEngine
from .merge import BranchMerger

__all__ = [
    "UpdateOrchestrator",
    "GraphPullRequestEnumerator",
    "PagedPullRequestEnumerator",
    "PullRequestEnumerator",
    "summary_from_graph",
    "summary_from_rest",
    "Decision",
    "GuardOutcome",
    "UpdateDecisionEngine",
    "BranchMerger",
]
