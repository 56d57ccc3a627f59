"""Eligibility checks deciding whether a pull request branch gets updated."""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from ..config import PRFilter, ReadyState, UpdaterConfig
from ..models import PullRequestSummary
from ..tools import GitHubTool, TRANSPORT_ERRORS, error_message
from ..utils import get_logger


@dataclass(frozen=True)
class GuardOutcome:
    """Result of one guard: pass on to the next guard, or skip the PR."""
    passed: bool
    reason: str = ""
    level: int = logging.INFO

    @classmethod
    def ok(cls, reason: str = "") -> "GuardOutcome":
        return cls(passed=True, reason=reason)

    @classmethod
    def skip(cls, reason: str, level: int = logging.INFO) -> "GuardOutcome":
        return cls(passed=False, reason=reason, level=level)


@dataclass(frozen=True)
class Decision:
    """Final eligibility decision for one pull request."""
    pr_number: int
    eligible: bool
    reason: str
    guard: Optional[str] = None  # name of the guard that skipped the PR


Guard = Callable[[PullRequestSummary], Awaitable[GuardOutcome]]


class UpdateDecisionEngine:
    """
    Decides whether a pull request's head branch needs the base merged in.

    Guards run in a fixed order and the first one that skips decides:
    1. already merged
    2. not open
    3. head repository gone
    4. not behind the base branch (one compare call)
    5. excluded label present
    6. draft / ready-for-review filter
    7. PR_FILTER mode (labelled, protected, auto_merge)

    API failures inside a guard skip the PR; they never abort the run.
    """

    def __init__(self, github: GitHubTool, config: UpdaterConfig):
        self.github = github
        self.config = config
        self.logger = get_logger()
        self._guards: List[Guard] = [
            self._check_not_merged,
            self._check_open,
            self._check_head_repo,
            self._check_behind_base,
            self._check_excluded_labels,
            self._check_ready_state,
            self._check_pr_filter,
        ]

    async def needs_update(self, pull: PullRequestSummary) -> bool:
        """Check whether this pull request's branch should be updated."""
        decision = await self.evaluate(pull)
        return decision.eligible

    async def evaluate(self, pull: PullRequestSummary) -> Decision:
        """
        Run the guard chain for a pull request.

        Args:
            pull: Pull request to evaluate

        Returns:
            Decision with the reason of the deciding guard
        """
        for guard in self._guards:
            outcome = await guard(pull)
            if outcome.reason:
                self.logger.log(outcome.level, f"PR #{pull.number}: {outcome.reason}")
            if not outcome.passed:
                return Decision(
                    pr_number=pull.number,
                    eligible=False,
                    reason=outcome.reason,
                    guard=guard.__name__.replace("_check_", ""),
                )

        reason = "All checks pass and PR branch is behind base branch."
        self.logger.info(f"PR #{pull.number}: {reason}")
        return Decision(pr_number=pull.number, eligible=True, reason=reason)

    async def _check_not_merged(self, pull: PullRequestSummary) -> GuardOutcome:
        if pull.merged:
            return GuardOutcome.skip("Skipping pull request, already merged.", logging.WARNING)
        return GuardOutcome.ok()

    async def _check_open(self, pull: PullRequestSummary) -> GuardOutcome:
        if not pull.is_open:
            return GuardOutcome.skip(
                f"Skipping pull request, no longer open (current state: {pull.state}).",
                logging.WARNING,
            )
        return GuardOutcome.ok()

    async def _check_head_repo(self, pull: PullRequestSummary) -> GuardOutcome:
        if pull.head_repo is None:
            return GuardOutcome.skip(
                "Skipping pull request, fork appears to have been deleted.",
                logging.WARNING,
            )
        return GuardOutcome.ok()

    async def _check_behind_base(self, pull: PullRequestSummary) -> GuardOutcome:
        # head...base on purpose: we want to know what merging the base into
        # the head would bring in, not the other way round.
        try:
            behind_by = self.github.behind_by(
                pull.head_repo.owner_login,
                pull.head_repo.name,
                compare_base=pull.head.label,
                compare_head=pull.base.label,
            )
        except TRANSPORT_ERRORS as e:
            return GuardOutcome.skip(
                f"Caught error trying to compare base with head: {error_message(e)}",
                logging.ERROR,
            )

        if behind_by == 0:
            return GuardOutcome.skip("Skipping pull request, up-to-date with base branch.")
        return GuardOutcome.ok()

    async def _check_excluded_labels(self, pull: PullRequestSummary) -> GuardOutcome:
        excluded = set(self.config.excluded_labels)
        matches = sorted(excluded & pull.labels)
        if matches:
            return GuardOutcome.skip(
                f"Pull request has excluded label '{matches[0]}', skipping update."
            )
        return GuardOutcome.ok()

    async def _check_ready_state(self, pull: PullRequestSummary) -> GuardOutcome:
        ready_state = self.config.ready_state

        if ready_state == ReadyState.DRAFT and not pull.draft:
            return GuardOutcome.skip(
                "PR_READY_STATE=draft and pull request is not draft, skipping update."
            )
        if ready_state == ReadyState.READY_FOR_REVIEW and pull.draft:
            return GuardOutcome.skip(
                "PR_READY_STATE=ready_for_review and pull request is draft, skipping update."
            )
        return GuardOutcome.ok()

    async def _check_pr_filter(self, pull: PullRequestSummary) -> GuardOutcome:
        pr_filter = self.config.pr_filter
        self.logger.debug(f"PR_FILTER={pr_filter.value}, checking PR #{pull.number}")

        if pr_filter == PRFilter.LABELLED:
            return self._check_labelled(pull)
        if pr_filter == PRFilter.PROTECTED:
            return self._check_protected(pull)
        if pr_filter == PRFilter.AUTO_MERGE:
            if not pull.has_auto_merge:
                return GuardOutcome.skip(
                    "Pull request does not have auto_merge enabled, skipping update."
                )
            return GuardOutcome.ok("Pull request has auto_merge enabled and is behind base branch.")
        return GuardOutcome.ok()

    def _check_labelled(self, pull: PullRequestSummary) -> GuardOutcome:
        allowed = set(self.config.pr_labels)
        if not allowed:
            return GuardOutcome.skip(
                "Skipping pull request, no labels were defined (env var PR_LABELS is empty or not defined).",
                logging.WARNING,
            )
        if not pull.labels:
            return GuardOutcome.skip("Skipping pull request, it has no labels.")

        matches = sorted(allowed & pull.labels)
        if not matches:
            return GuardOutcome.skip(
                "Pull request does not match any of the defined labels, skipping update."
            )
        return GuardOutcome.ok(
            f"Pull request has label '{matches[0]}' and PR branch is behind base branch."
        )

    def _check_protected(self, pull: PullRequestSummary) -> GuardOutcome:
        try:
            protected = self.github.is_branch_protected(
                pull.head_repo.owner_login,
                pull.head_repo.name,
                pull.base.ref,
            )
        except TRANSPORT_ERRORS as e:
            return GuardOutcome.skip(
                f"Caught error checking branch protection for '{pull.base.ref}': {error_message(e)}",
                logging.ERROR,
            )

        if not protected:
            return GuardOutcome.skip("Pull request is not against a protected branch, skipping update.")
        return GuardOutcome.ok("Pull request is against a protected branch and is behind base branch.")
