"""Main orchestrator: enumerate, decide and update pull request branches."""

from typing import List, Optional

from ..config import UpdaterConfig
from ..errors import MergeFailedError
from ..models import MergeRequest, MergeResult, PullRequestSummary
from ..tools import GitHubTool
from ..utils import get_logger, log_group
from .decision import UpdateDecisionEngine
from .enumerator import (
    GraphPullRequestEnumerator,
    PagedPullRequestEnumerator,
    PullRequestEnumerator,
    branch_from_ref,
)
from .merge import BranchMerger, SetOutputFn


class UpdateOrchestrator:
    """
    Keeps pull request branches up to date with their base branch.

    Pull requests are processed one at a time, in listing order. A fatal
    merge failure on one pull request marks the run as failed but does not
    stop the remaining ones.
    """

    def __init__(
        self,
        config: UpdaterConfig,
        github: Optional[GitHubTool] = None,
        set_output: Optional[SetOutputFn] = None,
        decision_engine: Optional[UpdateDecisionEngine] = None,
        merger: Optional[BranchMerger] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Run configuration
            github: GitHub API wrapper (built from the config token if omitted)
            set_output: Callable receiving (name, value) for action outputs
            decision_engine: Eligibility checks (default built from config)
            merger: Branch merger (default built from config)
        """
        self.config = config
        self.logger = get_logger()
        self.github = github or GitHubTool(config.github_token, api_url=config.api_url)
        self.decision_engine = decision_engine or UpdateDecisionEngine(self.github, config)
        self.merger = merger or BranchMerger(self.github, config, set_output=set_output)

        self.failures: List[MergeFailedError] = []
        self.results: List[MergeResult] = []

    @property
    def failed(self) -> bool:
        """Whether any update ended in a fatal state during this run."""
        return bool(self.failures)

    def enumerator(self) -> PullRequestEnumerator:
        """Pull request source selected by USE_GRAPHQL_API."""
        if self.config.use_graphql:
            return GraphPullRequestEnumerator(self.github)
        return PagedPullRequestEnumerator(self.github)

    async def update_pulls(
        self,
        ref: str,
        repo_name: str,
        repo_owner_login: str,
        repo_owner_name: Optional[str] = None
    ) -> int:
        """
        Update every open pull request targeting the branch ``ref``.

        Args:
            ref: Full ref of the base branch (``refs/heads/<branch>``)
            repo_name: Repository name
            repo_owner_login: Repository owner login
            repo_owner_name: Owner display name, preferred when set

        Returns:
            Number of pull request branches updated
        """
        owner = repo_owner_name or repo_owner_login
        updated = 0

        async for pull in self.enumerator().enumerate(ref, repo_name, owner):
            with log_group(f"PR-{pull.number}"):
                is_updated = await self.update(owner, pull)
            if is_updated:
                updated += 1

        base_branch = branch_from_ref(ref)
        if base_branch is not None:
            self.logger.info(
                f"Auto update complete, {updated} pull request(s) that point to base branch "
                f"'{base_branch}' were updated."
            )
        return updated

    async def update(self, source_event_owner: str, pull: PullRequestSummary) -> bool:
        """
        Update a single pull request's branch if it needs it.

        Args:
            source_event_owner: Owner of the repository the event came from
            pull: Pull request to update

        Returns:
            True if the branch was updated (or would have been, on a dry run)
        """
        self.logger.info(f"Evaluating pull request #{pull.number}...")

        if not await self.decision_engine.needs_update(pull):
            return False

        self.logger.info(
            f"Updating branch '{pull.head.ref}' on pull request #{pull.number} "
            f"with changes from ref '{pull.base.ref}'."
        )

        request = MergeRequest.for_pull_request(pull, self.config.merge_msg)

        try:
            result = await self.merger.merge(source_event_owner, pull.number, request)
        except MergeFailedError as e:
            self.logger.error(
                f"Caught error running merge for PR #{pull.number}, "
                f"skipping and continuing with remaining PRs: {e}"
            )
            self.failures.append(e)
            return False

        self.results.append(result)
        return result.success
