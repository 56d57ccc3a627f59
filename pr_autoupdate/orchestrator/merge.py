"""Branch updates: merging a pull request's base branch into its head."""

import asyncio
from typing import Any, Awaitable, Callable, Optional

from ..config import UpdaterConfig
from ..errors import MergeFailedError
from ..models import MergeConflictAction, MergeRequest, MergeResult, MergeState
from ..tools import CONFLICTED, GitHubTool, TRANSPORT_ERRORS, error_message, error_status
from ..utils import get_logger

MERGE_CONFLICT_MESSAGE = "Merge conflict"

SetOutputFn = Callable[[str, Any], None]
SleepFn = Callable[[float], Awaitable[None]]


class BranchMerger:
    """
    Performs one branch update, retrying transient failures.

    Every call walks a small state machine::

        ATTEMPTING -> SUCCEEDED
                   -> AUTH_DENIED            (403 on a fork we don't own)
                   -> CONFLICT_SKIPPED       (conflict, action=ignore)
                   -> CONFLICT_FATAL         (conflict, action=fail)
                   -> RETRY_EXHAUSTED_FATAL  (other errors, out of retries)

    The ``conflicted`` output is written once, when a terminal state is
    reached. The two fatal states raise ``MergeFailedError``.
    """

    def __init__(
        self,
        github: GitHubTool,
        config: UpdaterConfig,
        set_output: Optional[SetOutputFn] = None,
        sleep: SleepFn = asyncio.sleep
    ):
        """
        Initialize branch merger.

        Args:
            github: GitHub API wrapper
            config: Run configuration (dry run, retries, conflict action)
            set_output: Callable receiving (name, value) for action outputs
            sleep: Coroutine used for the delay between retries
        """
        self.github = github
        self.config = config
        self.set_output = set_output or (lambda name, value: None)
        self._sleep = sleep
        self.logger = get_logger()

    async def merge(
        self,
        source_event_owner: str,
        pr_number: int,
        request: MergeRequest,
        retry_count: Optional[int] = None,
        retry_sleep_ms: Optional[int] = None,
        conflict_action: Optional[MergeConflictAction] = None
    ) -> MergeResult:
        """
        Merge ``request.head`` into ``request.base``.

        Args:
            source_event_owner: Owner of the repository the event came from
            pr_number: Pull request being updated (for logs and errors)
            request: What to merge, and where
            retry_count: Override of RETRY_COUNT
            retry_sleep_ms: Override of RETRY_SLEEP
            conflict_action: Override of MERGE_CONFLICT_ACTION

        Returns:
            MergeResult for the non-fatal terminal states

        Raises:
            MergeFailedError: On CONFLICT_FATAL or RETRY_EXHAUSTED_FATAL
        """
        if self.config.dry_run:
            self.logger.warning(
                f"Would have merged ref '{request.head}' into ref '{request.base}' "
                f"for PR #{pr_number} but DRY_RUN was enabled."
            )
            return MergeResult(pr_number=pr_number, state=MergeState.SUCCEEDED, dry_run=True)

        if retry_count is None:
            retry_count = self.config.retry_count
        if retry_sleep_ms is None:
            retry_sleep_ms = self.config.retry_sleep_ms
        if conflict_action is None:
            conflict_action = self.config.merge_conflict_action

        state = MergeState.ATTEMPTING
        attempts = 0
        retries = 0
        commit_sha = None
        last_error: Optional[Exception] = None

        while state is MergeState.ATTEMPTING:
            attempts += 1
            self.logger.info(f"Attempting branch update for PR #{pr_number}...")

            try:
                commit_sha = self.github.merge(
                    request.owner,
                    request.repo,
                    request.base,
                    request.head,
                    commit_message=request.commit_message,
                )
            except TRANSPORT_ERRORS as e:
                last_error = e
                state = self._classify(e, source_event_owner, request, pr_number, conflict_action)
                if state is not MergeState.ATTEMPTING:
                    break

                if retries < retry_count:
                    self.logger.info(
                        f"Branch update for PR #{pr_number} failed, will retry in {retry_sleep_ms}ms, "
                        f"retry #{retries} of {retry_count}."
                    )
                    retries += 1
                    await self._sleep(retry_sleep_ms / 1000)
                else:
                    state = MergeState.RETRY_EXHAUSTED_FATAL
                continue

            state = MergeState.SUCCEEDED
            if commit_sha:
                self.logger.info(f"Branch update successful, new branch HEAD: {commit_sha}.")
            else:
                self.logger.info("Branch update not required, branch is already up-to-date.")

        return self._finish(state, pr_number, attempts, commit_sha, last_error)

    def _classify(
        self,
        error: Exception,
        source_event_owner: str,
        request: MergeRequest,
        pr_number: int,
        conflict_action: MergeConflictAction
    ) -> MergeState:
        """Map a failed attempt to the next state (ATTEMPTING means retryable)."""
        status = error_status(error)
        message = error_message(error)

        if status == 403 and source_event_owner != request.owner:
            self.logger.error(
                f"Could not update pull request #{pr_number} due to an authorisation error. "
                "This is probably because this pull request is from a fork and the current token "
                f"does not have write access to the forked repository. Error was: {message}"
            )
            return MergeState.AUTH_DENIED

        if status == 409 or message == MERGE_CONFLICT_MESSAGE:
            if conflict_action == MergeConflictAction.IGNORE:
                self.logger.info(f"Merge conflict detected on PR #{pr_number}, skipping update.")
                return MergeState.CONFLICT_SKIPPED
            self.logger.error(f"Merge conflict error trying to update branch of PR #{pr_number}")
            return MergeState.CONFLICT_FATAL

        self.logger.error(f"Caught error trying to update branch of PR #{pr_number}: {message}")
        return MergeState.ATTEMPTING

    def _finish(
        self,
        state: MergeState,
        pr_number: int,
        attempts: int,
        commit_sha: Optional[str],
        last_error: Optional[Exception]
    ) -> MergeResult:
        conflicted = state in (MergeState.CONFLICT_SKIPPED, MergeState.CONFLICT_FATAL)
        self.set_output(CONFLICTED, conflicted)

        if state.is_fatal:
            if state is MergeState.RETRY_EXHAUSTED_FATAL:
                self.logger.error(
                    f"Branch update for PR #{pr_number} failed after {attempts} attempt(s), giving up."
                )
            raise MergeFailedError(pr_number, state, last_error)

        return MergeResult(
            pr_number=pr_number,
            state=state,
            attempts=attempts,
            conflicted=conflicted,
            commit_sha=commit_sha,
            error=error_message(last_error) if state is not MergeState.SUCCEEDED else None,
        )
