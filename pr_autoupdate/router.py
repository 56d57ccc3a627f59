"""Routing of GitHub Actions events to branch update handlers."""

import json
from pathlib import Path
from typing import Any, Dict, Union

from .config import UpdaterConfig
from .errors import UnsupportedEventError
from .orchestrator import UpdateOrchestrator, summary_from_rest
from .utils import get_logger

SUPPORTED_EVENTS = (
    "push",
    "pull_request",
    "pull_request_target",
    "workflow_run",
    "workflow_dispatch",
    "schedule",
)


def load_event(path: Union[str, Path]) -> Dict[str, Any]:
    """Load the event payload written by the runner (``GITHUB_EVENT_PATH``)."""
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


class EventRouter:
    """
    Dispatches a triggering event to the matching handler.

    Push-like events (push, workflow_run, workflow_dispatch, schedule)
    update every open pull request against the pushed branch; pull request
    events update just that pull request.
    """

    def __init__(
        self,
        orchestrator: UpdateOrchestrator,
        config: UpdaterConfig,
        event: Dict[str, Any]
    ):
        self.orchestrator = orchestrator
        self.config = config
        self.event = event
        self.logger = get_logger()

    async def route(self, event_name: str) -> Union[int, bool]:
        """
        Route an event to its handler.

        Returns:
            Updated count for push-like events, or whether the pull
            request was updated for pull request events

        Raises:
            UnsupportedEventError: For any other event type
        """
        if event_name in ("pull_request", "pull_request_target"):
            return await self.handle_pull_request()
        if event_name == "push":
            return await self.handle_push()
        if event_name == "workflow_run":
            return await self.handle_workflow_run()
        if event_name == "workflow_dispatch":
            return await self.handle_workflow_dispatch()
        if event_name == "schedule":
            return await self.handle_schedule()

        supported = ", ".join(f"'{name}'" for name in SUPPORTED_EVENTS)
        raise UnsupportedEventError(
            f"Unknown event type '{event_name}', only {supported} are supported."
        )

    async def handle_push(self) -> int:
        ref = self.event.get("ref", "")
        self.logger.info(f"Handling push event on ref '{ref}'")
        return await self._update_repository_pulls(ref)

    async def handle_pull_request(self) -> bool:
        action = self.event.get("action")
        payload = self.event["pull_request"]
        self.logger.info(f"Handling pull_request event triggered by action '{action}'")

        pull = summary_from_rest(payload)
        if pull.head_repo is None:
            self.logger.warning("Pull request head repository is null, skipping update")
            return False

        is_updated = await self.orchestrator.update(pull.head_repo.owner_login, pull)
        if is_updated:
            self.logger.info(
                "Auto update complete, pull request branch was updated with changes from the base branch."
            )
        else:
            self.logger.info("Auto update complete, no changes were made.")
        return is_updated

    async def handle_workflow_run(self) -> int:
        workflow_run = self.event["workflow_run"]
        branch = workflow_run.get("head_branch")
        trigger = workflow_run.get("event")

        if trigger not in ("push", "pull_request"):
            self.logger.error(
                f"workflow_run events triggered via {trigger} workflows are not supported."
            )
            return 0

        if not branch:
            self.logger.warning("Event was not on a branch, skipping.")
            return 0

        self.logger.info(f"Handling workflow_run event triggered by '{trigger}' on '{branch}'")

        # pull_request-triggered runs are handled like pushes since the
        # branch may be the base of several pull requests.
        return await self._update_repository_pulls(f"refs/heads/{branch}")

    async def handle_workflow_dispatch(self) -> int:
        ref = self.event.get("ref", "")
        self.logger.info(f"Handling workflow_dispatch event on ref '{ref}'")
        return await self._update_repository_pulls(ref)

    async def handle_schedule(self) -> int:
        ref = self.config.github_ref
        owner_and_repo = self.config.github_repository

        parts = owner_and_repo.split("/")
        if len(parts) != 2:
            self.logger.error(f"Cannot parse GITHUB_REPOSITORY value {owner_and_repo}")
            return 0

        repo_owner, repo_name = parts
        self.logger.info(f"Handling schedule event on '{ref}'")
        return await self.orchestrator.update_pulls(ref, repo_name, repo_owner)

    async def _update_repository_pulls(self, ref: str) -> int:
        repository = self.event.get("repository") or {}
        owner = repository.get("owner") or {}
        return await self.orchestrator.update_pulls(
            ref,
            repository.get("name", ""),
            owner.get("login", ""),
            owner.get("name"),
        )
