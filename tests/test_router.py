"""Tests for event routing and the run entry point."""

import argparse
import asyncio
import json
from unittest.mock import AsyncMock, Mock

import pytest

from pr_autoupdate.config import UpdaterConfig
from pr_autoupdate.errors import UnsupportedEventError
from pr_autoupdate.main import cmd_run, run_autoupdate
from pr_autoupdate.orchestrator import UpdateOrchestrator
from pr_autoupdate.router import EventRouter, load_event

from conftest import rest_pull

REPOSITORY = {"name": "widgets", "owner": {"login": "octo", "name": None}}


@pytest.fixture
def orchestrator():
    mock = Mock(spec=UpdateOrchestrator)
    mock.update_pulls = AsyncMock(return_value=4)
    mock.update = AsyncMock(return_value=True)
    mock.failed = False
    mock.failures = []
    return mock


def route(orchestrator, event_name, event, **config_kwargs):
    router = EventRouter(orchestrator, UpdaterConfig(**config_kwargs), event)
    return asyncio.run(router.route(event_name))


class TestPushLikeEvents:
    """push, workflow_dispatch, workflow_run and schedule update every PR on a branch."""

    def test_push(self, orchestrator):
        result = route(orchestrator, "push", {"ref": "refs/heads/main", "repository": REPOSITORY})

        assert result == 4
        orchestrator.update_pulls.assert_awaited_once_with("refs/heads/main", "widgets", "octo", None)

    def test_workflow_dispatch(self, orchestrator):
        event = {"ref": "refs/heads/develop", "repository": REPOSITORY}

        route(orchestrator, "workflow_dispatch", event)

        orchestrator.update_pulls.assert_awaited_once_with("refs/heads/develop", "widgets", "octo", None)

    def test_workflow_run_from_push(self, orchestrator):
        """Given a workflow_run triggered by push, should update PRs on its head branch."""
        # Given
        event = {"workflow_run": {"head_branch": "main", "event": "push"}, "repository": REPOSITORY}

        # When
        route(orchestrator, "workflow_run", event)

        # Then
        orchestrator.update_pulls.assert_awaited_once_with("refs/heads/main", "widgets", "octo", None)

    def test_workflow_run_from_unsupported_trigger(self, orchestrator):
        event = {"workflow_run": {"head_branch": "main", "event": "schedule"}, "repository": REPOSITORY}

        assert route(orchestrator, "workflow_run", event) == 0
        orchestrator.update_pulls.assert_not_awaited()

    def test_workflow_run_without_branch(self, orchestrator):
        event = {"workflow_run": {"head_branch": None, "event": "push"}, "repository": REPOSITORY}

        assert route(orchestrator, "workflow_run", event) == 0
        orchestrator.update_pulls.assert_not_awaited()

    def test_schedule_uses_environment_repository(self, orchestrator):
        """Given a schedule event, should use GITHUB_REF and GITHUB_REPOSITORY."""
        # When
        route(
            orchestrator, "schedule", {},
            github_ref="refs/heads/main", github_repository="octo/widgets",
        )

        # Then
        orchestrator.update_pulls.assert_awaited_once_with("refs/heads/main", "widgets", "octo")

    def test_schedule_with_malformed_repository(self, orchestrator):
        result = route(orchestrator, "schedule", {}, github_ref="refs/heads/main", github_repository="widgets")

        assert result == 0
        orchestrator.update_pulls.assert_not_awaited()


class TestPullRequestEvents:
    """pull_request and pull_request_target update just that PR."""

    @pytest.mark.parametrize("event_name", ["pull_request", "pull_request_target"])
    def test_updates_the_event_pull_request(self, orchestrator, event_name):
        # Given
        event = {"action": "synchronize", "pull_request": rest_pull(12, head_owner="forker")}

        # When
        result = route(orchestrator, event_name, event)

        # Then
        assert result is True
        owner, pull = orchestrator.update.await_args.args
        assert owner == "forker"
        assert pull.number == 12

    def test_missing_head_repository_is_skipped(self, orchestrator):
        event = {"action": "opened", "pull_request": rest_pull(12, head_repo=False)}

        assert route(orchestrator, "pull_request", event) is False
        orchestrator.update.assert_not_awaited()


class TestUnknownEvents:

    def test_unknown_event_raises(self, orchestrator):
        with pytest.raises(UnsupportedEventError, match="Unknown event type 'issues'"):
            route(orchestrator, "issues", {})


class TestRunAutoupdate:
    """Tests for the top-level run used by the CLI."""

    def test_reports_updated_count_and_failures(self, orchestrator):
        # Given
        orchestrator.failed = True
        orchestrator.failures = ["Branch update for PR #3 failed"]
        event = {"ref": "refs/heads/main", "repository": REPOSITORY}

        # When
        stats = asyncio.run(run_autoupdate(UpdaterConfig(), "push", event, orchestrator=orchestrator))

        # Then
        assert stats["updated"] == 4
        assert stats["failed"] is True
        assert len(stats["failures"]) == 1

    def test_pull_request_result_counts_as_one(self, orchestrator):
        event = {"action": "opened", "pull_request": rest_pull(1)}

        stats = asyncio.run(run_autoupdate(UpdaterConfig(), "pull_request", event, orchestrator=orchestrator))

        assert stats["updated"] == 1

    def test_load_event(self, tmp_path):
        path = tmp_path / "event.json"
        path.write_text(json.dumps({"ref": "refs/heads/main"}))

        assert load_event(path) == {"ref": "refs/heads/main"}


class TestCmdRun:
    """Tests for the `run` subcommand's input handling."""

    def run_args(self, event_path):
        return argparse.Namespace(
            event_name="push", event_path=str(event_path), dry_run=False, graphql=False, debug=False,
        )

    def test_missing_event_file_exits_with_error(self, tmp_path, monkeypatch, caplog):
        """Given a payload path that doesn't exist, should log and exit 1."""
        # Given
        monkeypatch.setenv("GITHUB_TOKEN", "t0k3n")

        # When
        with pytest.raises(SystemExit) as exit_info:
            cmd_run(self.run_args(tmp_path / "missing.json"))

        # Then
        assert exit_info.value.code == 1
        assert "Could not read event payload" in caplog.text

    def test_malformed_event_json_exits_with_error(self, tmp_path, monkeypatch, caplog):
        monkeypatch.setenv("GITHUB_TOKEN", "t0k3n")
        path = tmp_path / "event.json"
        path.write_text("{not json")

        with pytest.raises(SystemExit) as exit_info:
            cmd_run(self.run_args(path))

        assert exit_info.value.code == 1
        assert "Could not read event payload" in caplog.text
