"""Tests for configuration loading."""

import pytest

from pr_autoupdate.config import PRFilter, ReadyState, UpdaterConfig
from pr_autoupdate.errors import ConfigError
from pr_autoupdate.models import MergeConflictAction


class TestUpdaterConfigFromEnv:
    """Tests for UpdaterConfig.from_env."""

    def test_defaults(self):
        """Given only a token, should fall back to the documented defaults."""
        # When
        config = UpdaterConfig.from_env({"GITHUB_TOKEN": "t0k3n"})

        # Then
        assert config.github_token == "t0k3n"
        assert config.dry_run is False
        assert config.retry_count == 5
        assert config.retry_sleep_ms == 300
        assert config.merge_msg is None
        assert config.merge_conflict_action == MergeConflictAction.FAIL
        assert config.pr_filter == PRFilter.ALL
        assert config.ready_state == ReadyState.ALL
        assert config.excluded_labels == ()
        assert config.use_graphql is False
        assert config.api_url == "https://api.github.com"

    def test_all_values(self):
        """Given every variable, should parse each into its typed field."""
        # Given
        env = {
            "GITHUB_TOKEN": "t0k3n",
            "DRY_RUN": "TRUE",
            "RETRY_COUNT": "2",
            "RETRY_SLEEP": "1000",
            "MERGE_MSG": "Sync with base",
            "MERGE_CONFLICT_ACTION": "ignore",
            "EXCLUDED_LABELS": "wip, do not merge ,",
            "PR_READY_STATE": "ready_for_review",
            "PR_FILTER": "labelled",
            "PR_LABELS": "deploy,hotfix",
            "USE_GRAPHQL_API": "true",
            "GITHUB_REF": "refs/heads/main",
            "GITHUB_REPOSITORY": "octo/widgets",
            "GITHUB_OUTPUT": "/tmp/out",
        }

        # When
        config = UpdaterConfig.from_env(env)

        # Then
        assert config.dry_run is True
        assert config.retry_count == 2
        assert config.retry_sleep_ms == 1000
        assert config.merge_msg == "Sync with base"
        assert config.merge_conflict_action == MergeConflictAction.IGNORE
        assert config.excluded_labels == ("wip", "do not merge")
        assert config.ready_state == ReadyState.READY_FOR_REVIEW
        assert config.pr_filter == PRFilter.LABELLED
        assert config.pr_labels == ("deploy", "hotfix")
        assert config.use_graphql is True
        assert config.github_repository == "octo/widgets"
        assert config.output_path == "/tmp/out"

    def test_empty_values_use_defaults(self):
        config = UpdaterConfig.from_env({"GITHUB_TOKEN": "t", "PR_FILTER": "", "RETRY_COUNT": ""})

        assert config.pr_filter == PRFilter.ALL
        assert config.retry_count == 5

    def test_missing_token_raises(self):
        with pytest.raises(ConfigError, match="GITHUB_TOKEN"):
            UpdaterConfig.from_env({})

    def test_unknown_filter_raises(self):
        with pytest.raises(ConfigError, match="PR_FILTER must be one of"):
            UpdaterConfig.from_env({"GITHUB_TOKEN": "t", "PR_FILTER": "everything"})

    def test_non_integer_retry_count_raises(self):
        with pytest.raises(ConfigError, match="RETRY_COUNT must be an integer"):
            UpdaterConfig.from_env({"GITHUB_TOKEN": "t", "RETRY_COUNT": "lots"})

    def test_negative_retry_sleep_raises(self):
        with pytest.raises(ConfigError, match="RETRY_SLEEP must be >= 0"):
            UpdaterConfig.from_env({"GITHUB_TOKEN": "t", "RETRY_SLEEP": "-1"})

    def test_config_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            UpdaterConfig(retry_count=-1)
