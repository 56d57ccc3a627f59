"""Configuration for pr-autoupdate."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Tuple
import os

from .errors import ConfigError
from .models import MergeConflictAction


class PRFilter(Enum):
    """Which extra criterion a pull request must meet to be updated."""
    ALL = "all"
    LABELLED = "labelled"      # has one of PR_LABELS
    PROTECTED = "protected"    # base branch is protected
    AUTO_MERGE = "auto_merge"  # auto-merge is enabled


class ReadyState(Enum):
    """Draft / ready-for-review filter."""
    ALL = "all"
    DRAFT = "draft"
    READY_FOR_REVIEW = "ready_for_review"


DEFAULT_API_URL = "https://api.github.com"


@dataclass(frozen=True)
class UpdaterConfig:
    """Configuration for one run. Built once and shared read-only."""

    # GitHub settings
    github_token: str = ""
    api_url: str = DEFAULT_API_URL
    github_ref: str = ""
    github_repository: str = ""   # owner/repo, used by scheduled runs
    output_path: Optional[str] = None

    # Update behavior
    dry_run: bool = False
    retry_count: int = 5
    retry_sleep_ms: int = 300
    merge_msg: Optional[str] = None
    merge_conflict_action: MergeConflictAction = MergeConflictAction.FAIL

    # Filtering
    excluded_labels: Tuple[str, ...] = field(default_factory=tuple)
    ready_state: ReadyState = ReadyState.ALL
    pr_filter: PRFilter = PRFilter.ALL
    pr_labels: Tuple[str, ...] = field(default_factory=tuple)

    # Enumerate with the GraphQL API instead of the REST pulls listing
    use_graphql: bool = False

    def __post_init__(self):
        if self.retry_count < 0:
            raise ConfigError(f"RETRY_COUNT must be >= 0, got {self.retry_count}")
        if self.retry_sleep_ms < 0:
            raise ConfigError(f"RETRY_SLEEP must be >= 0, got {self.retry_sleep_ms}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "UpdaterConfig":
        """
        Create config from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Raises:
            ConfigError: If the token is missing or a value is invalid
        """
        env = os.environ if environ is None else environ

        token = env.get("GITHUB_TOKEN", "")
        if not token:
            raise ConfigError("GitHub token required. Set the GITHUB_TOKEN env var.")

        return cls(
            github_token=token,
            api_url=env.get("GITHUB_API_URL") or DEFAULT_API_URL,
            github_ref=env.get("GITHUB_REF", ""),
            github_repository=env.get("GITHUB_REPOSITORY", ""),
            output_path=env.get("GITHUB_OUTPUT") or None,
            dry_run=_parse_bool(env.get("DRY_RUN", "false")),
            retry_count=_parse_int("RETRY_COUNT", env.get("RETRY_COUNT") or "5"),
            retry_sleep_ms=_parse_int("RETRY_SLEEP", env.get("RETRY_SLEEP") or "300"),
            merge_msg=env.get("MERGE_MSG") or None,
            merge_conflict_action=_parse_enum(
                MergeConflictAction, "MERGE_CONFLICT_ACTION", env.get("MERGE_CONFLICT_ACTION") or "fail"
            ),
            excluded_labels=_parse_list(env.get("EXCLUDED_LABELS", "")),
            ready_state=_parse_enum(ReadyState, "PR_READY_STATE", env.get("PR_READY_STATE") or "all"),
            pr_filter=_parse_enum(PRFilter, "PR_FILTER", env.get("PR_FILTER") or "all"),
            pr_labels=_parse_list(env.get("PR_LABELS", "")),
            use_graphql=_parse_bool(env.get("USE_GRAPHQL_API", "false")),
        )


def _parse_bool(value: str) -> bool:
    return value.strip().lower() == "true"


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None


def _parse_list(value: str) -> Tuple[str, ...]:
    """Split a comma separated env value, dropping blanks."""
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _parse_enum(enum_cls, name: str, value: str):
    value = (value or "").strip().lower()
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigError(f"{name} must be one of: {allowed} (got {value!r})") from None


# Default configuration
DEFAULT_CONFIG = UpdaterConfig()
