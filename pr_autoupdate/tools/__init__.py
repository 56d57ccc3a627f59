"""Tools for pr-autoupdate."""

from .github_tool import GitHubTool, TRANSPORT_ERRORS, error_message, error_status
from .output_tool import ActionOutput, CONFLICTED

__all__ = [
    "GitHubTool",
    "TRANSPORT_ERRORS",
    "error_message",
    "error_status",
    "ActionOutput",
    "CONFLICTED",
]
