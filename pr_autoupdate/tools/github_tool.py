"""GitHub API wrapper for branch update operations."""

from typing import Any, Dict, Iterator, Optional

import requests
from github import Auth, Github, GithubException
from github.Repository import Repository

from ..config import DEFAULT_API_URL

PAGE_SIZE = 100

# Errors raised by the transport: API responses and connection failures
TRANSPORT_ERRORS = (GithubException, requests.RequestException)


class GitHubTool:
    """
    Thin PyGithub wrapper used by the enumerators, decision engine and merger.

    Handles:
    - Listing open pull requests (REST, paginated)
    - Running the pull request GraphQL query
    - Comparing branches and reading branch protection
    - Merging one branch into another

    Errors are PyGithub's ``GithubException`` and are left to the caller
    to classify.
    """

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        gh: Optional[Github] = None
    ):
        """
        Initialize GitHub tool.

        Args:
            token: GitHub token
            api_url: REST API base URL (GitHub Enterprise Server support)
            gh: Pre-built client, mainly for tests
        """
        if gh is None and not token:
            raise ValueError("GitHub token required. Set GITHUB_TOKEN env var or pass token parameter.")

        self.gh = gh or Github(auth=Auth.Token(token), base_url=api_url, per_page=PAGE_SIZE)
        self._repos: Dict[str, Repository] = {}

    def repo(self, owner: str, name: str) -> Repository:
        """Get a repository object (cached, no request until first use)."""
        full_name = f"{owner}/{name}"
        if full_name not in self._repos:
            self._repos[full_name] = self.gh.get_repo(full_name, lazy=True)
        return self._repos[full_name]

    def iter_open_pulls(self, owner: str, name: str, base: str) -> Iterator[Dict[str, Any]]:
        """
        Iterate open pull requests against ``base``, most recently updated first.

        Pages are fetched lazily as the iterator advances, one request per
        page. Items are the listing's own JSON; no per-PR request is made.
        """
        url = f"/repos/{owner}/{name}/pulls"
        parameters = {
            "state": "open",
            "base": base,
            "sort": "updated",
            "direction": "desc",
            "per_page": PAGE_SIZE,
        }
        page = 1
        while True:
            _, pulls = self.gh.requester.requestJsonAndCheck(
                "GET", url, parameters={**parameters, "page": page}
            )
            yield from pulls
            if len(pulls) < PAGE_SIZE:
                return
            page += 1

    def graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run a GraphQL query and return its ``data`` object.

        Raises:
            GithubException: On HTTP errors or GraphQL errors in the response
        """
        _, response = self.gh.requester.graphql_query(query, variables)
        return response.get("data") or {}

    def behind_by(self, owner: str, name: str, compare_base: str, compare_head: str) -> int:
        """
        ``behind_by`` count of ``compare/{compare_base}...{compare_head}``.

        That is how many commits ``compare_base`` has that ``compare_head``
        lacks. Both sides may be ``owner:ref`` labels.
        """
        comparison = self.repo(owner, name).compare(compare_base, compare_head)
        return comparison.behind_by

    def is_branch_protected(self, owner: str, name: str, branch: str) -> bool:
        """Check whether a branch has protection rules enabled."""
        return bool(self.repo(owner, name).get_branch(branch).protected)

    def merge(
        self,
        owner: str,
        name: str,
        base: str,
        head: str,
        commit_message: Optional[str] = None
    ) -> Optional[str]:
        """
        Merge ``head`` into ``base``.

        Returns:
            SHA of the new merge commit, or None when ``base`` already
            contains ``head`` (HTTP 204)
        """
        repo = self.repo(owner, name)
        if commit_message:
            commit = repo.merge(base, head, commit_message=commit_message)
        else:
            commit = repo.merge(base, head)
        return commit.sha if commit is not None else None


def error_status(error: Exception) -> Optional[int]:
    """HTTP status of a transport error, if it has one."""
    if isinstance(error, GithubException):
        return error.status
    return getattr(error, "status", None)


def error_message(error: Exception) -> str:
    """Best-effort human readable message for a transport error."""
    if isinstance(error, GithubException):
        data = error.data
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
    return str(error)
