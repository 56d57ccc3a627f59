"""Enumeration of open pull requests against a base branch.

Two interchangeable sources feed the same ``PullRequestSummary``:
- PagedPullRequestEnumerator: the REST pulls listing
- GraphPullRequestEnumerator: a cursor-paginated GraphQL query
"""

from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Dict, Optional

from github import RateLimitExceededException

from ..models import BranchRef, HeadRepository, PullRequestSummary
from ..tools import GitHubTool, TRANSPORT_ERRORS, error_message, error_status
from ..utils import get_logger

BRANCH_REF_PREFIX = "refs/heads/"

PULL_REQUESTS_QUERY = """
query($owner: String!, $repo: String!, $base: String!, $cursor: String) {
  repository(owner: $owner, name: $repo) {
    pullRequests(
      baseRefName: $base
      states: [OPEN]
      first: 100
      after: $cursor
      orderBy: {field: UPDATED_AT, direction: DESC}
    ) {
      pageInfo {
        hasNextPage
        endCursor
      }
      nodes {
        number
        state
        merged
        mergeable
        isDraft
        labels(first: 10) {
          nodes {
            name
          }
        }
        baseRef {
          name
          target {
            ... on Commit {
              oid
            }
          }
        }
        headRef {
          name
          target {
            ... on Commit {
              oid
            }
          }
        }
        headRepository {
          name
          owner {
            login
          }
        }
      }
    }
  }
}
"""


def summary_from_rest(pull: Dict[str, Any]) -> PullRequestSummary:
    """
    Convert REST pull request JSON into a summary.

    Used both for the pulls listing and for ``pull_request`` event
    payloads, which share the same shape.
    """
    head = pull["head"]
    base = pull["base"]

    head_repo = None
    if head.get("repo"):
        head_repo = HeadRepository(
            name=head["repo"]["name"],
            owner_login=head["repo"]["owner"]["login"],
        )

    labels = frozenset(
        label["name"] for label in pull.get("labels") or [] if label.get("name")
    )

    return PullRequestSummary(
        number=pull["number"],
        state=pull["state"],
        merged=bool(pull.get("merged")) or pull.get("merged_at") is not None,
        draft=bool(pull.get("draft")),
        base=BranchRef(ref=base["ref"], label=base["label"], sha=base.get("sha", "")),
        head=BranchRef(ref=head["ref"], label=head["label"], sha=head.get("sha", "")),
        head_repo=head_repo,
        labels=labels,
        auto_merge=pull.get("auto_merge"),
    )


def summary_from_graph(node: Dict[str, Any], owner: str) -> Optional[PullRequestSummary]:
    """
    Convert a GraphQL ``PullRequest`` node into a summary.

    Returns None when ``headRef`` is null (the head branch or its fork is
    gone); such pull requests can't be updated.
    """
    head_ref = node.get("headRef")
    if not head_ref:
        get_logger().warning(
            f"PR #{node['number']} has null headRef (fork may have been deleted), skipping"
        )
        return None

    base_ref = node["baseRef"]
    head_repository = node.get("headRepository")

    head_repo = None
    head_label = head_ref["name"]
    if head_repository:
        head_repo = HeadRepository(
            name=head_repository["name"],
            owner_login=head_repository["owner"]["login"],
        )
        head_label = f"{head_repo.owner_login}:{head_ref['name']}"

    labels = frozenset(
        label["name"] for label in (node.get("labels") or {}).get("nodes") or [] if label.get("name")
    )

    return PullRequestSummary(
        number=node["number"],
        state=node["state"].lower(),
        merged=bool(node.get("merged")),
        draft=bool(node.get("isDraft")),
        base=BranchRef(
            ref=base_ref["name"],
            label=f"{owner}:{base_ref['name']}",
            sha=_target_oid(base_ref),
        ),
        head=BranchRef(ref=head_ref["name"], label=head_label, sha=_target_oid(head_ref)),
        head_repo=head_repo,
        labels=labels,
    )


def _target_oid(ref: Dict[str, Any]) -> str:
    return (ref.get("target") or {}).get("oid", "")


def branch_from_ref(ref: str) -> Optional[str]:
    """Branch name for a ``refs/heads/...`` ref, None for tags and others."""
    if not ref or not ref.startswith(BRANCH_REF_PREFIX):
        return None
    return ref[len(BRANCH_REF_PREFIX):]


class PullRequestEnumerator(ABC):
    """
    Lazily yields open pull requests targeting a base branch, most recently
    updated first.

    Enumeration stops quietly (after logging) on API errors; whatever was
    yielded before the error stays valid. Nothing is retried here.
    """

    source_name = "GitHub API"

    def __init__(self, github: GitHubTool):
        self.github = github
        self.logger = get_logger()

    async def enumerate(
        self,
        ref: str,
        repo_name: str,
        repo_owner: str
    ) -> AsyncIterator[PullRequestSummary]:
        """
        Yield summaries for open PRs whose base is the branch ``ref`` points to.

        Args:
            ref: Full ref of the base branch (``refs/heads/<branch>``)
            repo_name: Repository name
            repo_owner: Repository owner

        Yields:
            PullRequestSummary objects in listing order
        """
        base = branch_from_ref(ref)
        if base is None:
            self.logger.warning(f"Ref '{ref}' is not a branch, skipping.")
            return
        if not repo_owner:
            self.logger.error("Invalid repository owner provided")
            return
        if not repo_name:
            self.logger.error("Invalid repository name provided")
            return

        try:
            async for summary in self._pages(base, repo_name, repo_owner):
                yield summary
        except TRANSPORT_ERRORS as e:
            self._log_abort(e)

    @abstractmethod
    def _pages(self, base: str, repo_name: str, repo_owner: str) -> AsyncIterator[PullRequestSummary]:
        """Yield summaries page by page."""

    def _log_abort(self, error: Exception) -> None:
        status = error_status(error)
        message = error_message(error)
        source = self.source_name

        if isinstance(error, RateLimitExceededException) or status == 429:
            self.logger.error(f"Rate limit exceeded when calling {source}")
            self.logger.error("Please wait before retrying or check your rate limit status.")
        elif status in (401, 403):
            self.logger.error(f"Authentication error when calling {source}: {message}")
            self.logger.error("Please check that your GitHub token has the required permissions.")
        else:
            self.logger.error(f"{source} error (status {status}): {message}")


class PagedPullRequestEnumerator(PullRequestEnumerator):
    """Enumerates pull requests through the REST pulls listing."""

    source_name = "REST API"

    async def _pages(self, base, repo_name, repo_owner):
        for pull in self.github.iter_open_pulls(repo_owner, repo_name, base):
            yield summary_from_rest(pull)


class GraphPullRequestEnumerator(PullRequestEnumerator):
    """Enumerates pull requests through the GraphQL API, 100 per page."""

    source_name = "GraphQL API"

    async def _pages(self, base, repo_name, repo_owner):
        cursor = None
        has_next_page = True

        while has_next_page:
            data = self.github.graphql(
                PULL_REQUESTS_QUERY,
                {"owner": repo_owner, "repo": repo_name, "base": base, "cursor": cursor},
            )
            pull_requests = data["repository"]["pullRequests"]

            for node in pull_requests["nodes"]:
                summary = summary_from_graph(node, repo_owner)
                if summary is not None:
                    yield summary

            page_info = pull_requests["pageInfo"]
            has_next_page = page_info["hasNextPage"]
            cursor = page_info["endCursor"]
