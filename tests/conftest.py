"""Shared fixtures: pull request payloads and a mocked GitHub boundary."""

import asyncio
from unittest.mock import Mock

import pytest

from pr_autoupdate.models import BranchRef, HeadRepository, PullRequestSummary
from pr_autoupdate.tools import GitHubTool


def rest_pull(
    number,
    base="main",
    head="feature",
    owner="octo",
    head_owner=None,
    repo="widgets",
    labels=(),
    draft=False,
    state="open",
    merged=False,
    auto_merge=None,
    head_repo=True,
):
    """REST-shaped pull request JSON, as returned by the pulls API."""
    head_owner = head_owner or owner
    return {
        "number": number,
        "state": state,
        "merged": merged,
        "merged_at": "2024-01-01T00:00:00Z" if merged else None,
        "draft": draft,
        "labels": [{"name": name} for name in labels],
        "auto_merge": auto_merge,
        "base": {"ref": base, "label": f"{owner}:{base}", "sha": f"base-{number}"},
        "head": {
            "ref": head,
            "label": f"{head_owner}:{head}",
            "sha": f"head-{number}",
            "repo": {"name": repo, "owner": {"login": head_owner}} if head_repo else None,
        },
    }


def graph_node(
    number,
    base="main",
    head="feature",
    head_owner="octo",
    repo="widgets",
    labels=(),
    draft=False,
    head_ref=True,
    head_repository=True,
):
    """GraphQL ``PullRequest`` node as requested by the enumeration query."""
    return {
        "number": number,
        "state": "OPEN",
        "merged": False,
        "mergeable": "MERGEABLE",
        "isDraft": draft,
        "labels": {"nodes": [{"name": name} for name in labels]},
        "baseRef": {"name": base, "target": {"oid": f"base-{number}"}},
        "headRef": {"name": head, "target": {"oid": f"head-{number}"}} if head_ref else None,
        "headRepository": (
            {"name": repo, "owner": {"login": head_owner}} if head_repository else None
        ),
    }


def graph_page(nodes, has_next_page=False, end_cursor=None):
    return {
        "repository": {
            "pullRequests": {
                "pageInfo": {"hasNextPage": has_next_page, "endCursor": end_cursor},
                "nodes": nodes,
            }
        }
    }


def make_summary(
    number=1,
    state="open",
    merged=False,
    draft=False,
    labels=(),
    auto_merge=None,
    head_repo=True,
    owner="octo",
    head_owner=None,
):
    head_owner = head_owner or owner
    return PullRequestSummary(
        number=number,
        state=state,
        merged=merged,
        draft=draft,
        base=BranchRef(ref="main", label=f"{owner}:main", sha="abc"),
        head=BranchRef(ref="feature", label=f"{head_owner}:feature", sha="def"),
        head_repo=HeadRepository(name="widgets", owner_login=head_owner) if head_repo else None,
        labels=frozenset(labels),
        auto_merge=auto_merge,
    )


def collect(async_iterable):
    """Drain an async iterator into a list."""
    async def _collect():
        return [item async for item in async_iterable]
    return asyncio.run(_collect())


@pytest.fixture
def github():
    """GitHubTool with every API call mocked out."""
    tool = Mock(spec=GitHubTool)
    tool.behind_by.return_value = 3
    tool.is_branch_protected.return_value = True
    tool.merge.return_value = "f00dcafe"
    tool.iter_open_pulls.return_value = iter([])
    return tool
