from datetime import UTC, datetime
from types import SimpleNamespace
from typing import Any

import pytest
from githubkit.exception import GitHubException
from inline_snapshot import snapshot

from issue_to_pr_mcp.clients.errors.github import RequestError
from issue_to_pr_mcp.clients.github import USER_AGENT, IssueToPrClient, get_githubkit_client
from tests.fakes import github_method, request_failed

CREATED_AT = datetime(2025, 9, 5, 23, 3, 4, tzinfo=UTC)

OCTOCAT = SimpleNamespace(login="octocat")

ISSUE = SimpleNamespace(
    number=42,
    title="Widgets crash on empty input",
    body=None,
    state="open",
    labels=["bug", SimpleNamespace(name="good first issue"), SimpleNamespace(name=None)],
    user=OCTOCAT,
    created_at=CREATED_AT,
    html_url="https://github.com/acme/widgets/issues/42",
)

ISSUE_COMMENTS = [
    SimpleNamespace(user=OCTOCAT, body="Reproduced on main.", created_at=CREATED_AT),
    SimpleNamespace(user=None, body=None, created_at=CREATED_AT),
]

PULL_REQUEST = SimpleNamespace(
    number=9,
    title="Handle empty input",
    body="Fixes #42",
    state="open",
    draft=None,
    merged=False,
    user=OCTOCAT,
    head=SimpleNamespace(ref="fix/issue-42", sha="abc123", repo=SimpleNamespace(full_name="octocat/widgets")),
    base=SimpleNamespace(ref="main"),
    html_url="https://github.com/acme/widgets/pull/9",
    created_at=CREATED_AT,
)

REVIEWS = [
    SimpleNamespace(
        id=1,
        user=SimpleNamespace(login="reviewer"),
        state="CHANGES_REQUESTED",
        body="Please add a test.",
        submitted_at=CREATED_AT,
        html_url="https://github.com/acme/widgets/pull/9#pullrequestreview-1",
    )
]

REVIEW_COMMENTS = [
    SimpleNamespace(
        id=11,
        user=SimpleNamespace(login="reviewer"),
        path="widget.py",
        line=3,
        body="This can be None.",
        diff_hunk="@@ -1,3 +1,4 @@",
        in_reply_to_id=None,
        created_at=CREATED_AT,
        html_url="https://github.com/acme/widgets/pull/9#discussion_r11",
    )
]

FULL_REPOSITORY = SimpleNamespace(
    full_name="acme/widgets",
    description="Widgets for everyone",
    default_branch="main",
    clone_url="https://github.com/acme/widgets.git",
    ssh_url="git@github.com:acme/widgets.git",
    html_url="https://github.com/acme/widgets",
    private=False,
)


def issue_client(
    issues: dict[str, Any] | None = None,
    pulls: dict[str, Any] | None = None,
    repos: dict[str, Any] | None = None,
) -> IssueToPrClient:
    githubkit_client = SimpleNamespace(
        rest=SimpleNamespace(
            issues=SimpleNamespace(**(issues or {})),
            pulls=SimpleNamespace(**(pulls or {})),
            repos=SimpleNamespace(**(repos or {})),
        )
    )
    return IssueToPrClient(githubkit_client=githubkit_client)  # pyright: ignore[reportArgumentType]


def test_get_githubkit_client():
    githubkit_client = get_githubkit_client(token="ghp_token")

    assert githubkit_client is not None
    assert USER_AGENT == "Issue-to-PR-Agent"


async def test_get_issue():
    async_get_issue = github_method("async_get", parsed_data=ISSUE)
    async_list_comments = github_method("async_list_comments", parsed_data=ISSUE_COMMENTS)

    client = issue_client(issues={"async_get": async_get_issue, "async_list_comments": async_list_comments})

    issue = await client.get_issue(owner="acme", repo="widgets", issue_number=42)

    async_get_issue.assert_awaited_once_with(owner="acme", repo="widgets", issue_number=42)
    async_list_comments.assert_awaited_once_with(owner="acme", repo="widgets", issue_number=42, per_page=100)

    assert issue.model_dump(mode="json") == snapshot(
        {
            "number": 42,
            "title": "Widgets crash on empty input",
            "body": "(no description)",
            "state": "open",
            "labels": ["bug", "good first issue"],
            "author": "octocat",
            "created_at": "2025-09-05T23:03:04Z",
            "html_url": "https://github.com/acme/widgets/issues/42",
            "repository": {"owner": "acme", "repo": "widgets", "full_name": "acme/widgets"},
            "comments": [
                {"author": "octocat", "body": "Reproduced on main.", "created_at": "2025-09-05T23:03:04Z"},
                {"author": "ghost", "body": "", "created_at": "2025-09-05T23:03:04Z"},
            ],
        }
    )


async def test_get_issue_without_comments_when_comments_fail():
    client = issue_client(
        issues={
            "async_get": github_method("async_get", parsed_data=ISSUE),
            "async_list_comments": github_method("async_list_comments", side_effect=request_failed(500, '{"message": "Server Error"}')),
        }
    )

    issue = await client.get_issue(owner="acme", repo="widgets", issue_number=42)

    assert issue.number == 42
    assert issue.comments == []


async def test_get_issue_not_found():
    client = issue_client(
        issues={
            "async_get": github_method("async_get", side_effect=request_failed(404, '{"message": "Not Found"}')),
            "async_list_comments": github_method("async_list_comments", parsed_data=[]),
        }
    )

    with pytest.raises(RequestError) as exc_info:
        _ = await client.get_issue(owner="acme", repo="widgets", issue_number=404)

    assert exc_info.value.status_code == 404
    assert exc_info.value.response_body == '{"message": "Not Found"}'
    assert str(exc_info.value) == "A request error occured. (action: Get issue, status_code: 404)"


async def test_request_without_response():
    client = issue_client(issues={"async_get": github_method("async_get", side_effect=GitHubException("connection reset"))})

    with pytest.raises(RequestError) as exc_info:
        _ = await client.get_issue(owner="acme", repo="widgets", issue_number=42)

    assert exc_info.value.status_code is None
    assert exc_info.value.response_body == "connection reset"
    assert str(exc_info.value) == "A request error occured. (action: Get issue)"


async def test_get_pull_request():
    async_get = github_method("async_get", parsed_data=PULL_REQUEST)
    client = issue_client(pulls={"async_get": async_get})

    pull_request = await client.get_pull_request(owner="acme", repo="widgets", pull_request_number=9)

    async_get.assert_awaited_once_with(owner="acme", repo="widgets", pull_number=9)

    assert pull_request.model_dump(mode="json") == snapshot(
        {
            "number": 9,
            "title": "Handle empty input",
            "body": "Fixes #42",
            "state": "open",
            "draft": False,
            "merged": False,
            "author": "octocat",
            "head_branch": "fix/issue-42",
            "head_sha": "abc123",
            "head_repository": "octocat/widgets",
            "base_branch": "main",
            "html_url": "https://github.com/acme/widgets/pull/9",
            "created_at": "2025-09-05T23:03:04Z",
            "repository": {"owner": "acme", "repo": "widgets", "full_name": "acme/widgets"},
        }
    )


async def test_get_pull_request_reviews():
    async_list_reviews = github_method("async_list_reviews", parsed_data=REVIEWS)
    client = issue_client(pulls={"async_list_reviews": async_list_reviews})

    reviews = await client.get_pull_request_reviews(owner="acme", repo="widgets", pull_request_number=9)

    async_list_reviews.assert_awaited_once_with(owner="acme", repo="widgets", pull_number=9, per_page=100)

    assert [review.model_dump(mode="json") for review in reviews] == snapshot(
        [
            {
                "id": 1,
                "author": "reviewer",
                "state": "CHANGES_REQUESTED",
                "body": "Please add a test.",
                "submitted_at": "2025-09-05T23:03:04Z",
                "html_url": "https://github.com/acme/widgets/pull/9#pullrequestreview-1",
            }
        ]
    )


async def test_get_pull_request_review_comments():
    client = issue_client(pulls={"async_list_review_comments": github_method("async_list_review_comments", parsed_data=REVIEW_COMMENTS)})

    review_comments = await client.get_pull_request_review_comments(owner="acme", repo="widgets", pull_request_number=9)

    assert [review_comment.model_dump(mode="json") for review_comment in review_comments] == snapshot(
        [
            {
                "id": 11,
                "author": "reviewer",
                "path": "widget.py",
                "line": 3,
                "body": "This can be None.",
                "diff_hunk": "@@ -1,3 +1,4 @@",
                "in_reply_to_id": None,
                "created_at": "2025-09-05T23:03:04Z",
                "html_url": "https://github.com/acme/widgets/pull/9#discussion_r11",
            }
        ]
    )


async def test_get_pull_request_conversation():
    async_list_comments = github_method("async_list_comments", parsed_data=ISSUE_COMMENTS[:1])
    client = issue_client(issues={"async_list_comments": async_list_comments})

    comments = await client.get_pull_request_conversation(owner="acme", repo="widgets", pull_request_number=9)

    async_list_comments.assert_awaited_once_with(owner="acme", repo="widgets", issue_number=9, per_page=100)
    assert [comment.author for comment in comments] == ["octocat"]


async def test_get_repository():
    async_get_repository = github_method("async_get", parsed_data=FULL_REPOSITORY)
    client = issue_client(repos={"async_get": async_get_repository})

    repository = await client.get_repository(owner="acme", repo="widgets")

    async_get_repository.assert_awaited_once_with(owner="acme", repo="widgets")

    assert repository.model_dump() == snapshot(
        {
            "full_name": "acme/widgets",
            "description": "Widgets for everyone",
            "default_branch": "main",
            "clone_url": "https://github.com/acme/widgets.git",
            "ssh_url": "git@github.com:acme/widgets.git",
            "html_url": "https://github.com/acme/widgets",
            "private": False,
        }
    )


async def test_create_pull_request():
    async_create = github_method("async_create", parsed_data=PULL_REQUEST)
    client = issue_client(pulls={"async_create": async_create})

    created = await client.create_pull_request(
        owner="acme", repo="widgets", title="Handle empty input", body="Fixes #42", head="fix/issue-42", base="main"
    )

    async_create.assert_awaited_once_with(
        owner="acme", repo="widgets", title="Handle empty input", body="Fixes #42", head="fix/issue-42", base="main"
    )

    assert created.model_dump() == snapshot(
        {"number": 9, "title": "Handle empty input", "html_url": "https://github.com/acme/widgets/pull/9", "state": "open"}
    )


async def test_create_pull_request_validation_failed():
    body = '{"message": "Validation Failed", "errors": [{"message": "A pull request already exists for acme:fix/issue-42."}]}'
    client = issue_client(pulls={"async_create": github_method("async_create", side_effect=request_failed(422, body))})

    with pytest.raises(RequestError) as exc_info:
        _ = await client.create_pull_request(owner="acme", repo="widgets", title="t", body="b", head="fix/issue-42", base="main")

    assert exc_info.value.status_code == 422
    assert exc_info.value.response_body == body
