from collections.abc import Awaitable, Callable
from logging import Logger
from typing import Any

from fastmcp.utilities.logging import get_logger
from githubkit import GitHub as GitHubKit
from githubkit.auth.token import TokenAuthStrategy
from githubkit.exception import GitHubException as GitHubKitGitHubException
from githubkit.exception import RequestFailed as GitHubKitRequestFailed
from githubkit.response import Response as GitHubKitResponse

from issue_to_pr_mcp.clients.errors.github import RequestError
from issue_to_pr_mcp.clients.models.github import (
    CreatedPullRequest,
    Issue,
    IssueComment,
    PullRequest,
    PullRequestReview,
    PullRequestReviewComment,
    RepositoryInfo,
)

GITHUB_API_BASE = "https://api.github.com"
USER_AGENT = "Issue-to-PR-Agent"

DEFAULT_PER_PAGE = 100


def get_githubkit_client(token: str) -> GitHubKit[TokenAuthStrategy]:
    # Retries are left to the agent loop, so automatic retry is disabled.
    return GitHubKit[TokenAuthStrategy](
        auth=TokenAuthStrategy(token=token),
        base_url=GITHUB_API_BASE,
        user_agent=USER_AGENT,
        auto_retry=False,
    )


def extract_response[T](response: GitHubKitResponse[T], /) -> T:
    """Extract the response from a response."""

    return response.parsed_data


class IssueToPrClient:
    """A GitHub REST client for reading issues and pull requests and for opening pull requests."""

    githubkit_client: GitHubKit[Any]
    logger: Logger

    log_requests: bool
    log_responses: bool

    def __init__(
        self,
        githubkit_client: GitHubKit[Any],
        logger: Logger | None = None,
        log_requests: bool = True,
        log_responses: bool = False,
    ):
        self.githubkit_client = githubkit_client
        self.logger = logger or get_logger(name=__name__)
        self.log_requests = log_requests
        self.log_responses = log_responses

    async def _perform_rest_request[T](
        self,
        action: str,
        *,
        method: Callable[..., Awaitable[GitHubKitResponse[T]]],
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> T:
        """Perform a request and extract the response.

        Raises:
            RequestError: If GitHub responds with a non-successful status, or the request could not be sent. The raw
                response body is preserved on the error.
        """

        request_logger = self.logger.info if self.log_requests else self.logger.debug
        response_logger = self.logger.info if self.log_responses else self.logger.debug

        request_logger(f"Performing {action} using {method.__name__} with kwargs {request_args}")

        try:
            response: GitHubKitResponse[T] = await method(**request_args)
        except GitHubKitRequestFailed as e:
            self.logger.warning(f"{action} failed with status {e.response.status_code}")

            raise RequestError(action=action, response_body=e.response.text, status_code=e.response.status_code) from e
        except GitHubKitGitHubException as e:
            self.logger.warning(f"{action} failed: {e}")

            raise RequestError(action=action, response_body=str(e)) from e

        extracted_response: T = extract_response(response)

        response_logger(f"Extracted response for {action} using {method.__name__}: {extracted_response}")

        return extracted_response

    async def get_issue_comments(self, owner: str, repo: str, issue_number: int) -> list[IssueComment]:
        """Get the comments on an issue, or on the conversation tab of a pull request."""

        comments = await self._perform_rest_request(
            action="Get issue comments",
            method=self.githubkit_client.rest.issues.async_list_comments,
            owner=owner,
            repo=repo,
            issue_number=issue_number,
            per_page=DEFAULT_PER_PAGE,
        )

        return IssueComment.from_issue_comments(issue_comments=comments)

    async def get_issue(self, owner: str, repo: str, issue_number: int) -> Issue:
        """Get an issue along with its comments.

        The issue and its comments are fetched separately. If the comments cannot be fetched the issue is
        returned without them.
        """

        issue = await self._perform_rest_request(
            action="Get issue",
            method=self.githubkit_client.rest.issues.async_get,
            owner=owner,
            repo=repo,
            issue_number=issue_number,
        )

        try:
            comments: list[IssueComment] = await self.get_issue_comments(owner=owner, repo=repo, issue_number=issue_number)
        except RequestError as e:
            self.logger.warning(f"Could not fetch comments for {owner}/{repo}#{issue_number}, continuing without them: {e}")
            comments = []

        return Issue.from_issue(issue=issue, owner=owner, repo=repo, comments=comments)

    async def get_pull_request(self, owner: str, repo: str, pull_request_number: int) -> PullRequest:
        """Get a pull request."""

        pull_request = await self._perform_rest_request(
            action="Get pull request",
            method=self.githubkit_client.rest.pulls.async_get,
            owner=owner,
            repo=repo,
            pull_number=pull_request_number,
        )

        return PullRequest.from_pull_request(pull_request=pull_request, owner=owner, repo=repo)

    async def get_pull_request_reviews(self, owner: str, repo: str, pull_request_number: int) -> list[PullRequestReview]:
        """Get the reviews submitted on a pull request."""

        reviews = await self._perform_rest_request(
            action="Get pull request reviews",
            method=self.githubkit_client.rest.pulls.async_list_reviews,
            owner=owner,
            repo=repo,
            pull_number=pull_request_number,
            per_page=DEFAULT_PER_PAGE,
        )

        return PullRequestReview.from_reviews(reviews=reviews)

    async def get_pull_request_review_comments(self, owner: str, repo: str, pull_request_number: int) -> list[PullRequestReviewComment]:
        """Get the inline comments left on the diff of a pull request."""

        review_comments = await self._perform_rest_request(
            action="Get pull request review comments",
            method=self.githubkit_client.rest.pulls.async_list_review_comments,
            owner=owner,
            repo=repo,
            pull_number=pull_request_number,
            per_page=DEFAULT_PER_PAGE,
        )

        return PullRequestReviewComment.from_review_comments(review_comments=review_comments)

    async def get_pull_request_conversation(self, owner: str, repo: str, pull_request_number: int) -> list[IssueComment]:
        """Get the comments on the conversation tab of a pull request. GitHub serves these from the issues endpoint."""

        return await self.get_issue_comments(owner=owner, repo=repo, issue_number=pull_request_number)

    async def get_repository(self, owner: str, repo: str) -> RepositoryInfo:
        """Get a repository."""

        full_repository = await self._perform_rest_request(
            action="Get repository",
            method=self.githubkit_client.rest.repos.async_get,
            owner=owner,
            repo=repo,
        )

        return RepositoryInfo.from_full_repository(full_repository=full_repository)

    async def create_pull_request(self, owner: str, repo: str, title: str, body: str, head: str, base: str) -> CreatedPullRequest:
        """Open a pull request. The head branch must already be pushed."""

        pull_request = await self._perform_rest_request(
            action="Create pull request",
            method=self.githubkit_client.rest.pulls.async_create,
            owner=owner,
            repo=repo,
            title=title,
            body=body,
            head=head,
            base=base,
        )

        self.logger.info(f"Opened pull request {owner}/{repo}#{pull_request.number} from {head} into {base}")

        return CreatedPullRequest.from_pull_request(pull_request=pull_request)
