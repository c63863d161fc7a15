from logging import Logger
from typing import Annotated, Any

from fastmcp import FastMCP
from fastmcp.tools import Tool
from fastmcp.utilities.logging import get_logger
from pydantic import Field

from issue_to_pr_mcp.clients.errors.github import RequestError
from issue_to_pr_mcp.clients.github import IssueToPrClient
from issue_to_pr_mcp.models.references import (
    IssueReference,
    PullRequestReference,
    parse_issue_reference,
    parse_pull_request_reference,
)
from issue_to_pr_mcp.servers.shared.annotations import EXPLANATION, ISSUE_URL, OWNER, PR_URL, REPO
from issue_to_pr_mcp.servers.shared.utility import to_json

PR_TITLE = Annotated[str, Field(description="PR title.")]
PR_BODY = Annotated[str, Field(description="PR description/body (markdown supported).")]
PR_HEAD = Annotated[str, Field(description="The name of the branch where your changes are implemented.")]
PR_BASE = Annotated[str, Field(description="The name of the branch you want the changes pulled into (usually 'main' or 'master').")]


class GitHubServer:
    """Server exposing the GitHub issue, pull request and repository tools."""

    def __init__(self, client: IssueToPrClient, logger: Logger | None = None):
        self.client: IssueToPrClient = client
        self.logger: Logger = logger or get_logger(name=__name__)

    def register_tools(self, fastmcp: FastMCP[Any]) -> FastMCP[Any]:
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.fetch_github_issue))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.fetch_pr_details))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.fetch_pr_reviews))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.fetch_pr_review_comments))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.fetch_pr_conversation))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.get_repo_info))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.create_pull_request))

        return fastmcp

    async def fetch_github_issue(self, explanation: EXPLANATION, issue_url: ISSUE_URL) -> str:
        """Fetch details of a GitHub issue including title, body, labels, and comments. Provide the full issue URL
        (e.g., https://github.com/owner/repo/issues/123) or short format (owner/repo#123)."""

        reference: IssueReference = parse_issue_reference(issue_url)

        self.logger.info(f"fetch_github_issue {reference.full_name}#{reference.number}: {explanation}")

        try:
            issue = await self.client.get_issue(owner=reference.owner, repo=reference.repo, issue_number=reference.number)
        except RequestError as e:
            return f"Error fetching issue: {e.response_body}"

        return to_json(issue)

    async def fetch_pr_details(self, explanation: EXPLANATION, pr_url: PR_URL) -> str:
        """Fetch details of a GitHub pull request including title, body, state, and its head and base branches.
        Check out the head branch with git_checkout to push follow-up changes to the pull request."""

        reference: PullRequestReference = parse_pull_request_reference(pr_url)

        self.logger.info(f"fetch_pr_details {reference.full_name}#{reference.number}: {explanation}")

        try:
            pull_request = await self.client.get_pull_request(
                owner=reference.owner, repo=reference.repo, pull_request_number=reference.number
            )
        except RequestError as e:
            return f"Error fetching pull request: {e.response_body}"

        return to_json(pull_request)

    async def fetch_pr_reviews(self, explanation: EXPLANATION, pr_url: PR_URL) -> str:
        """Fetch the reviews submitted on a GitHub pull request, including their state and summary comments."""

        reference: PullRequestReference = parse_pull_request_reference(pr_url)

        self.logger.info(f"fetch_pr_reviews {reference.full_name}#{reference.number}: {explanation}")

        try:
            reviews = await self.client.get_pull_request_reviews(
                owner=reference.owner, repo=reference.repo, pull_request_number=reference.number
            )
        except RequestError as e:
            return f"Error fetching reviews: {e.response_body}"

        return to_json(reviews)

    async def fetch_pr_review_comments(self, explanation: EXPLANATION, pr_url: PR_URL) -> str:
        """Fetch the inline review comments left on the diff of a GitHub pull request, with file paths and lines."""

        reference: PullRequestReference = parse_pull_request_reference(pr_url)

        self.logger.info(f"fetch_pr_review_comments {reference.full_name}#{reference.number}: {explanation}")

        try:
            review_comments = await self.client.get_pull_request_review_comments(
                owner=reference.owner, repo=reference.repo, pull_request_number=reference.number
            )
        except RequestError as e:
            return f"Error fetching review comments: {e.response_body}"

        return to_json(review_comments)

    async def fetch_pr_conversation(self, explanation: EXPLANATION, pr_url: PR_URL) -> str:
        """Fetch the general conversation comments of a GitHub pull request (not tied to specific lines)."""

        reference: PullRequestReference = parse_pull_request_reference(pr_url)

        self.logger.info(f"fetch_pr_conversation {reference.full_name}#{reference.number}: {explanation}")

        try:
            comments = await self.client.get_pull_request_conversation(
                owner=reference.owner, repo=reference.repo, pull_request_number=reference.number
            )
        except RequestError as e:
            return f"Error fetching conversation: {e.response_body}"

        return to_json(comments)

    async def get_repo_info(self, explanation: EXPLANATION, owner: OWNER, repo: REPO) -> str:
        """Get information about a GitHub repository including default branch, description, and clone URL."""

        self.logger.info(f"get_repo_info {owner}/{repo}: {explanation}")

        try:
            repository = await self.client.get_repository(owner=owner, repo=repo)
        except RequestError as e:
            return f"Error fetching repo: {e.response_body}"

        return to_json(repository)

    async def create_pull_request(
        self,
        explanation: EXPLANATION,
        owner: OWNER,
        repo: REPO,
        title: PR_TITLE,
        body: PR_BODY,
        head: PR_HEAD,
        base: PR_BASE,
    ) -> str:
        """Create a GitHub pull request. The branch must already be pushed to the remote repository."""

        self.logger.info(f"create_pull_request {owner}/{repo} {head} -> {base}: {explanation}")

        try:
            pull_request = await self.client.create_pull_request(owner=owner, repo=repo, title=title, body=body, head=head, base=base)
        except RequestError as e:
            return f"Error creating PR: {e.response_body}"

        return to_json(pull_request)
