from datetime import datetime
from typing import Any, Self

from githubkit.versions.v2022_11_28.models import FullRepository as GitHubKitFullRepository
from githubkit.versions.v2022_11_28.models import Issue as GitHubKitIssue
from githubkit.versions.v2022_11_28.models import IssueComment as GitHubKitIssueComment
from githubkit.versions.v2022_11_28.models import PullRequest as GitHubKitPullRequest
from githubkit.versions.v2022_11_28.models import PullRequestReview as GitHubKitPullRequestReview
from githubkit.versions.v2022_11_28.models import PullRequestReviewComment as GitHubKitPullRequestReviewComment
from githubkit.versions.v2022_11_28.models import SimpleUser as GitHubKitSimpleUser
from pydantic import BaseModel, ConfigDict, Field

NO_DESCRIPTION = "(no description)"
GHOST_USER = "ghost"


def user_login(user: GitHubKitSimpleUser | None) -> str:
    """The login of a user, or `ghost` for deleted accounts."""
    return user.login if user else GHOST_USER


def label_names(labels: list[Any]) -> list[str]:
    """Issue labels are returned either as plain strings or as label objects."""

    names: list[str] = []

    for label in labels:
        if isinstance(label, str):
            names.append(label)
        elif name := getattr(label, "name", None):
            names.append(name)

    return names


class RepositoryName(BaseModel):
    owner: str = Field(description="The owner of the repository.")
    repo: str = Field(description="The name of the repository.")
    full_name: str = Field(description="The full name of the repository, `owner/repo`.")

    @classmethod
    def from_owner_repo(cls, owner: str, repo: str) -> Self:
        return cls(owner=owner, repo=repo, full_name=f"{owner}/{repo}")


class IssueComment(BaseModel):
    """A comment on an issue or on the conversation tab of a pull request."""

    author: str = Field(description="The login of the comment author.")
    body: str = Field(description="The body of the comment.")
    created_at: datetime = Field(description="The date and time the comment was created.")

    @classmethod
    def from_issue_comment(cls, issue_comment: GitHubKitIssueComment) -> Self:
        return cls(author=user_login(issue_comment.user), body=issue_comment.body or "", created_at=issue_comment.created_at)

    @classmethod
    def from_issue_comments(cls, issue_comments: list[GitHubKitIssueComment]) -> list[Self]:
        return [cls.from_issue_comment(issue_comment=issue_comment) for issue_comment in issue_comments]


class Issue(BaseModel):
    """An issue, reduced to the fields needed to implement it."""

    number: int = Field(description="The number of the issue.")
    title: str = Field(description="The title of the issue.")
    body: str = Field(description="The body of the issue.")
    state: str = Field(description="The state of the issue.")
    labels: list[str] = Field(description="The names of the labels on the issue.")
    author: str = Field(description="The login of the issue author.")
    created_at: datetime = Field(description="The date and time the issue was created.")
    html_url: str = Field(description="The URL of the issue on GitHub.")
    repository: RepositoryName = Field(description="The repository the issue belongs to.")
    comments: list[IssueComment] = Field(default_factory=list, description="The comments on the issue.")

    @classmethod
    def from_issue(cls, issue: GitHubKitIssue, owner: str, repo: str, comments: list[IssueComment] | None = None) -> Self:
        return cls(
            number=issue.number,
            title=issue.title,
            body=issue.body or NO_DESCRIPTION,
            state=issue.state,
            labels=label_names(issue.labels),
            author=user_login(issue.user),
            created_at=issue.created_at,
            html_url=issue.html_url,
            repository=RepositoryName.from_owner_repo(owner=owner, repo=repo),
            comments=comments or [],
        )


class PullRequest(BaseModel):
    """A pull request, reduced to the fields needed to act on its review feedback."""

    number: int = Field(description="The number of the pull request.")
    title: str = Field(description="The title of the pull request.")
    body: str = Field(description="The body of the pull request.")
    state: str = Field(description="The state of the pull request.")
    draft: bool = Field(default=False, description="Whether the pull request is a draft.")
    merged: bool = Field(default=False, description="Whether the pull request has been merged.")
    author: str = Field(description="The login of the pull request author.")
    head_branch: str = Field(description="The branch the changes are on. Check this branch out to update the pull request.")
    head_sha: str = Field(description="The SHA of the head commit.")
    head_repository: str | None = Field(default=None, description="The full name of the repository the head branch lives in.")
    base_branch: str = Field(description="The branch the changes will be merged into.")
    html_url: str = Field(description="The URL of the pull request on GitHub.")
    created_at: datetime = Field(description="The date and time the pull request was created.")
    repository: RepositoryName = Field(description="The repository the pull request belongs to.")

    @classmethod
    def from_pull_request(cls, pull_request: GitHubKitPullRequest, owner: str, repo: str) -> Self:
        head_repository = pull_request.head.repo.full_name if pull_request.head.repo else None

        return cls(
            number=pull_request.number,
            title=pull_request.title,
            body=pull_request.body or NO_DESCRIPTION,
            state=pull_request.state,
            draft=bool(pull_request.draft),
            merged=bool(pull_request.merged),
            author=user_login(pull_request.user),
            head_branch=pull_request.head.ref,
            head_sha=pull_request.head.sha,
            head_repository=head_repository,
            base_branch=pull_request.base.ref,
            html_url=pull_request.html_url,
            created_at=pull_request.created_at,
            repository=RepositoryName.from_owner_repo(owner=owner, repo=repo),
        )


class PullRequestReview(BaseModel):
    """A review submitted on a pull request."""

    id: int = Field(description="The ID of the review.")
    author: str = Field(description="The login of the reviewer.")
    state: str = Field(description="The state of the review, e.g. `APPROVED` or `CHANGES_REQUESTED`.")
    body: str = Field(description="The body of the review.")
    submitted_at: datetime | None = Field(default=None, description="The date and time the review was submitted.")
    html_url: str = Field(description="The URL of the review on GitHub.")

    @classmethod
    def from_review(cls, review: GitHubKitPullRequestReview) -> Self:
        return cls(
            id=review.id,
            author=user_login(review.user),
            state=review.state,
            body=review.body or "",
            submitted_at=review.submitted_at or None,
            html_url=review.html_url,
        )

    @classmethod
    def from_reviews(cls, reviews: list[GitHubKitPullRequestReview]) -> list[Self]:
        return [cls.from_review(review=review) for review in reviews]


class PullRequestReviewComment(BaseModel):
    """An inline comment left on the diff of a pull request."""

    id: int = Field(description="The ID of the comment.")
    author: str = Field(description="The login of the comment author.")
    path: str = Field(description="The path of the file the comment is on.")
    line: int | None = Field(default=None, description="The line of the file the comment is on.")
    body: str = Field(description="The body of the comment.")
    diff_hunk: str = Field(description="The diff hunk the comment applies to.")
    in_reply_to_id: int | None = Field(default=None, description="The ID of the comment this comment replies to.")
    created_at: datetime = Field(description="The date and time the comment was created.")
    html_url: str = Field(description="The URL of the comment on GitHub.")

    @classmethod
    def from_review_comment(cls, review_comment: GitHubKitPullRequestReviewComment) -> Self:
        return cls(
            id=review_comment.id,
            author=user_login(review_comment.user),
            path=review_comment.path,
            line=review_comment.line or None,
            body=review_comment.body,
            diff_hunk=review_comment.diff_hunk,
            in_reply_to_id=review_comment.in_reply_to_id or None,
            created_at=review_comment.created_at,
            html_url=review_comment.html_url,
        )

    @classmethod
    def from_review_comments(cls, review_comments: list[GitHubKitPullRequestReviewComment]) -> list[Self]:
        return [cls.from_review_comment(review_comment=review_comment) for review_comment in review_comments]


class RepositoryInfo(BaseModel):
    """A repository, with the details needed to clone it and open a pull request against it."""

    model_config = ConfigDict(frozen=True)

    full_name: str = Field(description="The full name of the repository.")
    description: str | None = Field(default=None, description="The description of the repository.")
    default_branch: str = Field(description="The default branch of the repository.")
    clone_url: str = Field(description="The HTTPS clone URL of the repository.")
    ssh_url: str = Field(description="The SSH clone URL of the repository.")
    html_url: str = Field(description="The URL of the repository on GitHub.")
    private: bool = Field(description="Whether the repository is private.")

    @classmethod
    def from_full_repository(cls, full_repository: GitHubKitFullRepository) -> Self:
        return cls(
            full_name=full_repository.full_name,
            description=full_repository.description,
            default_branch=full_repository.default_branch,
            clone_url=full_repository.clone_url,
            ssh_url=full_repository.ssh_url,
            html_url=full_repository.html_url,
            private=full_repository.private,
        )


class CreatedPullRequest(BaseModel):
    """A pull request that was just opened."""

    number: int = Field(description="The number of the pull request.")
    title: str = Field(description="The title of the pull request.")
    html_url: str = Field(description="The URL of the pull request on GitHub.")
    state: str = Field(description="The state of the pull request.")

    @classmethod
    def from_pull_request(cls, pull_request: GitHubKitPullRequest) -> Self:
        return cls(number=pull_request.number, title=pull_request.title, html_url=pull_request.html_url, state=pull_request.state)
