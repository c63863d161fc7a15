import re
from typing import Self

from pydantic import BaseModel, ConfigDict, Field

from issue_to_pr_mcp.servers.shared.errors import InvalidReferenceFormatError

ISSUE_URL_PATTERN = re.compile(r"github\.com/([^/]+)/([^/]+)/issues/(\d+)")
ISSUE_SHORTHAND_PATTERN = re.compile(r"^([^/]+)/([^#]+)#(\d+)$")
PULL_REQUEST_URL_PATTERN = re.compile(r"github\.com/([^/]+)/([^/]+)/pull/(\d+)")

ISSUE_FORMATS = ["https://github.com/owner/repo/issues/123", "owner/repo#123"]
PULL_REQUEST_FORMATS = ["https://github.com/owner/repo/pull/123"]


class RepositoryReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    owner: str = Field(description="The owner of the repository.")
    repo: str = Field(description="The name of the repository.")
    number: int = Field(description="The number of the issue or pull request.")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @classmethod
    def from_match(cls, match: re.Match[str]) -> Self:
        return cls(owner=match.group(1), repo=match.group(2), number=int(match.group(3)))


class IssueReference(RepositoryReference):
    """An issue, addressed by its URL or `owner/repo#number` shorthand."""


class PullRequestReference(RepositoryReference):
    """A pull request, addressed by its URL."""


def parse_issue_reference(text: str) -> IssueReference:
    """Parse `https://github.com/owner/repo/issues/123` or `owner/repo#123`."""

    if match := ISSUE_URL_PATTERN.search(text):
        return IssueReference.from_match(match)

    if match := ISSUE_SHORTHAND_PATTERN.match(text):
        return IssueReference.from_match(match)

    raise InvalidReferenceFormatError(kind="issue", reference=text, accepted_formats=ISSUE_FORMATS)


def parse_pull_request_reference(text: str) -> PullRequestReference:
    """Parse `https://github.com/owner/repo/pull/123`."""

    if match := PULL_REQUEST_URL_PATTERN.search(text):
        return PullRequestReference.from_match(match)

    raise InvalidReferenceFormatError(kind="pull request", reference=text, accepted_formats=PULL_REQUEST_FORMATS)
