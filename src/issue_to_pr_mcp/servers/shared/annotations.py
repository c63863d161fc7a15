from typing import Annotated

from pydantic import Field

EXPLANATION = Annotated[str, Field(description="One sentence explanation as to why this tool is being used.")]

REPO_PATH_DESCRIPTION = (
    "Repository path (e.g., 'my-repo' for issues_workspace/my-repo, or a full path). "
    "Always specify this when working on cloned repositories."
)
REPO_PATH = Annotated[str | None, Field(description=REPO_PATH_DESCRIPTION)]

EXPECTED_REPO_DESCRIPTION = "Expected repo name to verify (e.g., 'owner/repo'). Prevents accidental operations on the wrong repository."
EXPECTED_REPO = Annotated[str | None, Field(description=EXPECTED_REPO_DESCRIPTION)]


OWNER = Annotated[str, Field(description="Repository owner (username or organization).")]
REPO = Annotated[str, Field(description="Repository name.")]

ISSUE_URL = Annotated[str, Field(description="The GitHub issue URL or short reference (e.g., owner/repo#123).")]
PR_URL = Annotated[str, Field(description="The GitHub pull request URL (e.g., https://github.com/owner/repo/pull/123).")]
