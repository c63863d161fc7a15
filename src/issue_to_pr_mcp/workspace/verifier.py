from pathlib import Path

from pydantic import BaseModel, Field

from issue_to_pr_mcp.workspace.executor import CommandExecutor, CommandResult


class RepoVerification(BaseModel):
    """Whether a working directory belongs to the repository the caller expects."""

    valid: bool = Field(description="Whether the working directory passed verification.")
    actual_remote_url: str | None = Field(default=None, description="The URL of the `origin` remote, if there is one.")
    error: str | None = Field(default=None, description="Why verification failed.")


def remote_matches(actual_remote_url: str, expected_repo: str) -> bool:
    # A plain substring check, so `https://github.com/acme/widgets.git` and `git@github.com:acme/widgets` both
    # match `acme/widgets`. `foo/bar` also matches a remote for `foo/barbaz`.
    return expected_repo in actual_remote_url


async def verify_repository(executor: CommandExecutor, working_directory: Path, expected_repo: str | None = None) -> RepoVerification:
    """Check that `working_directory` is a git repository whose `origin` remote contains `expected_repo`."""

    result: CommandResult = await executor.run(["git", "remote", "get-url", "origin"], working_directory)

    if not result.success:
        return RepoVerification(valid=False, error="Not a git repository or no remote configured")

    actual_remote_url: str = result.stdout.strip()

    if expected_repo and not remote_matches(actual_remote_url=actual_remote_url, expected_repo=expected_repo):
        return RepoVerification(
            valid=False,
            actual_remote_url=actual_remote_url,
            error=f"Expected repo '{expected_repo}' but found '{actual_remote_url}'",
        )

    return RepoVerification(valid=True, actual_remote_url=actual_remote_url)
