from pathlib import Path

from pydantic import BaseModel, Field

WORKSPACE_DIRECTORY_NAME = "issues_workspace"


def workspace_root(base: Path) -> Path:
    """The directory under which every cloned repository lives."""
    return base / WORKSPACE_DIRECTORY_NAME


def resolve_working_directory(base: Path, repo_identifier: str | None = None) -> Path:
    """Resolve the directory a git or shell operation should run in.

    With no identifier the operation targets `base` itself. An absolute path, or a path already rooted at the
    workspace folder, is taken as-is (relative ones are joined to `base`). Anything else is treated as the bare
    name of a repository cloned into the workspace.
    """

    if not repo_identifier:
        return base

    if repo_identifier.startswith("/"):
        return Path(repo_identifier)

    if repo_identifier.startswith(WORKSPACE_DIRECTORY_NAME):
        return base / repo_identifier

    return workspace_root(base) / repo_identifier


class WorkspaceRequest(BaseModel):
    """A request to locate the working directory for a single tool invocation."""

    repo_identifier: str | None = Field(default=None, description="A repository name or path, as returned by `git_clone`.")
    base_working_directory: Path = Field(description="The directory the agent was started in.")

    def resolve(self) -> Path:
        return resolve_working_directory(base=self.base_working_directory, repo_identifier=self.repo_identifier)
