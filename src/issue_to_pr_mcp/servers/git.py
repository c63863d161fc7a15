import asyncio
from logging import Logger
from pathlib import Path
from typing import Annotated, Any

from anyio import Path as AsyncPath
from fastmcp import FastMCP
from fastmcp.tools import Tool
from fastmcp.utilities.logging import get_logger
from git.exc import GitCommandError, GitError
from git.repo import Repo
from pydantic import BaseModel, Field

from issue_to_pr_mcp.servers.shared.annotations import EXPECTED_REPO, EXPLANATION, REPO_PATH
from issue_to_pr_mcp.servers.shared.utility import error, to_json
from issue_to_pr_mcp.workspace.executor import CommandExecutor, CommandResult
from issue_to_pr_mcp.workspace.policy import SafetyPolicy
from issue_to_pr_mcp.workspace.resolver import WorkspaceRequest, workspace_root
from issue_to_pr_mcp.workspace.verifier import RepoVerification, verify_repository

UNKNOWN_REF_MARKER = "did not match any"
DEFAULT_REPOSITORY_NAME = "repo"

REPO_URL = Annotated[str, Field(description="Repository URL (HTTPS or SSH).")]
DIRECTORY = Annotated[str | None, Field(description="Target directory name (optional, defaults to repo name).")]
FILES = Annotated[list[str], Field(description="List of file paths to stage. Use ['.'] to stage all changes.")]
COMMIT_MESSAGE = Annotated[str, Field(description="Commit message describing the changes.")]
SET_UPSTREAM = Annotated[bool, Field(description="Whether to set upstream tracking (default: true for new branches).")]


class GitStatusChange(BaseModel):
    status: str = Field(description="The two-letter porcelain status code, trimmed.")
    file: str = Field(description="The path of the changed file.")


class GitStatus(BaseModel):
    branch: str = Field(description="The current branch, empty when HEAD is detached.")
    changes: list[GitStatusChange] = Field(description="The staged and unstaged changes in the working tree.")
    clean: bool = Field(description="Whether the working tree has no changes.")


class CloneResult(BaseModel):
    already_exists: bool | None = Field(default=None, description="Set when the repository had been cloned before.")
    success: bool | None = Field(default=None, description="Set when the repository was cloned by this call.")
    repo_path: str = Field(description="The value to pass as `repo_path` to the other git tools.")
    full_path: str = Field(description="The absolute path of the clone.")
    message: str = Field(description="A note on how to use the clone.")


def parse_porcelain(output: str) -> list[GitStatusChange]:
    """Parse the output of `git status --porcelain`."""

    return [GitStatusChange(status=line[0:2].strip(), file=line[3:]) for line in output.split("\n") if line.strip()]


def repository_name_from_url(repo_url: str) -> str:
    """The final path segment of a clone URL, without a `.git` suffix."""

    return repo_url.rstrip("/").split("/")[-1].removesuffix(".git") or DEFAULT_REPOSITORY_NAME


class GitServer:
    """Server for cloning repositories into the workspace and running git operations on them."""

    def __init__(
        self,
        working_directory: Path,
        safety_policy: SafetyPolicy | None = None,
        executor: CommandExecutor | None = None,
        logger: Logger | None = None,
    ):
        self.working_directory: Path = working_directory
        self.safety_policy: SafetyPolicy = safety_policy or SafetyPolicy()
        self.logger: Logger = logger or get_logger(name=__name__)
        self.executor: CommandExecutor = executor or CommandExecutor(logger=self.logger)

    def register_tools(self, fastmcp: FastMCP[Any]) -> FastMCP[Any]:
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.git_clone))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.git_status))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.git_checkout))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.git_create_branch))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.git_add))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.git_commit))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.git_push))

        return fastmcp

    async def _resolve_and_verify(
        self, tool_name: str, explanation: str, repo_path: str | None, expected_repo: str | None
    ) -> tuple[Path, str | None]:
        """Resolve the working directory of a tool call and, when asked to, check its remote.

        Returns the working directory and, if verification failed, the error to return to the agent.
        """

        working_directory: Path = WorkspaceRequest(repo_identifier=repo_path, base_working_directory=self.working_directory).resolve()

        self.logger.info(f"{tool_name} in {working_directory}: {explanation}")

        if not expected_repo:
            return working_directory, None

        verification: RepoVerification = await verify_repository(
            executor=self.executor, working_directory=working_directory, expected_repo=expected_repo
        )

        if not verification.valid:
            self.logger.warning(f"{tool_name} refused to run in {working_directory}: {verification.error}")
            return working_directory, error(verification.error or "Repository verification failed")

        return working_directory, None

    def _clone_repository(self, repo_url: str, directory: Path) -> None:
        _ = Repo.clone_from(repo_url, directory)

    async def git_clone(self, explanation: EXPLANATION, repo_url: REPO_URL, directory: DIRECTORY = None) -> str:
        """Clone a GitHub repository to issues_workspace folder. Returns the repo_path to use with other git tools."""

        workspace: AsyncPath = AsyncPath(workspace_root(self.working_directory))
        await workspace.mkdir(parents=True, exist_ok=True)

        repository_name: str = directory or repository_name_from_url(repo_url)
        target_path: AsyncPath = workspace / repository_name

        self.logger.info(f"git_clone of {repo_url} to {target_path}: {explanation}")

        if await target_path.is_dir():
            return CloneResult(
                already_exists=True,
                repo_path=repository_name,
                full_path=str(target_path),
                message=f'Repository already exists. Use repo_path: "{repository_name}" with other git tools.',
            ).model_dump_json(indent=2, exclude_none=True)

        try:
            await asyncio.to_thread(self._clone_repository, repo_url=repo_url, directory=Path(target_path))
        except GitCommandError as e:
            self.logger.warning(f"Cloning {repo_url} failed: {e}")
            return error(str(e.stderr).strip() or str(e))
        except GitError as e:
            # Refused before git ran, e.g. an `ext::` URL, or no git binary.
            self.logger.warning(f"Cloning {repo_url} was refused: {e}")
            return error(str(e))

        self.logger.info(f"Cloned repository {repo_url} to {target_path}")

        return CloneResult(
            success=True,
            repo_path=repository_name,
            full_path=str(target_path),
            message=f'Repository cloned. Use repo_path: "{repository_name}" with other git tools.',
        ).model_dump_json(indent=2, exclude_none=True)

    async def git_status(self, explanation: EXPLANATION, repo_path: REPO_PATH = None, expected_repo: EXPECTED_REPO = None) -> str:
        """Get the current git status including branch name, staged/unstaged changes.
        IMPORTANT: Always specify repo_path when working on cloned repositories."""

        working_directory, verification_error = await self._resolve_and_verify("git_status", explanation, repo_path, expected_repo)
        if verification_error:
            return verification_error

        status_result, branch_result = await asyncio.gather(
            self.executor.run(["git", "status", "--porcelain"], working_directory),
            self.executor.run(["git", "branch", "--show-current"], working_directory),
        )

        if not status_result.success:
            return error(status_result.stderr)

        changes: list[GitStatusChange] = parse_porcelain(status_result.stdout)

        return to_json(GitStatus(branch=branch_result.stdout.strip(), changes=changes, clean=not changes))

    async def git_checkout(
        self,
        explanation: EXPLANATION,
        branch_name: Annotated[str, Field(description="Name of the branch to checkout.")],
        repo_path: REPO_PATH = None,
        expected_repo: EXPECTED_REPO = None,
    ) -> str:
        """Switch to an existing git branch. Use this to work on existing PR branches."""

        working_directory, verification_error = await self._resolve_and_verify("git_checkout", explanation, repo_path, expected_repo)
        if verification_error:
            return verification_error

        _ = await self.executor.run(["git", "fetch", "origin"], working_directory)

        result: CommandResult = await self.executor.run(["git", "checkout", branch_name], working_directory)

        # A fresh clone has no local branch for a PR head that was never checked out.
        if not result.success and UNKNOWN_REF_MARKER in result.stderr:
            self.logger.info(f"No local branch {branch_name}, creating it from origin/{branch_name}")
            result = await self.executor.run(["git", "checkout", "-b", branch_name, f"origin/{branch_name}"], working_directory)

        if not result.success:
            return error(result.stderr)

        return f"Switched to branch: {branch_name}"

    async def git_create_branch(
        self,
        explanation: EXPLANATION,
        branch_name: Annotated[str, Field(description="Name for the new branch (e.g., 'fix/issue-123-add-feature').")],
        repo_path: REPO_PATH = None,
        expected_repo: EXPECTED_REPO = None,
    ) -> str:
        """Create a NEW git branch and switch to it. Use git_checkout for existing branches."""

        working_directory, verification_error = await self._resolve_and_verify("git_create_branch", explanation, repo_path, expected_repo)
        if verification_error:
            return verification_error

        result: CommandResult = await self.executor.run(["git", "checkout", "-b", branch_name], working_directory)

        if not result.success:
            return error(result.stderr)

        return f"Created and switched to branch: {branch_name}"

    async def git_add(self, explanation: EXPLANATION, files: FILES, repo_path: REPO_PATH = None, expected_repo: EXPECTED_REPO = None) -> str:
        """Stage files for commit. Use ['.'] to stage all changes."""

        working_directory, verification_error = await self._resolve_and_verify("git_add", explanation, repo_path, expected_repo)
        if verification_error:
            return verification_error

        result: CommandResult = await self.executor.run(["git", "add", *files], working_directory)

        if not result.success:
            return error(result.stderr)

        return f"Staged files: {', '.join(files)}"

    async def git_commit(
        self, explanation: EXPLANATION, message: COMMIT_MESSAGE, repo_path: REPO_PATH = None, expected_repo: EXPECTED_REPO = None
    ) -> str:
        """Commit staged changes with a message."""

        working_directory, verification_error = await self._resolve_and_verify("git_commit", explanation, repo_path, expected_repo)
        if verification_error:
            return verification_error

        result: CommandResult = await self.executor.run(["git", "commit", "-m", message], working_directory)

        if not result.success:
            # git reports "nothing to commit" on stdout
            return error(result.stderr or result.stdout)

        return f"Changes committed successfully:\n{result.stdout}"

    async def git_push(
        self,
        explanation: EXPLANATION,
        set_upstream: SET_UPSTREAM = True,
        repo_path: REPO_PATH = None,
        expected_repo: EXPECTED_REPO = None,
    ) -> str:
        """Push the current branch to the remote repository.
        NOTE: Cannot push to main/master directly - must use a feature branch."""

        working_directory, verification_error = await self._resolve_and_verify("git_push", explanation, repo_path, expected_repo)
        if verification_error:
            return verification_error

        branch_result: CommandResult = await self.executor.run(["git", "branch", "--show-current"], working_directory)

        if not branch_result.success:
            return error(branch_result.stderr)

        branch: str = branch_result.stdout.strip()

        if not branch:
            return error("HEAD is detached. Check out or create a branch before pushing.")

        if self.safety_policy.is_protected_branch(branch):
            self.logger.warning(f"Blocked push to protected branch {branch} in {working_directory}")
            return error(
                f"Cannot push directly to '{branch}'. Create a feature branch first using git_create_branch, "
                "then push and create a pull request."
            )

        argv: list[str] = ["git", "push"]
        if set_upstream:
            argv.extend(["-u", "origin", branch])

        result: CommandResult = await self.executor.run(argv, working_directory)

        if not result.success:
            return error(result.stderr)

        return f"Pushed branch '{branch}' to remote\n{result.stdout or result.stderr}"
