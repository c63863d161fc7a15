from logging import Logger
from pathlib import Path
from typing import Annotated, Any

from anyio import Path as AsyncPath
from fastmcp import FastMCP
from fastmcp.tools import Tool
from fastmcp.utilities.logging import get_logger
from pydantic import BaseModel, Field

from issue_to_pr_mcp.servers.shared.annotations import EXPLANATION, REPO_PATH
from issue_to_pr_mcp.servers.shared.utility import error, to_json
from issue_to_pr_mcp.workspace.executor import CommandExecutor, CommandResult
from issue_to_pr_mcp.workspace.policy import SafetyPolicy
from issue_to_pr_mcp.workspace.resolver import WorkspaceRequest

# Checked in order, the first marker file present decides the command.
DEFAULT_TEST_MARKERS: tuple[tuple[str, str], ...] = (
    ("package.json", "npm test"),
    ("deno.json", "deno test"),
    ("Cargo.toml", "cargo test"),
    ("go.mod", "go test ./..."),
    ("pytest.ini", "pytest"),
    ("setup.py", "python -m pytest"),
)

NO_TEST_COMMAND_MESSAGE = (
    "No test command found. Please specify a test_command or ensure the project has a standard test configuration."
)
BLOCKED_COMMAND_MESSAGE = "This command is not allowed for safety reasons."

COMMAND = Annotated[str, Field(description="The shell command to run.")]
TEST_COMMAND = Annotated[str | None, Field(description="Custom test command (auto-detects if not provided).")]


class ShellCommandResult(BaseModel):
    success: bool = Field(description="Whether the command exited with status zero.")
    stdout: str = Field(description="The standard output of the command.")
    stderr: str = Field(description="The standard error of the command.")

    @classmethod
    def from_command_result(cls, command_result: CommandResult) -> "ShellCommandResult":
        return cls(success=command_result.success, stdout=command_result.stdout, stderr=command_result.stderr)


class RunTestsResult(BaseModel):
    success: bool = Field(description="Whether the test command exited with status zero.")
    test_command: str = Field(description="The command that was run.")
    stdout: str = Field(description="The standard output of the test run.")
    stderr: str = Field(description="The standard error of the test run.")
    summary: str = Field(description="A one line verdict on the test run.")


async def detect_test_command(directory: Path, markers: tuple[tuple[str, str], ...] = DEFAULT_TEST_MARKERS) -> str | None:
    """Return the test command of the first marker file found in `directory`, or None when no marker is present."""

    for marker, command in markers:
        if await (AsyncPath(directory) / marker).is_file():
            return command

    return None


class ShellServer:
    """Server for running shell commands and test suites in a workspace repository."""

    def __init__(
        self,
        working_directory: Path,
        safety_policy: SafetyPolicy | None = None,
        executor: CommandExecutor | None = None,
        logger: Logger | None = None,
        test_markers: tuple[tuple[str, str], ...] = DEFAULT_TEST_MARKERS,
    ):
        self.working_directory: Path = working_directory
        self.safety_policy: SafetyPolicy = safety_policy or SafetyPolicy()
        self.logger: Logger = logger or get_logger(name=__name__)
        self.executor: CommandExecutor = executor or CommandExecutor(logger=self.logger)
        self.test_markers: tuple[tuple[str, str], ...] = test_markers

    def register_tools(self, fastmcp: FastMCP[Any]) -> FastMCP[Any]:
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.run_shell))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.run_tests))

        return fastmcp

    async def run_shell(self, explanation: EXPLANATION, command: COMMAND, repo_path: REPO_PATH = None) -> str:
        """Run a shell command in the workspace. Use for running tests, builds, or other development commands."""

        working_directory: Path = WorkspaceRequest(repo_identifier=repo_path, base_working_directory=self.working_directory).resolve()

        if dangerous := self.safety_policy.find_dangerous_command(command):
            self.logger.warning(f"Blocked shell command containing {dangerous!r}: {command}")
            return error(BLOCKED_COMMAND_MESSAGE)

        self.logger.info(f"run_shell `{command}` in {working_directory}: {explanation}")

        result: CommandResult = await self.executor.run(["sh", "-c", command], working_directory)

        return to_json(ShellCommandResult.from_command_result(result))

    async def run_tests(self, explanation: EXPLANATION, test_command: TEST_COMMAND = None, repo_path: REPO_PATH = None) -> str:
        """Run the project's test suite to verify changes work correctly.
        IMPORTANT: Always run tests before committing changes."""

        working_directory: Path = WorkspaceRequest(repo_identifier=repo_path, base_working_directory=self.working_directory).resolve()

        command: str | None = test_command or await detect_test_command(directory=working_directory, markers=self.test_markers)

        if not command:
            return NO_TEST_COMMAND_MESSAGE

        self.logger.info(f"run_tests `{command}` in {working_directory}: {explanation}")

        result: CommandResult = await self.executor.run(["sh", "-c", command], working_directory)

        return to_json(
            RunTestsResult(
                success=result.success,
                test_command=command,
                stdout=result.stdout,
                stderr=result.stderr,
                summary="All tests passed!" if result.success else "Some tests failed. Please fix before committing.",
            )
        )
