from logging import Logger
from pathlib import Path
from typing import Annotated, Literal

import click
from fastmcp import FastMCP
from fastmcp.server.middleware.logging import LoggingMiddleware
from fastmcp.utilities.logging import configure_logging, get_logger
from pydantic import Field

from issue_to_pr_mcp.clients.github import IssueToPrClient, get_githubkit_client
from issue_to_pr_mcp.config import AgentConfig
from issue_to_pr_mcp.servers.git import GitServer
from issue_to_pr_mcp.servers.github import GitHubServer
from issue_to_pr_mcp.servers.prompts.issue_to_pr import issue_to_pr_prompt
from issue_to_pr_mcp.servers.shared.errors import ConfigurationError
from issue_to_pr_mcp.servers.shell import ShellServer
from issue_to_pr_mcp.workspace.executor import CommandExecutor

logger: Logger = get_logger(name=__name__)

SERVER_NAME = "Issue-to-PR Agent"


def new_mcp_server(config: AgentConfig) -> FastMCP[None]:
    """Build the server with every git, shell and GitHub tool registered against `config`."""

    mcp: FastMCP[None] = FastMCP[None](name=SERVER_NAME)

    mcp.add_middleware(middleware=LoggingMiddleware(include_payloads=True, logger=logger))

    executor: CommandExecutor = CommandExecutor(logger=logger)

    git_server: GitServer = GitServer(
        working_directory=config.working_directory, safety_policy=config.safety_policy, executor=executor, logger=logger
    )
    _ = git_server.register_tools(fastmcp=mcp)

    shell_server: ShellServer = ShellServer(
        working_directory=config.working_directory, safety_policy=config.safety_policy, executor=executor, logger=logger
    )
    _ = shell_server.register_tools(fastmcp=mcp)

    github_client: IssueToPrClient = IssueToPrClient(
        githubkit_client=get_githubkit_client(token=config.github_token.get_secret_value()), logger=logger
    )
    github_server: GitHubServer = GitHubServer(client=github_client, logger=logger)
    _ = github_server.register_tools(fastmcp=mcp)

    @mcp.prompt(name="issue_to_pr_workflow")
    def issue_to_pr_workflow(
        task: Annotated[str, Field(description="The issue or pull request to work on, e.g. `Implement owner/repo#123`.")],
    ) -> str:
        """Instructions for turning a GitHub issue or pull request review into a pull request."""
        return issue_to_pr_prompt(task=task)

    logger.info(f"{SERVER_NAME} ready, cloning repositories under {config.working_directory}")

    return mcp


@click.command()
@click.option(
    "--mcp-transport",
    type=click.Choice(["stdio", "streamable-http"]),
    default="stdio",
    help="The transport to run the MCP server on",
)
@click.option(
    "--workspace-base",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="The directory issues_workspace is created in (defaults to $ISSUES_WORKSPACE_BASE, then the current directory)",
)
def run_mcp(mcp_transport: Literal["stdio", "streamable-http"], workspace_base: Path | None):
    configure_logging()

    try:
        config: AgentConfig = AgentConfig.from_env(working_directory=workspace_base)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    new_mcp_server(config=config).run(transport=mcp_transport)


if __name__ == "__main__":
    run_mcp()
