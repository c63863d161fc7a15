import os
from collections.abc import Mapping
from pathlib import Path
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from issue_to_pr_mcp.servers.shared.errors import ConfigurationError
from issue_to_pr_mcp.workspace.policy import SafetyPolicy

GITHUB_TOKEN_ENV_VARS: tuple[str, ...] = ("GITHUB_TOKEN", "GITHUB_PERSONAL_ACCESS_TOKEN")
ANTHROPIC_API_KEY_ENV_VAR = "ANTHROPIC_API_KEY"
WORKSPACE_BASE_ENV_VAR = "ISSUES_WORKSPACE_BASE"


class AgentConfig(BaseModel):
    """Process-wide configuration, built once at startup and handed to every server."""

    model_config = ConfigDict(frozen=True)

    github_token: SecretStr = Field(description="The token used to authenticate with the GitHub API.")
    anthropic_api_key: SecretStr = Field(description="The API key of the language model provider driving the agent.")
    working_directory: Path = Field(default_factory=Path.cwd, description="The directory `issues_workspace` is created in.")
    safety_policy: SafetyPolicy = Field(default_factory=SafetyPolicy, description="The protected branches and blocked shell commands.")

    @field_validator("working_directory")
    @classmethod
    def validate_working_directory(cls, working_directory: Path) -> Path:
        return working_directory.resolve()

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        working_directory: Path | None = None,
        safety_policy: SafetyPolicy | None = None,
    ) -> Self:
        """Build the configuration from environment variables.

        An explicit `working_directory` takes precedence over `ISSUES_WORKSPACE_BASE`, which takes precedence over the
        current directory.

        Raises:
            ConfigurationError: If the GitHub token or the model provider API key is missing.
        """

        if environ is None:
            environ = os.environ

        github_token: str | None = next((environ[name] for name in GITHUB_TOKEN_ENV_VARS if environ.get(name)), None)
        anthropic_api_key: str | None = environ.get(ANTHROPIC_API_KEY_ENV_VAR) or None

        missing: list[str] = []
        if github_token is None:
            missing.append(" or ".join(GITHUB_TOKEN_ENV_VARS))
        if anthropic_api_key is None:
            missing.append(ANTHROPIC_API_KEY_ENV_VAR)

        if github_token is None or anthropic_api_key is None:
            raise ConfigurationError(missing=missing)

        if working_directory is None:
            working_directory = Path(environ[WORKSPACE_BASE_ENV_VAR]) if environ.get(WORKSPACE_BASE_ENV_VAR) else Path.cwd()

        return cls(
            github_token=SecretStr(github_token),
            anthropic_api_key=SecretStr(anthropic_api_key),
            working_directory=working_directory,
            safety_policy=safety_policy or SafetyPolicy(),
        )
