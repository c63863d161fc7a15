from collections.abc import Sequence
from logging import Logger
from pathlib import Path
from subprocess import DEVNULL

from anyio import run_process
from fastmcp.utilities.logging import get_logger
from pydantic import BaseModel, Field

logger: Logger = get_logger(name=__name__)


class CommandResult(BaseModel):
    """The outcome of running an external command."""

    success: bool = Field(description="Whether the command exited with status zero.")
    stdout: str = Field(default="", description="The standard output of the command.")
    stderr: str = Field(default="", description="The standard error of the command, or the reason it could not be started.")


def _preview(text: str, limit: int = 200) -> str:
    compact = text.replace("\n", "\\n").strip()
    if not compact:
        return "<empty>"
    if len(compact) <= limit:
        return compact
    return f"{compact[:limit]}..."


class CommandExecutor:
    """Runs external commands and reports failures as results instead of raising."""

    def __init__(self, logger: Logger | None = None):
        self.logger = logger or get_logger(name=__name__)

    async def run(self, argv: Sequence[str], working_directory: Path | str | None = None) -> CommandResult:
        command: list[str] = list(argv)

        self.logger.debug(f"Running {command} in {working_directory or '<cwd>'}")

        try:
            completed = await run_process(command, stdin=DEVNULL, cwd=working_directory, check=False)
        except (OSError, ValueError) as e:
            # ValueError: an argument with an embedded NUL byte
            self.logger.info(f"Could not start {command}: {e}")
            return CommandResult(success=False, stderr=str(e))

        result = CommandResult(
            success=completed.returncode == 0,
            stdout=completed.stdout.decode(errors="replace"),
            stderr=completed.stderr.decode(errors="replace"),
        )

        if not result.success:
            self.logger.info(f"Command {command} exited with {completed.returncode}: {_preview(result.stderr)}")

        return result
