from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PROTECTED_BRANCHES: frozenset[str] = frozenset({"main", "master", "develop", "production"})

DEFAULT_DANGEROUS_COMMANDS: tuple[str, ...] = (
    "rm -rf /",
    "sudo",
    "mkfs",
    "dd if=",
    "> /dev/",
)


class SafetyPolicy(BaseModel):
    """Denylists applied before pushing a branch or running a shell command.

    Both checks are plain string comparisons. They deter obvious mistakes; they do not sandbox anything.
    """

    model_config = ConfigDict(frozen=True)

    protected_branches: frozenset[str] = Field(
        default=DEFAULT_PROTECTED_BRANCHES, description="Branches that may never receive a direct push."
    )
    dangerous_commands: tuple[str, ...] = Field(
        default=DEFAULT_DANGEROUS_COMMANDS, description="Substrings that block a shell command from running."
    )

    @classmethod
    def from_lists(cls, protected_branches: Iterable[str] | None = None, dangerous_commands: Iterable[str] | None = None) -> "SafetyPolicy":
        return cls(
            protected_branches=frozenset(protected_branches) if protected_branches is not None else DEFAULT_PROTECTED_BRANCHES,
            dangerous_commands=tuple(dangerous_commands) if dangerous_commands is not None else DEFAULT_DANGEROUS_COMMANDS,
        )

    def is_protected_branch(self, branch: str) -> bool:
        return branch.lower() in {protected.lower() for protected in self.protected_branches}

    def find_dangerous_command(self, command: str) -> str | None:
        """Return the first denylisted substring found in `command`, if any."""

        for dangerous in self.dangerous_commands:
            if dangerous in command:
                return dangerous

        return None
