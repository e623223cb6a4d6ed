"""Command and pipeline result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class CommandResult:
    """Result of running one command of an action pipeline.

    Attributes:
        command: The command string as configured.
        exit_code: Process exit code (0 = success), or None if killed/timeout.
        stdout: Captured standard output.
        stderr: Captured standard error.
        status: "ok", "error", "not_found", "denied", or "timeout".
        duration_ms: Execution duration in milliseconds.
    """

    command: str
    exit_code: int | None
    stdout: str
    stderr: str
    status: str  # "ok", "error", "not_found", "denied", "timeout"
    duration_ms: float

    @property
    def success(self) -> bool:
        """True if the command completed with exit code 0."""
        return self.exit_code == 0

    def describe_failure(self) -> str:
        """Human-readable cause, used as the logged error line."""
        if self.status == "timeout":
            return f"{self.command}: timed out"
        if not self.command.strip():
            return "exec: no command"
        if self.status == "not_found":
            return f"{self.command}: executable file not found"
        if self.status == "denied":
            return f"{self.command}: permission denied"
        return f"{self.command}: exit status {self.exit_code}"

    def __repr__(self) -> str:
        if self.success:
            return f"<CommandResult ok, {self.command!r}>"
        return f"<CommandResult {self.status}, exit={self.exit_code}>"


@dataclass
class ActionOutcome:
    """Result of running a target's whole command list.

    A pipeline stops at its first failing command, so ``results`` holds
    every command that ran, and only the last one can be a failure.
    """

    root: str
    results: list[CommandResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(r.success for r in self.results)

    @property
    def failed_command(self) -> CommandResult | None:
        for result in self.results:
            if not result.success:
                return result
        return None

    @property
    def commands_run(self) -> list[str]:
        return [r.command for r in self.results]
