"""Sequential action pipeline execution."""

from __future__ import annotations

from logging import Logger

from trackwatch.actions.executor import CommandExecutor, SubprocessCommandExecutor, split_command
from trackwatch.actions.result import ActionOutcome, CommandResult
from trackwatch.config.schema import Target
from trackwatch.logging import get_logger

log = get_logger("actions")


class ActionRunner:
    """Runs a target's commands in order inside the target root.

    The pipeline stops at the first command that fails to start, exits
    non-zero, or times out. A blank command counts as one that fails to
    start. Later commands never run. A failure is reported on the returned
    ActionOutcome, never raised.

    Example:
        runner = ActionRunner(timeout=600)
        outcome = await runner.run(target, target_log)
        if outcome.success:
            store.record(target.path, filename, content)
    """

    def __init__(
        self,
        executor: CommandExecutor | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            executor: Command executor. Defaults to SubprocessCommandExecutor.
            timeout: Per-command timeout in seconds. None waits forever.
        """
        self._executor = executor or SubprocessCommandExecutor()
        self._timeout = timeout

    async def run(self, target: Target, target_log: Logger | None = None) -> ActionOutcome:
        """Execute every configured command of a target.

        Stdout of each command is appended to the target log, followed by
        stderr when there is any.

        Args:
            target: Target whose commands run, with its root as cwd.
            target_log: Logger for the target's own log file.

        Returns:
            ActionOutcome listing the commands that ran and their results.
        """
        sink = target_log or log
        outcome = ActionOutcome(root=target.path)

        for command in target.commands:
            if split_command(command):
                log.debug("Running %r in %s", command, target.path)
                result = await self._executor.execute(
                    command, cwd=target.path, timeout=self._timeout
                )
            else:
                result = CommandResult(
                    command=command,
                    exit_code=127,
                    stdout="",
                    stderr="",
                    status="not_found",
                    duration_ms=0.0,
                )
            outcome.results.append(result)

            if result.stdout:
                sink.info(result.stdout.rstrip("\n"))
            if result.stderr:
                sink.warning("stderr from %s: %s", command, result.stderr.rstrip("\n"))

            if not result.success:
                sink.error(result.describe_failure())
                return outcome

        sink.info("Finished")
        return outcome
