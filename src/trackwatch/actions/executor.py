"""Subprocess-based command execution."""

from __future__ import annotations

import asyncio
import time
from typing import Protocol

from trackwatch.actions.result import CommandResult
from trackwatch.errors import CommandSpawnError


def split_command(command: str) -> list[str]:
    """Split a command string on whitespace into program and arguments.

    There is no quoting support: an argument cannot contain spaces.
    """
    return command.split()


class CommandExecutor(Protocol):
    """Protocol for running one command and waiting for it to exit.

    Implementations:
    - SubprocessCommandExecutor: local asyncio subprocess execution
    """

    async def execute(
        self,
        command: str,
        cwd: str,
        timeout: float | None = None,
    ) -> CommandResult:
        """Run a command to completion.

        Args:
            command: Command string; split on whitespace into program + args.
            cwd: Working directory for the process.
            timeout: Timeout in seconds. None means no timeout.

        Returns:
            CommandResult with exit code, stdout, stderr, and status.
        """
        ...


class SubprocessCommandExecutor:
    """Execute commands using asyncio subprocesses.

    Stdout and stderr are captured separately. A program that cannot be
    found or executed yields a failed result (exit 127 / 126) instead of an
    exception, like a shell would report it.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    def _decode(self, data: bytes | None) -> str:
        return (data or b"").decode(self._encoding, errors="replace")

    async def execute(
        self,
        command: str,
        cwd: str,
        timeout: float | None = None,
    ) -> CommandResult:
        """Run a command to completion.

        Raises:
            CommandSpawnError: If the process could not be started for a
                reason other than a missing or non-executable program.
        """
        start_time = time.perf_counter()
        argv = split_command(command)

        def elapsed() -> float:
            return (time.perf_counter() - start_time) * 1000

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
            )
        except FileNotFoundError:
            return CommandResult(
                command=command,
                exit_code=127,  # Standard "command not found" exit code
                stdout="",
                stderr=f"Command not found: {argv[0]}",
                status="not_found",
                duration_ms=elapsed(),
            )
        except PermissionError:
            return CommandResult(
                command=command,
                exit_code=126,  # Standard "permission denied" exit code
                stdout="",
                stderr=f"Permission denied: {argv[0]}",
                status="denied",
                duration_ms=elapsed(),
            )
        except OSError as e:
            raise CommandSpawnError(f"Cannot start {command!r} in {cwd}: {e}", path=cwd) from e

        try:
            if timeout is not None:
                stdout_data, stderr_data = await asyncio.wait_for(
                    process.communicate(),
                    timeout=timeout,
                )
            else:
                stdout_data, stderr_data = await process.communicate()
        except asyncio.TimeoutError:
            try:
                process.kill()
                await process.wait()
            except ProcessLookupError:
                pass  # Process already gone

            return CommandResult(
                command=command,
                exit_code=None,
                stdout="",
                stderr=f"Command timed out after {timeout}s",
                status="timeout",
                duration_ms=elapsed(),
            )

        exit_code = process.returncode
        return CommandResult(
            command=command,
            exit_code=exit_code,
            stdout=self._decode(stdout_data),
            stderr=self._decode(stderr_data),
            status="ok" if exit_code == 0 else "error",
            duration_ms=elapsed(),
        )
