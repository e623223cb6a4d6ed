"""Shared test helpers."""

from __future__ import annotations

import sys

import pytest

from trackwatch.actions import CommandResult

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX commands")


class FakeExecutor:
    """Records commands and returns scripted results.

    Commands listed in ``failing`` exit 1; everything else exits 0. Stdout
    is ``"<command> out"`` so tests can check what reached the log.
    """

    def __init__(self, failing: set[str] | None = None) -> None:
        self.failing = failing or set()
        self.calls: list[tuple[str, str]] = []

    async def execute(
        self, command: str, cwd: str, timeout: float | None = None
    ) -> CommandResult:
        self.calls.append((command, cwd))
        failed = command in self.failing
        return CommandResult(
            command=command,
            exit_code=1 if failed else 0,
            stdout=f"{command} out\n",
            stderr=f"{command} err\n" if failed else "",
            status="error" if failed else "ok",
            duration_ms=1.0,
        )

    @property
    def commands(self) -> list[str]:
        return [c for c, _ in self.calls]
