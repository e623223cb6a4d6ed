"""Action pipeline execution.

Runs a target's configured commands in order when a change is detected,
stopping at the first failure.
"""

from trackwatch.actions.executor import CommandExecutor, SubprocessCommandExecutor, split_command
from trackwatch.actions.result import ActionOutcome, CommandResult
from trackwatch.actions.runner import ActionRunner

__all__ = [
    "ActionOutcome",
    "ActionRunner",
    "CommandExecutor",
    "CommandResult",
    "SubprocessCommandExecutor",
    "split_command",
]
