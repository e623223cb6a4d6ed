"""Error types for trackwatch.

Two severities exist. Fatal errors are exceptions that propagate up to the
entry point, which logs them and exits. Recoverable failures (a command
exiting non-zero) are never raised; they are reported as values on
ActionOutcome so the watch loop can continue with the next cycle.
"""

from __future__ import annotations


class TrackwatchError(Exception):
    """Base class for all trackwatch errors."""


class FatalError(TrackwatchError):
    """An error the watcher cannot continue from.

    Attributes:
        path: Target root the error relates to, if known.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class ConfigError(FatalError):
    """Config file missing, unparsable, or describing invalid targets."""


class ScanError(FatalError):
    """A target root directory could not be listed."""


class SourceReadError(FatalError):
    """A watched file could not be read or stat'ed."""


class SnapshotStoreError(FatalError):
    """The snapshot database could not be opened, queried, or written."""


class CommandSpawnError(FatalError):
    """A command could not be started and no exit status is available."""
