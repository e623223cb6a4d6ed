"""Poll loop for trackwatch.

Polls configured targets at a fixed interval, runs their action pipelines
on content changes, and records new snapshots after successful runs.
"""

from trackwatch.watching.loop import (
    CycleReport,
    FileReport,
    TargetReport,
    WatchLoop,
    WatchState,
)

__all__ = [
    "CycleReport",
    "FileReport",
    "TargetReport",
    "WatchLoop",
    "WatchState",
]
