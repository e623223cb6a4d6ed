"""trackwatch: run command pipelines when watched files change."""

__version__ = "0.1.0"

# Public API
from trackwatch.actions import ActionOutcome, ActionRunner, CommandResult
from trackwatch.config import Config, Target, load_config, load_targets
from trackwatch.detection import ChangeDetector
from trackwatch.errors import FatalError, TrackwatchError
from trackwatch.scanning import scan_directory
from trackwatch.store import SnapshotRecord, SnapshotStore
from trackwatch.watching import CycleReport, WatchLoop, WatchState

__all__ = [
    # Config
    "Config",
    "Target",
    "load_config",
    "load_targets",
    # Components
    "ActionOutcome",
    "ActionRunner",
    "ChangeDetector",
    "CommandResult",
    "SnapshotRecord",
    "SnapshotStore",
    "scan_directory",
    # Loop
    "CycleReport",
    "WatchLoop",
    "WatchState",
    # Errors
    "FatalError",
    "TrackwatchError",
]
