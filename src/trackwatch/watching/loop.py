"""The poll loop that ties scanning, detection, actions, and snapshots together.

Each pass walks the targets in config order. For a target it moves through
the states:

    IDLE -> SCANNING -> DETECTING -> ACTING -> COMMITTING -> IDLE

ACTING runs the target's whole command list once per changed file, and
COMMITTING only happens when every command succeeded. A failed pipeline
leaves the snapshot untouched, so the same change is detected and retried
on the next pass, with no retry limit.

Fatal errors (unreadable directory or file, database failure, unstartable
command) are written to the target log and propagate to the caller.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from logging import Logger
from typing import Any

from trackwatch.actions import ActionOutcome, ActionRunner
from trackwatch.config.schema import DEFAULT_INTERVAL, Target
from trackwatch.detection import ChangeDetector
from trackwatch.errors import FatalError
from trackwatch.logging import TRACE, get_logger, get_target_logger
from trackwatch.scanning import scan_directory
from trackwatch.store import SnapshotStore

log = get_logger("watching")


class WatchState(Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    DETECTING = "detecting"
    ACTING = "acting"
    COMMITTING = "committing"


@dataclass
class FileReport:
    """What happened to one changed file during a pass."""

    filename: str
    outcome: ActionOutcome
    committed: bool = False
    record_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "commands": self.outcome.commands_run,
            "success": self.outcome.success,
            "committed": self.committed,
            "record_id": self.record_id,
        }


@dataclass
class TargetReport:
    """Result of one pass over a single target."""

    root: str
    tracked: list[str] = field(default_factory=list)
    changes: list[FileReport] = field(default_factory=list)

    @property
    def committed(self) -> list[str]:
        return [c.filename for c in self.changes if c.committed]

    @property
    def failed(self) -> list[str]:
        return [c.filename for c in self.changes if not c.committed]


@dataclass
class CycleReport:
    """Result of one full pass over all targets."""

    number: int
    targets: list[TargetReport] = field(default_factory=list)
    started_at: float = field(default_factory=time.time)
    finished_at: float | None = None

    @property
    def success(self) -> bool:
        return all(not t.failed for t in self.targets)

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "targets": [
                {
                    "root": t.root,
                    "tracked": list(t.tracked),
                    "changes": [c.to_dict() for c in t.changes],
                }
                for t in self.targets
            ],
        }


class WatchLoop:
    """Polls every target forever, one after another.

    The loop owns no resources: the snapshot store is opened by the caller
    and passed in, and stays open for the loop's whole life.

    Example:
        with SnapshotStore(db.path) as store:
            loop = WatchLoop(config.targets, store, interval=config.interval)
            await loop.run()
    """

    def __init__(
        self,
        targets: Sequence[Target],
        store: SnapshotStore,
        runner: ActionRunner | None = None,
        detector: ChangeDetector | None = None,
        interval: float = DEFAULT_INTERVAL,
        target_logger: Callable[[Target], Logger] = get_target_logger,
    ) -> None:
        """Initialize the loop.

        Args:
            targets: Targets in the order they are polled.
            store: Open snapshot store shared by detection and commits.
            runner: Action runner. Defaults to a subprocess-backed runner.
            detector: Change detector. Defaults to one reading ``store``.
            interval: Seconds to sleep after each full pass.
            target_logger: Factory for each target's log sink.
        """
        self._targets = list(targets)
        self._store = store
        self._runner = runner or ActionRunner()
        self._detector = detector or ChangeDetector(store)
        self._interval = max(0.0, interval)
        self._target_logger = target_logger

        self._state = WatchState.IDLE
        self._cycles = 0
        self._running = False
        self._sleep_task: asyncio.Future[None] | None = None

    @property
    def interval(self) -> float:
        """Get the sleep between passes in seconds."""
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        self._interval = max(0.0, value)

    @property
    def state(self) -> WatchState:
        return self._state

    @property
    def cycles(self) -> int:
        """Number of completed passes."""
        return self._cycles

    @property
    def targets(self) -> list[Target]:
        return list(self._targets)

    def _enter(self, state: WatchState) -> None:
        log.log(TRACE, "%s -> %s", self._state.value, state.value)
        self._state = state

    async def run_target(self, target: Target) -> TargetReport:
        """Run scan, detect, act, and commit for one target."""
        target_log = self._target_logger(target)
        report = TargetReport(root=target.path)

        try:
            target_log.info("Tracking: %s", target.path)
            self._enter(WatchState.SCANNING)
            report.tracked = scan_directory(target, target_log)

            for filename in report.tracked:
                self._enter(WatchState.DETECTING)
                detection = self._detector.check(target.path, filename)
                if not detection.changed:
                    continue

                log.info("Change detected: %s in %s", filename, target.path)
                self._enter(WatchState.ACTING)
                outcome = await self._runner.run(target, target_log)
                file_report = FileReport(filename=filename, outcome=outcome)
                report.changes.append(file_report)

                if not outcome.success:
                    log.warning(
                        "Actions failed for %s in %s; will retry next pass",
                        filename,
                        target.path,
                    )
                    continue

                self._enter(WatchState.COMMITTING)
                record = self._store.record(target.path, filename, detection.content)
                file_report.committed = True
                file_report.record_id = record.id
        except FatalError as e:
            target_log.error(str(e))
            raise
        finally:
            self._enter(WatchState.IDLE)

        return report

    async def run_cycle(self) -> CycleReport:
        """Run one full pass over all targets in order."""
        report = CycleReport(number=self._cycles + 1)
        for target in self._targets:
            report.targets.append(await self.run_target(target))
        report.finished_at = time.time()
        self._cycles += 1
        return report

    async def run(
        self,
        max_cycles: int | None = None,
        on_cycle: Callable[[CycleReport], None] | None = None,
    ) -> None:
        """Poll until stopped, cancelled, or max_cycles passes have run.

        Args:
            max_cycles: Stop after this many passes. None runs forever.
            on_cycle: Called with each pass's report.
        """
        if self._running:
            log.warning("WatchLoop already running")
            return

        self._running = True
        log.info(
            "Watching %d target(s) (interval: %.1fs)", len(self._targets), self._interval
        )

        try:
            while self._running:
                report = await self.run_cycle()
                if on_cycle is not None:
                    on_cycle(report)

                if max_cycles is not None and self._cycles >= max_cycles:
                    break
                if not self._running:
                    break

                await self._sleep()
        except asyncio.CancelledError:
            log.info("WatchLoop cancelled")
            raise
        finally:
            self._running = False

    async def _sleep(self) -> None:
        """Wait out the interval, returning early if stop() is called."""
        self._sleep_task = asyncio.ensure_future(asyncio.sleep(self._interval))
        try:
            await self._sleep_task
        except asyncio.CancelledError:
            # Cancelled by stop(); anything else is an outer cancellation
            if self._running:
                raise
        finally:
            self._sleep_task = None

    def stop(self) -> None:
        """Stop after the current pass, cutting short any pending sleep."""
        self._running = False
        if self._sleep_task and not self._sleep_task.done():
            self._sleep_task.cancel()
        log.info("WatchLoop stopping")

    def is_running(self) -> bool:
        return self._running
