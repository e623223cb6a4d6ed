"""Configuration schema dataclasses for trackwatch.

Targets are frozen: one instance drives one independent monitoring stream
and never changes after the config is loaded.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

DEFAULT_INTERVAL = 10.0
DEFAULT_TARGET_LOG = "trackwatch.log"
DEFAULT_DB_PATH = ".trackwatch/snapshots.db"


@dataclass(frozen=True)
class Target:
    """One configured watch unit.

    Example Config.yaml entry:
        - path: /srv/app/
          commands:
            - make test
            - make deploy
          exclude_regex:
            - '.*\\.log$'
          include_regex:
            - 'debug\\.log$'
          log: /var/log/app-watch.log
    """

    path: str  # Root directory, watched one level deep
    commands: tuple[str, ...] = ()  # Program + args, split on whitespace
    exclude: tuple[str, ...] = ()  # Regexes, searched anywhere in the name
    include: tuple[str, ...] = ()  # Regexes that re-admit excluded names
    log: str = DEFAULT_TARGET_LOG  # Append-only log file for this target

    @property
    def exclude_patterns(self) -> list[re.Pattern[str]]:
        return [re.compile(p) for p in self.exclude]

    @property
    def include_patterns(self) -> list[re.Pattern[str]]:
        return [re.compile(p) for p in self.include]


@dataclass
class LoggingConfig:
    """Process logging configuration."""

    level: str | None = None  # Default: "INFO"
    verbose: int | None = None  # 0-4, overrides level when set
    file: str | None = None  # Process log file (target logs are separate)


@dataclass
class DatabaseConfig:
    """Snapshot store location."""

    path: str = DEFAULT_DB_PATH  # SQLite file, ":memory:" for tests


@dataclass
class Config:
    """Root configuration object."""

    targets: list[Target] = field(default_factory=list)
    interval: float = DEFAULT_INTERVAL  # Seconds to sleep after each full pass
    command_timeout: float | None = None  # Per-command timeout, None waits forever
    logging: LoggingConfig = field(default_factory=LoggingConfig)
