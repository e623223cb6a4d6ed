"""Directory scanning with exclude/include filtering.

A scan lists the files directly under a target root (subdirectories are
skipped) and filters them in two passes:

1. Excludes: any name matched by any exclude pattern is dropped.
2. Includes: any name matched by any include pattern is re-admitted,
   even if an exclude dropped it.

Patterns are regular expressions searched anywhere in the file name, so
``\\.log$`` matches ``debug.log`` without needing a leading ``.*``.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Sequence
from logging import Logger

from trackwatch.config.schema import Target
from trackwatch.errors import ScanError
from trackwatch.logging import get_logger

log = get_logger("scanning")


def _matches(name: str, patterns: Iterable[re.Pattern[str]]) -> bool:
    return any(p.search(name) for p in patterns)


def apply_excludes(
    names: Sequence[str], patterns: Sequence[re.Pattern[str]]
) -> dict[str, bool]:
    """First pass: mark every name as included unless an exclude matches.

    Returns:
        Ordered mapping of name -> included flag.
    """
    return {name: not _matches(name, patterns) for name in names}


def apply_includes(
    states: dict[str, bool], patterns: Sequence[re.Pattern[str]]
) -> dict[str, bool]:
    """Second pass: re-admit every name an include pattern matches."""
    return {name: included or _matches(name, patterns) for name, included in states.items()}


def filter_names(
    names: Sequence[str],
    exclude: Sequence[re.Pattern[str]] = (),
    include: Sequence[re.Pattern[str]] = (),
) -> list[str]:
    """Apply both passes and keep the surviving names in their input order."""
    states = apply_includes(apply_excludes(names, exclude), include)
    return [name for name, included in states.items() if included]


def list_files(root: str) -> list[str]:
    """List regular files directly under root, in directory order.

    Raises:
        ScanError: If the directory cannot be read.
    """
    try:
        with os.scandir(root) as entries:
            return [entry.name for entry in entries if entry.is_file()]
    except OSError as e:
        raise ScanError(f"Cannot read directory {root}: {e}", path=root) from e


def scan_directory(target: Target, target_log: Logger | None = None) -> list[str]:
    """Build the working set of files for one poll cycle.

    Args:
        target: Target to scan.
        target_log: Logger for the target's own log; each tracked file is
            reported there.

    Returns:
        File names in directory-listing order that survived filtering.
    """
    names = list_files(target.path)
    tracked = filter_names(names, target.exclude_patterns, target.include_patterns)

    log.debug("Scanned %s: %d of %d file(s) tracked", target.path, len(tracked), len(names))
    if target_log is not None:
        for name in tracked:
            target_log.info("File tracked: %s", name)
    return tracked
