"""Content-based change detection."""

from __future__ import annotations

import os
from dataclasses import dataclass

from trackwatch.errors import SourceReadError
from trackwatch.logging import TRACE, get_logger
from trackwatch.store import SnapshotStore, decode_content

log = get_logger("detection")


@dataclass(frozen=True)
class Detection:
    """Result of comparing one file against its latest snapshot.

    Attributes:
        filename: File name relative to the target root.
        content: Current on-disk content, the value to commit on success.
        changed: True if content differs from the latest snapshot.
    """

    filename: str
    content: str
    changed: bool


def read_local_content(root: str, filename: str) -> str:
    """Read a file's exact content as text.

    Raises:
        SourceReadError: If the file cannot be read.
    """
    file_path = os.path.join(root, filename)
    try:
        with open(file_path, "rb") as f:
            return decode_content(f.read())
    except OSError as e:
        raise SourceReadError(f"Cannot read {file_path}: {e}", path=root) from e


class ChangeDetector:
    """Compares on-disk content with the snapshot store.

    A file with no snapshot is compared against an empty baseline, so its
    first sighting is always a change, even when the file is empty.
    """

    def __init__(self, store: SnapshotStore) -> None:
        self._store = store

    def check(self, root: str, filename: str) -> Detection:
        content = read_local_content(root, filename)
        recorded = self._store.latest(root, filename)
        first_seen = recorded == "" and not self._store.has_record(root, filename)
        changed = first_seen or content != recorded
        log.log(TRACE, "%s in %s: changed=%s", filename, root, changed)
        return Detection(filename=filename, content=content, changed=changed)

    def changed(self, root: str, filename: str) -> bool:
        """Return True iff the file differs from its latest snapshot."""
        return self.check(root, filename).changed
