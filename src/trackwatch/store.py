"""Snapshot persistence.

Stores, per (target root, filename), every content version that was
committed after a successful action pipeline:
  changes(id, path, filename, file_content, created_at)

Rows are only ever inserted. The newest row (highest id) for a key is the
authoritative "latest" version; older rows stay available as history.

Content is kept as text on the Python side but stored as the original
bytes, encoded with surrogateescape so arbitrary byte sequences round-trip
exactly.
"""

from __future__ import annotations

import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from types import TracebackType

from trackwatch.errors import SnapshotStoreError, SourceReadError
from trackwatch.logging import get_logger

log = get_logger("store")

ENCODING = "utf-8"
ERRORS = "surrogateescape"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS changes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    path TEXT NOT NULL,
    filename TEXT NOT NULL,
    file_content BLOB NOT NULL,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_changes_key ON changes(path, filename, id);
"""


def encode_content(content: str) -> bytes:
    """Convert text content back to the exact bytes it was read from."""
    return content.encode(ENCODING, ERRORS)


def decode_content(data: bytes) -> str:
    """Interpret raw file bytes as text without losing any byte."""
    return data.decode(ENCODING, ERRORS)


@dataclass(frozen=True)
class SnapshotRecord:
    """One stored version of a file."""

    id: int
    path: str
    filename: str
    content: str
    created_at: datetime  # File mtime when recorded, not commit time


class SnapshotStore:
    """Append-only store of committed file contents, backed by SQLite.

    One connection is opened at construction and reused for every read and
    write until close(). Every statement commits on its own.

    Example:
        with SnapshotStore(".trackwatch/snapshots.db") as store:
            if store.latest("/srv/app", "main.py") != content:
                ...
                store.record("/srv/app", "main.py", content)
    """

    def __init__(self, db_path: str = ":memory:") -> None:
        """Open (and create if needed) the snapshot database.

        Args:
            db_path: SQLite file path, or ":memory:" for testing.

        Raises:
            SnapshotStoreError: If the database cannot be opened or initialized.
        """
        self.db_path = db_path
        self.conn: sqlite3.Connection | None = None
        try:
            if db_path != ":memory:":
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            self.conn = sqlite3.connect(db_path)
            self.conn.row_factory = sqlite3.Row
            self.conn.executescript(_SCHEMA)
            self.conn.commit()
        except (sqlite3.Error, OSError) as e:
            self.close()
            raise SnapshotStoreError(f"Cannot open snapshot store {db_path}: {e}") from e
        log.debug("Opened snapshot store %s", db_path)

    def __enter__(self) -> SnapshotStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self.conn is None

    def _connection(self) -> sqlite3.Connection:
        if self.conn is None:
            raise SnapshotStoreError(f"Snapshot store {self.db_path} is closed")
        return self.conn

    def latest(self, root: str, filename: str) -> str:
        """Get the most recently recorded content for a file.

        Args:
            root: Target root path as configured.
            filename: File name relative to root.

        Returns:
            The newest content, or "" if the file was never recorded.

        Raises:
            SnapshotStoreError: On any database error.
        """
        try:
            row = self._connection().execute(
                "SELECT file_content FROM changes "
                "WHERE path = ? AND filename = ? "
                "ORDER BY id DESC LIMIT 1",
                (root, filename),
            ).fetchone()
        except sqlite3.Error as e:
            raise SnapshotStoreError(f"Cannot read snapshot of {filename}: {e}", path=root) from e

        if row is None:
            return ""
        return decode_content(bytes(row["file_content"]))

    def record(self, root: str, filename: str, content: str) -> SnapshotRecord:
        """Append a new version of a file.

        The timestamp is the file's current on-disk modification time.

        Args:
            root: Target root path as configured.
            filename: File name relative to root.
            content: Content to store (as compared by the change detector).

        Returns:
            The inserted record.

        Raises:
            SourceReadError: If the file can no longer be stat'ed.
            SnapshotStoreError: On any database error.
        """
        file_path = os.path.join(root, filename)
        try:
            mtime = os.stat(file_path).st_mtime
        except OSError as e:
            raise SourceReadError(f"Cannot stat {file_path}: {e}", path=root) from e
        created_at = datetime.fromtimestamp(mtime, tz=timezone.utc)

        conn = self._connection()
        try:
            cursor = conn.execute(
                "INSERT INTO changes (path, filename, file_content, created_at) "
                "VALUES (?, ?, ?, ?)",
                (root, filename, encode_content(content), created_at.isoformat()),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise SnapshotStoreError(f"Cannot record snapshot of {filename}: {e}", path=root) from e

        record_id = cursor.lastrowid
        if record_id is None:
            raise SnapshotStoreError(f"No row id returned for snapshot of {filename}", path=root)
        log.debug("Recorded %s in %s as #%d", filename, root, record_id)
        return SnapshotRecord(
            id=record_id,
            path=root,
            filename=filename,
            content=content,
            created_at=created_at,
        )

    def has_record(self, root: str, filename: str) -> bool:
        """Return True if at least one version of the file was recorded."""
        try:
            row = self._connection().execute(
                "SELECT 1 FROM changes WHERE path = ? AND filename = ? LIMIT 1",
                (root, filename),
            ).fetchone()
        except sqlite3.Error as e:
            raise SnapshotStoreError(f"Cannot read snapshot of {filename}: {e}", path=root) from e
        return row is not None

    def history(self, root: str, filename: str) -> list[SnapshotRecord]:
        """Get every recorded version of a file, oldest first."""
        try:
            rows = self._connection().execute(
                "SELECT id, path, filename, file_content, created_at FROM changes "
                "WHERE path = ? AND filename = ? ORDER BY id ASC",
                (root, filename),
            ).fetchall()
        except sqlite3.Error as e:
            raise SnapshotStoreError(f"Cannot read history of {filename}: {e}", path=root) from e

        return [
            SnapshotRecord(
                id=row["id"],
                path=row["path"],
                filename=row["filename"],
                content=decode_content(bytes(row["file_content"])),
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]

    def count(self, root: str | None = None) -> int:
        """Count stored records, optionally only those of one target root."""
        sql = "SELECT COUNT(*) FROM changes"
        params: tuple[str, ...] = ()
        if root is not None:
            sql += " WHERE path = ?"
            params = (root,)
        try:
            return int(self._connection().execute(sql, params).fetchone()[0])
        except sqlite3.Error as e:
            raise SnapshotStoreError(f"Cannot count snapshots: {e}", path=root) from e

    def close(self) -> None:
        """Release the database connection. Safe to call more than once."""
        if self.conn is not None:
            self.conn.close()
            self.conn = None
            log.debug("Closed snapshot store %s", self.db_path)
