"""SQLite plumbing for the local preference store."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .config import resolve_sqlite_path


_PREFERENCES_SCHEMA = """
CREATE TABLE IF NOT EXISTS preferences (
    key TEXT PRIMARY KEY,
    value_json TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    pending_sync INTEGER NOT NULL DEFAULT 0
)
"""


@contextmanager
def preferences_connection(path: Path | None = None) -> Iterator[sqlite3.Connection]:
    """Yield a connection with the preferences table in place.

    Commits when the block exits cleanly and rolls back otherwise.
    """

    db_path = path or resolve_sqlite_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    connection = sqlite3.connect(db_path, check_same_thread=False)
    connection.row_factory = sqlite3.Row
    try:
        connection.execute(_PREFERENCES_SCHEMA)
        yield connection
        connection.commit()
    except Exception:
        connection.rollback()
        raise
    finally:
        connection.close()
