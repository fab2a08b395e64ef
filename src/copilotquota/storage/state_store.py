"""Summary: Read-only access to an editor's global state database.

Importance: The editor keeps its encrypted secrets in a SQLite key-value table.
Alternatives: Shell out to the sqlite3 CLI.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from copilotquota.errors import StoreError, StoreUnavailable


logger = logging.getLogger(__name__)

STATE_TABLE = "ItemTable"


class StateStore:
    """Summary: Exact-match key lookups against a state.vscdb file.

    Importance: Never creates, migrates, or writes to the editor's database.
    Alternatives: Copy the database to a temp file before reading.
    """

    def __init__(self, db_path: str | Path) -> None:
        """Summary: Initialize the reader with a database path.

        Importance: The file is only touched when a lookup runs.
        Alternatives: Open a long-lived connection in the constructor.
        """

        self._db_path = Path(db_path)

    def get(self, key: str) -> str | None:
        """Summary: Return the value stored under key, or None when the key is absent.

        Importance: Keys such as secret locators are long JSON strings and are matched verbatim.
        Alternatives: Load the whole table into a dictionary.
        """

        with self._connection() as connection:
            try:
                cursor = connection.execute(
                    f"SELECT value FROM {STATE_TABLE} WHERE key = ? LIMIT 1",
                    (key,),
                )
                row = cursor.fetchone()
            except sqlite3.Error as exc:
                raise StoreError(f"Failed to query editor database: {exc}") from exc
        if row is None or row[0] is None:
            return None
        value = row[0]
        if isinstance(value, bytes):
            try:
                return value.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise StoreError("Editor database value is not UTF-8 text") from exc
        return str(value)

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Summary: Context manager for a read-only SQLite connection.

        Importance: Ensures the handle is closed on every exit path.
        Alternatives: Keep a single long-lived connection.
        """

        if not self._db_path.is_file():
            raise StoreUnavailable(f"Editor database not found: {self._db_path}")
        uri = self._db_path.resolve().as_uri() + "?mode=ro"
        try:
            connection = sqlite3.connect(uri, uri=True)
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"Failed to open editor database: {exc}") from exc
        logger.debug("Opened %s read-only.", self._db_path)
        try:
            yield connection
        finally:
            connection.close()
