import logging
import sqlite3
from sqlite3 import Connection
from typing import Any, Optional, Sequence

logger = logging.getLogger(__name__)


def _casefold(value: Any) -> Any:
    return value.casefold() if isinstance(value, str) else value


class SqliteClient:
    """SQLite database client with connection management."""

    def __init__(self, connection_string: str):
        self.connection_string = connection_string
        # The repository hands calls to a worker thread, one at a time
        self._connection = sqlite3.connect(self.connection_string, check_same_thread=False)
        self._connection.row_factory = sqlite3.Row
        # SQLite LOWER() and LIKE only fold ASCII letters
        self._connection.create_function("casefold", 1, _casefold, deterministic=True)
        logger.debug(f"Opened SQLite database at {connection_string}")

    @property
    def connection(self) -> Connection:
        """Get the database connection."""
        return self._connection

    def execute_script(self, script: str) -> None:
        """Execute several SQL statements at once (schema setup)."""
        self._connection.executescript(script)
        self._connection.commit()

    def execute_query(self, query: str, params: Sequence[Any] = ()) -> list[sqlite3.Row]:
        """Execute a read query and return all rows."""
        cursor = self._connection.execute(query, params)
        try:
            return cursor.fetchall()
        finally:
            cursor.close()

    def execute_write(self, query: str, params: Sequence[Any] = ()) -> int:
        """Execute an UPDATE or DELETE, commit, and return the affected row count."""
        with self._connection:
            cursor = self._connection.execute(query, params)
        return cursor.rowcount

    def execute_insert(self, query: str, params: Sequence[Any]) -> Optional[int]:
        """Execute an INSERT, commit, and return the new row id."""
        with self._connection:
            cursor = self._connection.execute(query, params)
        return cursor.lastrowid

    def table_columns(self, table: str) -> set[str]:
        """Names of the columns currently defined on a table."""
        return {row["name"] for row in self.execute_query(f"PRAGMA table_info({table})")}

    def close(self):
        """Close the database connection."""
        self._connection.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit with cleanup."""
        self.close()
        return False
