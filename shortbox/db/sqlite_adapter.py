"""
SQLite Backend

Default backing file for the links table. SQLite allows one writer at a
time, which suits a shortener that writes far less than it reads.
"""

from typing import Any, Dict, List

from sqlalchemy.pool import NullPool

from shortbox.db.interface import DatabaseAdapter

# Milliseconds a connection waits on a locked database file before failing
BUSY_TIMEOUT_MS = 5000


class SQLiteAdapter(DatabaseAdapter):
    """SQLite via aiosqlite: no pooling, WAL journal, busy timeout."""

    dialect = "sqlite"

    def engine_options(self) -> Dict[str, Any]:
        return {
            # A fresh connection per session, nothing held open between requests
            "poolclass": NullPool,
            "connect_args": {"check_same_thread": False},
            "echo": False,
        }

    def on_connect(self, dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute(f"PRAGMA busy_timeout={BUSY_TIMEOUT_MS}")
        finally:
            cursor.close()


ADAPTERS: List[DatabaseAdapter] = [SQLiteAdapter()]


def get_database_adapter(database_url: str) -> DatabaseAdapter:
    """
    Pick the adapter for a connection string.

    Raises:
        ValueError: If no adapter accepts the URL
    """
    for adapter in ADAPTERS:
        if adapter.accepts(database_url):
            return adapter
    raise ValueError(f"Unsupported DATABASE_URL dialect: {database_url.split(':', 1)[0]}")
