"""SQLite database manager for the metadata store."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ..core.exceptions import DatabaseError
from .pool import ConnectionPool
from .schema import get_schema


class Database:
    """SQLite database manager backed by a connection pool."""

    def __init__(self, path: Path, pool_size: int = 4):
        """Initialize database with path.

        Args:
            path: Path to the SQLite database file.
            pool_size: Maximum number of concurrently leased connections.
        """
        self.path = path
        self.pool_size = pool_size
        self._pool: ConnectionPool | None = None

    @property
    def pool(self) -> ConnectionPool:
        """The connection pool.

        Raises:
            DatabaseError: If the database is not connected.
        """
        if self._pool is None:
            raise DatabaseError("Database not connected")
        return self._pool

    def connect(self) -> None:
        """Create the connection pool and initialize the schema."""
        if self._pool is not None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._pool = ConnectionPool(self.path, self.pool_size)
            with self._pool.connection() as conn:
                conn.execute("PRAGMA journal_mode = WAL")
                conn.executescript(get_schema())
        except Exception as e:
            self._pool = None
            raise DatabaseError(f"Failed to connect to database: {e}") from e

    def close(self) -> None:
        """Close the connection pool."""
        if self._pool:
            try:
                self._pool.close()
            finally:
                self._pool = None

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Lease a pooled connection for the duration of the block."""
        with self.pool.connection() as conn:
            yield conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """Context manager for database transactions.

        Yields:
            A cursor for executing SQL statements.

        Raises:
            DatabaseError: If connection is not available or transaction fails.
        """
        with self.pool.connection() as conn:
            cursor = conn.cursor()
            try:
                yield cursor
                conn.commit()
            except Exception as e:
                conn.rollback()
                raise DatabaseError(f"Transaction failed: {e}") from e
            finally:
                cursor.close()

    def query(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        """Execute a read query and fetch all rows.

        Args:
            sql: SQL statement to execute.
            params: Parameters for the SQL statement.

        Returns:
            All result rows.

        Raises:
            DatabaseError: If connection is not available or query fails.
        """
        with self.pool.connection() as conn:
            try:
                return conn.execute(sql, params).fetchall()
            except Exception as e:
                raise DatabaseError(f"Query execution failed: {e}") from e
