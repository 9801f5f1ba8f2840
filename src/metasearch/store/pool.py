"""Bounded SQLite connection pool with fail-fast admission."""

from __future__ import annotations

import re
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from loguru import logger

from ..core.exceptions import DatabaseError, TooManyRequestsError


def _regexp(pattern: str, value: str | None) -> bool:
    """SQLite REGEXP implementation (``value REGEXP pattern``)."""
    if value is None:
        return False
    return re.search(pattern, value) is not None


class ConnectionPool:
    """A fixed-size pool of SQLite connections.

    ``acquire()`` never waits: when every connection is leased it raises
    TooManyRequestsError so the caller can tell saturation apart from an
    empty result or a broken query.

    Example:
        pool = ConnectionPool(Path("store.db"), size=4)
        with pool.connection() as conn:
            conn.execute("SELECT 1")
    """

    def __init__(self, path: Path, size: int = 4):
        """Initialize the pool.

        Args:
            path: Path to the SQLite database file.
            size: Maximum number of concurrently leased connections.
        """
        if size < 1:
            raise ValueError(f"Pool size must be positive, got {size}")
        self.path = path
        self.size = size
        self._idle: list[sqlite3.Connection] = []
        self._leased = 0
        self._closed = False
        self._lock = threading.Lock()
        logger.info(f"Connection pool created: path={path}, size={size}")

    @property
    def leased(self) -> int:
        """Number of connections currently handed out."""
        return self._leased

    @property
    def available(self) -> int:
        """Number of connections that can still be acquired."""
        return self.size - self._leased

    def acquire(self) -> sqlite3.Connection:
        """Lease a connection.

        Returns:
            An open SQLite connection.

        Raises:
            TooManyRequestsError: If all connections are leased.
            DatabaseError: If the pool is closed or a connection cannot be opened.
        """
        with self._lock:
            if self._closed:
                raise DatabaseError("Connection pool is closed")
            if self._leased >= self.size:
                logger.debug(f"Connection pool saturated ({self.size} leased)")
                raise TooManyRequestsError(self.size)
            conn = self._idle.pop() if self._idle else None
            self._leased += 1

        if conn is None:
            try:
                conn = self._connect()
            except Exception:
                with self._lock:
                    self._leased -= 1
                raise
        logger.debug(f"Connection acquired ({self._leased}/{self.size} leased)")
        return conn

    def release(self, conn: sqlite3.Connection) -> None:
        """Return a leased connection to the pool.

        A connection that cannot be rolled back is closed instead of being
        reused; the lease is returned either way.
        """
        reusable = False
        try:
            if conn.in_transaction:
                conn.rollback()
            reusable = True
        except sqlite3.Error as e:
            logger.warning(f"Discarding connection that failed to roll back: {e}")
            raise DatabaseError(f"Rollback on release failed: {e}") from e
        finally:
            with self._lock:
                self._leased -= 1
                keep = reusable and not self._closed
                if keep:
                    self._idle.append(conn)
            if not keep:
                self._discard(conn)
            logger.debug(f"Connection released ({self._leased}/{self.size} leased)")

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager leasing a connection for the duration of the block."""
        conn = self.acquire()
        try:
            yield conn
        finally:
            self.release(conn)

    def close(self) -> None:
        """Close idle connections; leased ones are closed on release."""
        with self._lock:
            self._closed = True
            idle, self._idle = self._idle, []
        for conn in idle:
            conn.close()

    @staticmethod
    def _discard(conn: sqlite3.Connection) -> None:
        try:
            conn.close()
        except sqlite3.Error as e:
            logger.warning(f"Closing discarded connection failed: {e}")

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(str(self.path), check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            conn.create_function("regexp", 2, _regexp, deterministic=True)
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to open connection: {e}") from e
        return conn
