"""Tests for the connection pool."""

import pytest
from pathlib import Path

from metasearch.core.exceptions import DatabaseError, TooManyRequestsError
from metasearch.store.pool import ConnectionPool


@pytest.fixture
def pool(test_db_path: Path) -> ConnectionPool:
    """Provide a two-connection pool."""
    pool = ConnectionPool(test_db_path, size=2)
    yield pool
    pool.close()


class TestConnectionPool:
    """Tests for fail-fast admission."""

    def test_acquire_and_release(self, pool: ConnectionPool):
        """Leases should be counted until released."""
        conn = pool.acquire()
        assert pool.leased == 1
        assert pool.available == 1

        pool.release(conn)
        assert pool.leased == 0

    def test_saturation_raises(self, pool: ConnectionPool):
        """Acquiring beyond the pool size should raise immediately."""
        first = pool.acquire()
        second = pool.acquire()

        with pytest.raises(TooManyRequestsError, match="all 2 connections"):
            pool.acquire()

        pool.release(first)
        pool.release(second)

    def test_connection_released_after_block(self, pool: ConnectionPool):
        """The context manager should release even when the block fails."""
        with pytest.raises(RuntimeError):
            with pool.connection():
                assert pool.leased == 1
                raise RuntimeError("boom")

        assert pool.leased == 0

    def test_connections_are_reused(self, pool: ConnectionPool):
        """A released connection should be handed out again."""
        with pool.connection() as first:
            pass
        with pool.connection() as second:
            assert second is first

    def test_open_transaction_rolled_back(self, pool: ConnectionPool):
        """A connection released mid-transaction should come back clean."""
        conn = pool.acquire()
        conn.execute("BEGIN")
        conn.execute("CREATE TABLE scratch (x INTEGER)")

        pool.release(conn)

        with pool.connection() as again:
            assert again is conn
            assert not again.in_transaction
            assert again.execute("SELECT name FROM sqlite_master WHERE name = 'scratch'").fetchone() is None

    def test_failed_rollback_returns_lease(self, test_db_path: Path):
        """A broken connection should be discarded without shrinking the pool."""
        pool = ConnectionPool(test_db_path, size=1)
        broken = pool.acquire()
        broken.execute("BEGIN")
        broken.close()

        with pytest.raises(DatabaseError, match="Rollback"):
            pool.release(broken)

        assert pool.leased == 0
        with pool.connection() as conn:
            assert conn is not broken
            assert conn.execute("SELECT 1").fetchone()[0] == 1
        pool.close()

    def test_regexp_available(self, pool: ConnectionPool):
        """Connections should support the REGEXP operator."""
        with pool.connection() as conn:
            assert conn.execute("SELECT 'abc' REGEXP '^a.c$'").fetchone()[0] == 1
            assert conn.execute("SELECT 'abd' REGEXP '^a.c$'").fetchone()[0] == 0

    def test_closed_pool_rejects_acquire(self, pool: ConnectionPool):
        """A closed pool should not hand out connections."""
        pool.close()

        with pytest.raises(DatabaseError, match="closed"):
            pool.acquire()

    def test_invalid_size(self, test_db_path: Path):
        """The pool needs at least one connection."""
        with pytest.raises(ValueError):
            ConnectionPool(test_db_path, size=0)
