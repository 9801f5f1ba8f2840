"""Tests for database connection and management."""

import pytest
from pathlib import Path

from metasearch.core.exceptions import DatabaseError
from metasearch.store.database import Database


class TestDatabaseConnection:
    """Tests for database connection lifecycle."""

    def test_connect_creates_database_file(self, test_db_path: Path):
        """Database file should be created on connect."""
        db = Database(test_db_path)
        db.connect()

        assert test_db_path.exists()
        db.close()

    def test_connect_creates_parent_directories(self, tmp_path: Path):
        """Connect should create parent directories if needed."""
        db_path = tmp_path / "subdir" / "nested" / "test.db"
        db = Database(db_path)
        db.connect()

        assert db_path.exists()
        db.close()

    def test_close_without_connect(self, test_db_path: Path):
        """Close should not raise if not connected."""
        db = Database(test_db_path)
        db.close()  # Should not raise

    def test_double_connect(self, test_db_path: Path):
        """Connecting twice should work without error."""
        db = Database(test_db_path)
        db.connect()
        db.connect()  # Should not raise
        db.close()

    def test_close_clears_pool(self, test_db_path: Path):
        """Close should drop the connection pool."""
        db = Database(test_db_path)
        db.connect()
        db.close()

        with pytest.raises(DatabaseError, match="not connected"):
            db.query("SELECT 1")


class TestDatabaseSchema:
    """Tests for schema initialization."""

    @pytest.mark.parametrize(
        "name", ["resources", "identifiers", "relations", "statements", "statements_fts"]
    )
    def test_schema_creates_table(self, db: Database, name: str):
        """Schema should create the store tables."""
        rows = db.query("SELECT name FROM sqlite_master WHERE name = ?", (name,))
        assert len(rows) == 1

    def test_fts_index_follows_statements(self, db: Database):
        """Inserted literals should be searchable through the FTS index."""
        with db.transaction() as cursor:
            cursor.execute("INSERT INTO resources DEFAULT VALUES")
            cursor.execute(
                "INSERT INTO statements (id, property, type, value) VALUES (?, ?, ?, ?)",
                (cursor.lastrowid, "https://p", "string", "quick brown fox"),
            )

        rows = db.query("SELECT rowid FROM statements_fts WHERE statements_fts MATCH 'brown'")
        assert len(rows) == 1


class TestDatabaseTransactions:
    """Tests for transaction handling."""

    def test_transaction_commits(self, db: Database):
        """Statements should persist after the block."""
        with db.transaction() as cursor:
            cursor.execute("INSERT INTO resources DEFAULT VALUES")

        assert len(db.query("SELECT id FROM resources")) == 1

    def test_transaction_rolls_back_on_error(self, db: Database):
        """A failing block should roll back and raise DatabaseError."""
        with pytest.raises(DatabaseError, match="Transaction failed"):
            with db.transaction() as cursor:
                cursor.execute("INSERT INTO resources DEFAULT VALUES")
                raise ValueError("boom")

        assert db.query("SELECT id FROM resources") == []

    def test_query_wraps_errors(self, db: Database):
        """Bad SQL should surface as DatabaseError."""
        with pytest.raises(DatabaseError, match="Query execution failed"):
            db.query("SELECT * FROM missing_table")
