"""Data access layer for the metadata store.

This package provides the persistence layer including:
- Database: SQLite schema initialization and transaction management
- ConnectionPool: bounded, fail-fast connection admission
- StatementRepository: seeding and identifier resolution

Example:
    from metasearch.store import Database, StatementRepository

    db = Database(Path("store.db"), pool_size=4)
    db.connect()
    statements = StatementRepository(db, schema, base_url)
"""

from .database import Database
from .pool import ConnectionPool
from .statements import StatementRepository

__all__ = [
    "Database",
    "ConnectionPool",
    "StatementRepository",
]
