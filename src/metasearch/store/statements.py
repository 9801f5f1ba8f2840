"""Statement loading for the metadata store.

Seeds subjects, identifiers, relations and typed literals. Used to populate
stores for searching (fixtures, imports); it is not a resource update API.

Example:
    repo = StatementRepository(db, schema, base_url="https://repo.example/")
    parent = repo.create_resource({schema.label: "Collection"})
    child = repo.create_resource({
        schema.label: "Item",
        schema.parent: (repo.uri(parent), RESOURCE),
        "https://date.prop": date(2019, 2, 1),
    })
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Mapping

from loguru import logger

from ..core.exceptions import AmbiguousMatchError, NotFoundError
from ..core.types import RESOURCE
from .values import guess_datatype, numeric_value, temporal_value, to_text

if TYPE_CHECKING:
    import sqlite3

    from ..core.config import Schema
    from .database import Database


class StatementRepository:
    """Repository writing and resolving subjects of the statement store."""

    def __init__(self, db: "Database", schema: "Schema", base_url: str):
        """Initialize with database connection.

        Args:
            db: Database instance to use for operations.
            schema: Well-known property mapping.
            base_url: Prefix turning internal subject ids into URIs.
        """
        self.db = db
        self.schema = schema
        self.base_url = base_url

    def uri(self, subject_id: int) -> str:
        """Return the URI of an internal subject id."""
        return f"{self.base_url}{subject_id}"

    def create_resource(self, metadata: Mapping[str, Any] | None = None) -> int:
        """Create a subject and its statements in one transaction.

        Values may be scalars, ``(value, datatype)`` / ``(value, datatype, lang)``
        tuples or lists of those. Values of ``schema.id`` become identifiers,
        values typed ``RESOURCE`` become relations to the subject they identify.

        Args:
            metadata: Mapping of property to value(s).

        Returns:
            The new subject id.
        """
        with self.db.transaction() as cursor:
            cursor.execute("INSERT INTO resources DEFAULT VALUES")
            subject_id = cursor.lastrowid
            self._add_identifier(cursor, subject_id, self.uri(subject_id))
            for prop, values in (metadata or {}).items():
                if not isinstance(values, list):
                    values = [values]
                for value in values:
                    self._add(cursor, subject_id, prop, value)
        logger.debug(f"Created subject {subject_id}")
        return subject_id

    def add(
        self,
        subject_id: int,
        prop: str,
        value: Any,
        datatype: str | None = None,
        lang: str | None = None,
    ) -> None:
        """Add a single statement to an existing subject."""
        with self.db.transaction() as cursor:
            self._add(cursor, subject_id, prop, (value, datatype, lang))

    def delete(self, subject_id: int) -> None:
        """Delete a subject with all its statements."""
        with self.db.transaction() as cursor:
            cursor.execute("DELETE FROM relations WHERE target_id = ?", (subject_id,))
            cursor.execute("DELETE FROM resources WHERE id = ?", (subject_id,))
        logger.debug(f"Deleted subject {subject_id}")

    def resolve(self, ids: Iterable[str]) -> int:
        """Find the single subject having at least one of the identifiers.

        Raises:
            NotFoundError: If no subject matches.
            AmbiguousMatchError: If more than one subject matches.
        """
        ids = list(ids)
        if not ids:
            raise NotFoundError("No identifiers given")
        placeholders = ", ".join("?" for _ in ids)
        rows = self.db.query(
            f"SELECT DISTINCT id FROM identifiers WHERE ids IN ({placeholders})",
            tuple(ids),
        )
        if not rows:
            raise NotFoundError(f"No subject identified by {ids}")
        if len(rows) > 1:
            raise AmbiguousMatchError(
                f"Both subject {rows[0]['id']} and {rows[1]['id']} match the identifiers"
            )
        return rows[0]["id"]

    def _add(self, cursor: "sqlite3.Cursor", subject_id: int, prop: str, value: Any) -> None:
        datatype = lang = None
        if isinstance(value, tuple):
            value, datatype, *rest = value + (None,) * (3 - len(value))
            lang = rest[0] if rest else None

        if prop == self.schema.id:
            self._add_identifier(cursor, subject_id, to_text(value))
        elif datatype == RESOURCE:
            target_id = self._resolve_in(cursor, to_text(value))
            cursor.execute(
                "INSERT OR IGNORE INTO relations (id, target_id, property) VALUES (?, ?, ?)",
                (subject_id, target_id, prop),
            )
        else:
            datatype = datatype or guess_datatype(value)
            cursor.execute(
                """
                INSERT INTO statements (id, property, type, lang, value, value_n, value_t)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    subject_id,
                    prop,
                    datatype,
                    lang,
                    to_text(value),
                    numeric_value(value),
                    temporal_value(value),
                ),
            )

    @staticmethod
    def _add_identifier(cursor: "sqlite3.Cursor", subject_id: int, ids: str) -> None:
        cursor.execute("INSERT INTO identifiers (ids, id) VALUES (?, ?)", (ids, subject_id))

    @staticmethod
    def _resolve_in(cursor: "sqlite3.Cursor", ids: str) -> int:
        cursor.execute("SELECT id FROM identifiers WHERE ids = ?", (ids,))
        row = cursor.fetchone()
        if row is None:
            raise NotFoundError(f"No subject identified by {ids}")
        return row[0]
