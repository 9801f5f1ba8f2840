"""Ordered, paged execution of subject id queries with an exact total count."""

from __future__ import annotations

import sqlite3
from typing import TYPE_CHECKING, Any

from loguru import logger

from ..core.exceptions import DatabaseError, MalformedRequestError
from ..core.types import XSD_STRING
from .query import QueryPart

if TYPE_CHECKING:
    from .config import SearchConfig

DESCENDING = "^"


class QueryExecutor:
    """Wraps a subject id query with ordering, paging and counting.

    The compiled statement yields one ``(id, rank, NULL)`` row per match of
    the requested page, in order, followed by a single ``(NULL, NULL, total)``
    row holding the number of matches regardless of limit and offset.

    The wrapped query must return an ``id`` column. Duplicate ids are
    collapsed, keeping the position of their first occurrence. Matches
    that ``order_by`` leaves tied are ordered by subject id, or by that
    position when ``keep_order`` is set.
    """

    def compile(
        self, query: str, params: list[Any], config: "SearchConfig", keep_order: bool = False
    ) -> QueryPart:
        """Compile the paged query.

        Args:
            query: SQL returning subject ids in an ``id`` column.
            params: Positional parameters of ``query``.
            config: Search configuration providing ordering and paging.
            keep_order: Break ties by position in ``query`` instead of by id.

        Returns:
            Executable query part.

        Raises:
            MalformedRequestError: If paging values are invalid.
        """
        if config.limit is not None and config.limit < 0:
            raise MalformedRequestError(f"Negative limit {config.limit}")
        if config.offset is not None and config.offset < 0:
            raise MalformedRequestError(f"Negative offset {config.offset}")

        joins, order, order_params = self._order_by(config, keep_order)
        sql = f"""
            WITH
            numbered AS (
                SELECT id, row_number() OVER () AS _pos FROM ({query}) t
            ),
            allids AS (
                SELECT id, min(_pos) AS _pos FROM numbered WHERE id IS NOT NULL GROUP BY id
            ),
            page AS (
                SELECT a.id, row_number() OVER (ORDER BY {order}) AS _rank
                FROM allids a
                {joins}
                ORDER BY _rank
                LIMIT ? OFFSET ?
            )
            SELECT id, _rank, NULL AS total FROM page
            UNION ALL
            SELECT NULL, NULL, count(*) FROM allids
            ORDER BY 2 NULLS LAST
        """
        limit = -1 if config.limit is None else config.limit
        offset = config.offset or 0
        return QueryPart(sql, [*params, *order_params, limit, offset])

    def execute(self, conn: sqlite3.Connection, part: QueryPart) -> sqlite3.Cursor:
        """Execute a compiled query.

        Raises:
            DatabaseError: If the store rejects the query.
        """
        logger.debug(f"Search query:\n{part}")
        try:
            return conn.execute(part.query, part.params)
        except sqlite3.Error as e:
            raise DatabaseError(f"Bad query: {e}") from e

    @staticmethod
    def _order_by(config: "SearchConfig", keep_order: bool) -> tuple[str, str, list[Any]]:
        joins = ""
        order: list[str] = []
        params: list[Any] = []
        lang = "AND (type <> ? OR lang = ?)" if config.order_by_lang else ""
        for n, prop in enumerate(config.order_by or []):
            direction = ""
            if prop.startswith(DESCENDING):
                direction = " DESC"
                prop = prop[len(DESCENDING):]
            if not prop:
                raise MalformedRequestError("Empty order by property")
            joins += f"""
                LEFT JOIN (
                    SELECT id, min(value) AS _ob{n}, min(value_t) AS _obt{n}, min(value_n) AS _obn{n}
                    FROM statements WHERE property = ? {lang} GROUP BY id
                ) o{n} ON o{n}.id = a.id
            """
            params.append(prop)
            if config.order_by_lang:
                params.extend([XSD_STRING, config.order_by_lang])
            order.extend(
                f"{col}{n}{direction} NULLS LAST" for col in ("_obt", "_obn", "_ob")
            )
        order.append("a._pos" if keep_order else "a.id")
        return joins, ", ".join(order), params
