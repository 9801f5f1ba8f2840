"""Lazy, single-pass stream of assembled search results."""

from __future__ import annotations

import sqlite3
from typing import TYPE_CHECKING, Generator, Iterator, Optional, Sequence, cast

from loguru import logger

from ..core.exceptions import DatabaseError
from ..core.types import AssembledGraph

if TYPE_CHECKING:
    from ..store.pool import ConnectionPool
    from .assembler import GraphAssembler
    from .config import SearchConfig
    from .executor import QueryExecutor
    from .highlight import HighlightPlan
    from .modes import MetadataMode
    from .query import QueryPart


class ResultStream(Iterator[AssembledGraph]):
    """Forward-only iterator over the graphs of a search.

    Opening the stream leases a pooled connection and runs the search
    query, so pool saturation and query errors surface when the stream is
    created. The connection stays leased until the stream is exhausted,
    closed, or garbage collected. ``config.count`` is set only after the
    last graph has been consumed.

    Example:
        with engine.search_terms(terms, config) as results:
            for graph in results:
                print(graph.subject)
        print(config.count)
    """

    def __init__(
        self,
        pool: "ConnectionPool",
        part: "QueryPart",
        executor: "QueryExecutor",
        assembler: "GraphAssembler",
        mode: "MetadataMode",
        config: "SearchConfig",
        plans: Sequence["HighlightPlan"] = (),
    ):
        self.config = config
        self._exhausted = False
        config.count = None
        self._rows = self._run(pool, part, executor, assembler, mode, config, plans)
        # runs up to the first yield: lease + query execution
        next(self._rows)

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def __iter__(self) -> "ResultStream":
        return self

    def __next__(self) -> AssembledGraph:
        # only the priming step yields None
        return cast(AssembledGraph, next(self._rows))

    def __enter__(self) -> "ResultStream":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Stop the stream and release its connection."""
        self._rows.close()

    def _run(
        self,
        pool: "ConnectionPool",
        part: "QueryPart",
        executor: "QueryExecutor",
        assembler: "GraphAssembler",
        mode: "MetadataMode",
        config: "SearchConfig",
        plans: Sequence["HighlightPlan"],
    ) -> Generator[Optional[AssembledGraph], None, None]:
        with pool.connection() as conn:
            cursor = executor.execute(conn, part)
            yield None

            total = 0
            served = 0
            try:
                while True:
                    try:
                        row = cursor.fetchone()
                    except sqlite3.Error as e:
                        raise DatabaseError(f"Reading search results failed: {e}") from e
                    if row is None:
                        break
                    if row["id"] is None:
                        total = row["total"]
                        continue
                    served += 1
                    yield assembler.assemble(
                        conn,
                        row["id"],
                        mode,
                        config.metadata_parent_property,
                        plans,
                        config.resource_properties,
                        config.relatives_properties,
                    )
            finally:
                cursor.close()

            config.count = total
            self._exhausted = True
            logger.debug(f"Search stream exhausted: {served} served, {total} total")
