"""Full text highlight planning.

Every full text term of a search gets a 1-based index ``i`` and a
HighlightPlan. For a matched subject the plan produces up to three
statements: ``{search_fts}{i}`` (the fragments), ``{search_fts_property}{i}``
(the property the best fragment comes from) and ``{search_fts_query}{i}``
(the query used). Plans never share settings, so several terms can be
highlighted independently in one search.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from loguru import logger

from ..core.exceptions import DatabaseError, MalformedRequestError
from ..core.types import XSD_STRING, Statement
from .fragments import MARK_START, MARK_STOP, FragmentOptions, build_fragments
from .fts_query import to_fts5
from .query import QueryPart

if TYPE_CHECKING:
    from ..core.config import Schema
    from .config import SearchConfig
    from .terms import SearchTerm

_DEFAULTS = FragmentOptions()


@dataclass(frozen=True)
class HighlightPlan:
    """Highlight configuration of one indexed full text term."""

    index: int
    fts_query: str
    match: str
    properties: tuple[str, ...]
    language: Optional[str]
    options: FragmentOptions
    value_property: str
    property_property: str
    query_property: str

    def statement_query(self, subject_id: int) -> QueryPart:
        """Query returning the subject's matching values, best match first."""
        query = """
            SELECT s.property, highlight(statements_fts, 0, ?, ?) AS marked
            FROM statements_fts JOIN statements s ON s.mid = statements_fts.rowid
            WHERE statements_fts MATCH ? AND s.id = ?
        """
        params: list[Any] = [MARK_START, MARK_STOP, self.match, subject_id]
        if self.properties:
            query += f" AND s.property IN ({', '.join('?' for _ in self.properties)})"
            params.extend(self.properties)
        if self.language:
            query += " AND (s.lang = ? OR s.lang IS NULL)"
            params.append(self.language)
        query += " ORDER BY statements_fts.rank, s.mid"
        return QueryPart(query, params)

    def highlight(self, conn: sqlite3.Connection, subject_id: int, subject: str) -> list[Statement]:
        """Fetch and render the highlight statements for one subject.

        Returns:
            The three highlight statements, or an empty list if nothing matched.
        """
        part = self.statement_query(subject_id)
        try:
            rows = conn.execute(part.query, part.params).fetchall()
        except sqlite3.Error as e:
            raise DatabaseError(f"Highlight query failed: {e}") from e
        if not rows:
            return []

        limit = max(self.options.max_fragments, 1)
        fragments: list[str] = []
        for row in rows:
            fragments.extend(build_fragments(row["marked"], self.options))
            if len(fragments) >= limit:
                break
        text = self.options.delimiter.join(fragments[:limit])
        return [
            Statement(subject, self.value_property, text, XSD_STRING),
            Statement(subject, self.property_property, rows[0]["property"], XSD_STRING),
            Statement(subject, self.query_property, self.fts_query, XSD_STRING),
        ]


class HighlightPlanner:
    """Normalizes the highlight parameters of a search into HighlightPlans."""

    def __init__(self, schema: "Schema"):
        """Initialize the planner.

        Args:
            schema: Well-known property mapping providing the output stems.
        """
        self.schema = schema

    def plan(self, terms: Sequence["SearchTerm"], config: "SearchConfig") -> list[HighlightPlan]:
        """Build one plan per full text term, in declaration order.

        Without full text terms, a set ``config.fts_query`` still produces
        plans (one per query) so raw query results can be highlighted.
        An unset ``config.fts_query`` is filled in with the term values.

        Raises:
            MalformedRequestError: If a list parameter does not match the
                number of full text terms or a value is invalid.
        """
        fts_terms = [t for t in terms if t.is_fulltext]
        if fts_terms:
            count = len(fts_terms)
        elif isinstance(config.fts_query, (list, tuple)):
            count = len(config.fts_query)
        elif config.fts_query:
            count = 1
        else:
            return []

        queries = self._leading(
            "fts_query", config.fts_query, [str(t.values[0]) for t in fts_terms], count
        )
        properties = self._leading(
            "fts_property", config.fts_property, [t.properties for t in fts_terms], count
        )
        languages = [t.language for t in fts_terms] or [None] * count
        start_sel = self._broadcast("fts_start_sel", config.fts_start_sel, _DEFAULTS.start_sel, count, str)
        stop_sel = self._broadcast("fts_stop_sel", config.fts_stop_sel, _DEFAULTS.stop_sel, count, str)
        min_words = self._broadcast("fts_min_words", config.fts_min_words, _DEFAULTS.min_words, count, int)
        max_words = self._broadcast("fts_max_words", config.fts_max_words, _DEFAULTS.max_words, count, int)
        if config.fts_min_words is None:
            min_words = [min(lo, hi) for lo, hi in zip(min_words, max_words)]
        short_word = self._broadcast("fts_short_word", config.fts_short_word, _DEFAULTS.short_word, count, int)
        max_fragments = self._broadcast(
            "fts_max_fragments", config.fts_max_fragments, _DEFAULTS.max_fragments, count, int
        )
        highlight_all = self._broadcast(
            "fts_highlight_all", config.fts_highlight_all, _DEFAULTS.highlight_all, count, bool
        )
        delimiter = self._broadcast(
            "fts_fragment_delimiter", config.fts_fragment_delimiter, _DEFAULTS.delimiter, count, str
        )

        plans = []
        for n in range(count):
            query = queries[n]
            if query is None or not str(query).strip():
                raise MalformedRequestError(f"No full text query for highlight {n + 1}")
            if min(min_words[n], max_words[n], short_word[n], max_fragments[n]) < 0:
                raise MalformedRequestError(f"Negative highlight option for highlight {n + 1}")
            if min_words[n] > max_words[n]:
                raise MalformedRequestError(
                    f"fts_min_words ({min_words[n]}) exceeds fts_max_words ({max_words[n]})"
                )
            i = n + 1
            plans.append(
                HighlightPlan(
                    index=i,
                    fts_query=str(query),
                    match=to_fts5(str(query)),
                    properties=self._properties(properties[n]),
                    language=languages[n],
                    options=FragmentOptions(
                        start_sel=start_sel[n],
                        stop_sel=stop_sel[n],
                        min_words=min_words[n],
                        max_words=max_words[n],
                        short_word=short_word[n],
                        max_fragments=max_fragments[n],
                        highlight_all=highlight_all[n],
                        delimiter=delimiter[n],
                    ),
                    value_property=f"{self.schema.search_fts}{i}",
                    property_property=f"{self.schema.search_fts_property}{i}",
                    query_property=f"{self.schema.search_fts_query}{i}",
                )
            )
        if config.fts_query is None:
            config.fts_query = queries[0] if count == 1 else list(queries)
        logger.debug(f"Planned {len(plans)} highlights")
        return plans

    @staticmethod
    def _leading(name: str, value: Any, fallbacks: list[Any], count: int) -> list[Any]:
        """A scalar binds to the first plan, a list to all plans positionally."""
        fallbacks = fallbacks + [None] * (count - len(fallbacks))
        if value is None:
            return fallbacks
        if isinstance(value, (list, tuple)):
            if len(value) != count:
                raise MalformedRequestError(
                    f"{name} has {len(value)} entries but there are {count} full text terms"
                )
            return [v if v is not None else f for v, f in zip(value, fallbacks)]
        return [value] + fallbacks[1:]

    @staticmethod
    def _broadcast(name: str, value: Any, default: Any, count: int, cast: Callable[[Any], Any]) -> list[Any]:
        """A scalar applies to every plan, a list to all plans positionally."""
        if value is None:
            return [default] * count
        values = list(value) if isinstance(value, (list, tuple)) else [value] * count
        if len(values) != count:
            raise MalformedRequestError(
                f"{name} has {len(values)} entries but there are {count} full text terms"
            )
        try:
            return [default if v is None else cast(v) for v in values]
        except (TypeError, ValueError) as e:
            raise MalformedRequestError(f"Invalid {name}: {value!r}") from e

    @staticmethod
    def _properties(value: Any) -> tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        return tuple(value)
