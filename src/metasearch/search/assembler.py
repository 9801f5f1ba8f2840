"""Assembly of per-subject result graphs."""

from __future__ import annotations

import sqlite3
from typing import TYPE_CHECKING, Iterable, Iterator, Optional, Sequence

from loguru import logger

from ..core.exceptions import DatabaseError
from ..core.types import RESOURCE, AssembledGraph, Statement
from .modes import Direction, MetadataMode

if TYPE_CHECKING:
    from ..core.config import Schema
    from .highlight import HighlightPlan


# stays well below SQLite's bound parameter limit
BATCH_SIZE = 500


def _placeholders(values: Sequence[int]) -> str:
    return ", ".join("?" for _ in values)


def _batches(ids: Sequence[int]) -> Iterator[Sequence[int]]:
    for start in range(0, len(ids), BATCH_SIZE):
        yield ids[start : start + BATCH_SIZE]


class GraphAssembler:
    """Builds the AssembledGraph of a matched subject.

    The subject's statements come first, followed by the statements of the
    related subjects reached through the parent property (ancestors, then
    descendants) and finally the highlight statements.

    Example:
        assembler = GraphAssembler(schema, base_url)
        graph = assembler.assemble(conn, 42, MetadataMode.parse("parents"))
        parent = graph.resource(schema.parent)
    """

    def __init__(self, schema: "Schema", base_url: str):
        """Initialize the assembler.

        Args:
            schema: Well-known property mapping.
            base_url: Prefix turning internal subject ids into URIs.
        """
        self.schema = schema
        self.base_url = base_url

    def uri(self, subject_id: int) -> str:
        return f"{self.base_url}{subject_id}"

    def assemble(
        self,
        conn: sqlite3.Connection,
        subject_id: int,
        mode: MetadataMode,
        parent_property: Optional[str] = None,
        plans: Sequence["HighlightPlan"] = (),
        resource_properties: Sequence[str] = (),
        relatives_properties: Sequence[str] = (),
    ) -> AssembledGraph:
        """Assemble the graph of one subject.

        A subject that no longer exists yields an empty graph.

        Args:
            conn: Leased store connection.
            subject_id: Internal id of the matched subject.
            mode: Metadata mode deciding which subjects are included.
            parent_property: Relation followed by ancestor/descendant
                traversal (defaults to the schema parent property).
            plans: Highlight plans of the search.
            resource_properties: If set, the subject's properties to keep.
            relatives_properties: If set, the related subjects' properties to keep.

        Raises:
            DatabaseError: If a store lookup fails.
        """
        subject = self.uri(subject_id)
        graph = AssembledGraph(subject)
        try:
            if not self._exists(conn, subject_id):
                logger.warning(f"Subject {subject_id} vanished before its graph was assembled")
                return graph

            if mode.labels_only:
                for st in self._statements(conn, [subject_id]):
                    if st.property == self.schema.label:
                        graph.add(st)
            elif mode.include_statements:
                relatives: list[int] = []
                prop = parent_property or self.schema.parent
                for direction, depth in mode.traversals:
                    for rid in self._traverse(conn, subject_id, prop, direction, depth):
                        if rid not in relatives:
                            relatives.append(rid)
                if mode.include_self:
                    self._extend(graph, self._statements(conn, [subject_id]), resource_properties)
                self._extend(graph, self._statements(conn, relatives), relatives_properties)

            for plan in plans:
                for st in plan.highlight(conn, subject_id, subject):
                    graph.add(st)
        except sqlite3.Error as e:
            raise DatabaseError(f"Graph assembly failed for subject {subject_id}: {e}") from e
        return graph

    @staticmethod
    def _extend(graph: AssembledGraph, statements: Iterable[Statement], properties: Sequence[str]) -> None:
        for st in statements:
            if not properties or st.property in properties:
                graph.add(st)

    @staticmethod
    def _exists(conn: sqlite3.Connection, subject_id: int) -> bool:
        row = conn.execute("SELECT 1 FROM resources WHERE id = ?", (subject_id,)).fetchone()
        return row is not None

    def _traverse(
        self,
        conn: sqlite3.Connection,
        start: int,
        prop: str,
        direction: Direction,
        depth: int,
    ) -> list[int]:
        """Collect subjects reachable from ``start`` through ``prop``.

        Args:
            direction: UP follows the relation from subject to object,
                DOWN from object to subject.
            depth: Number of levels to follow, negative for unbounded.

        Returns:
            Reached subject ids, nearest first, without ``start``.
        """
        source, target = ("id", "target_id") if direction is Direction.UP else ("target_id", "id")
        seen = {start}
        found: list[int] = []
        frontier = [start]
        level = 0
        while frontier and (depth < 0 or level < depth):
            level += 1
            reached: set[int] = set()
            for batch in _batches(frontier):
                rows = conn.execute(
                    f"""
                    SELECT DISTINCT {target} FROM relations
                    WHERE property = ? AND {source} IN ({_placeholders(batch)})
                    """,
                    [prop, *batch],
                )
                reached.update(row[0] for row in rows)
            frontier = sorted(reached - seen)
            seen.update(frontier)
            found.extend(frontier)
        logger.debug(f"Traversed {direction.value} from {start}: {len(found)} subjects")
        return found

    def _statements(self, conn: sqlite3.Connection, ids: Sequence[int]) -> list[Statement]:
        """Fetch identifier, relation and literal statements of subjects, grouped by subject."""
        by_subject: dict[int, list[Statement]] = {i: [] for i in ids}
        for batch in _batches(ids):
            self._collect(conn, batch, by_subject)
        return [st for i in ids for st in by_subject[i]]

    def _collect(
        self,
        conn: sqlite3.Connection,
        ids: Sequence[int],
        by_subject: dict[int, list[Statement]],
    ) -> None:
        marks = _placeholders(ids)
        params = list(ids)
        for row in conn.execute(
            f"SELECT id, ids FROM identifiers WHERE id IN ({marks}) ORDER BY id, ids", params
        ):
            by_subject[row["id"]].append(
                Statement(self.uri(row["id"]), self.schema.id, row["ids"], RESOURCE)
            )
        for row in conn.execute(
            f"""
            SELECT id, property, target_id FROM relations
            WHERE id IN ({marks}) ORDER BY id, property, target_id
            """,
            params,
        ):
            by_subject[row["id"]].append(
                Statement(self.uri(row["id"]), row["property"], self.uri(row["target_id"]), RESOURCE)
            )
        for row in conn.execute(
            f"""
            SELECT id, property, type, lang, value FROM statements
            WHERE id IN ({marks}) ORDER BY id, mid
            """,
            params,
        ):
            by_subject[row["id"]].append(
                Statement(self.uri(row["id"]), row["property"], row["value"], row["type"], row["lang"])
            )
