"""Search engine facade."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Sequence, Union

from loguru import logger

from ..core.exceptions import MalformedRequestError
from ..core.types import AssembledGraph
from ..store.statements import StatementRepository
from .assembler import GraphAssembler
from .config import SearchConfig
from .executor import QueryExecutor
from .highlight import HighlightPlan, HighlightPlanner
from .modes import MetadataMode
from .stream import ResultStream
from .terms import SearchTerm, TermTranslator

if TYPE_CHECKING:
    from ..core.config import Config, Schema
    from ..store.database import Database


class SearchEngine:
    """Runs metadata searches against the store.

    Every search validates its request, leases a pooled connection and runs
    the query before returning, so malformed requests, pool saturation and
    rejected queries raise immediately. The returned ResultStream holds the
    connection until it is exhausted or closed.

    Example:

        engine = SearchEngine(db, schema, base_url)
        config = SearchConfig(limit=10, metadata_mode="parents")
        with engine.search_terms([SearchTerm(schema.label, "foo")], config) as results:
            graphs = list(results)
        total = config.count
    """

    def __init__(
        self,
        db: "Database",
        schema: "Schema",
        base_url: str,
        non_relation_properties: Sequence[str] = (),
    ):
        """Initialize the engine.

        Args:
            db: Connected database.
            schema: Well-known property mapping.
            base_url: Prefix turning internal subject ids into URIs.
            non_relation_properties: Properties stored only as literals.
        """
        self.db = db
        self.schema = schema
        self.base_url = base_url
        self.translator = TermTranslator(schema, base_url, non_relation_properties)
        self.planner = HighlightPlanner(schema)
        self.executor = QueryExecutor()
        self.assembler = GraphAssembler(schema, base_url)

    @classmethod
    def from_config(cls, config: "Config", db: "Database") -> "SearchEngine":
        return cls(db, config.schema, config.base_url, config.non_relation_properties)

    def search(
        self,
        terms_or_query: Union[str, Sequence[SearchTerm]],
        params: Optional[Sequence[Any]] = None,
        config: Optional[SearchConfig] = None,
    ) -> ResultStream:
        """Search with terms or with a raw SQL query returning subject ids."""
        config = config if config is not None else SearchConfig()
        if isinstance(terms_or_query, str):
            return self.search_query(terms_or_query, params or [], config)
        if params:
            raise MalformedRequestError("Query parameters are only allowed with a raw query")
        return self.search_terms(terms_or_query, config)

    def search_terms(self, terms: Sequence[SearchTerm], config: SearchConfig) -> ResultStream:
        """Find subjects matching all terms.

        Args:
            terms: Search constraints, AND-ed together.
            config: Paging, ordering, metadata mode and highlighting. Its
                ``fts_query`` is filled in when unset and ``count`` is set
                once the stream is exhausted.

        Raises:
            MalformedRequestError: If a term or the configuration is invalid.
            TooManyRequestsError: If every pooled connection is in use.
            DatabaseError: If the store rejects the query.
        """
        terms = list(terms)
        mode = MetadataMode.parse(config.metadata_mode)
        part = self.translator.translate(terms)
        plans = self.planner.plan(terms, config)
        logger.debug(f"Term search: {len(terms)} terms, {len(plans)} highlights")
        return self._run(part.query, part.params, config, mode, plans, keep_order=False)

    def search_query(self, query: str, params: Sequence[Any], config: SearchConfig) -> ResultStream:
        """Find subjects returned by a raw SQL query.

        The query must return subject ids in an ``id`` column. Without
        ``order_by`` the query's own order is kept. Highlighting applies when
        ``config.fts_query`` is set.

        Raises:
            MalformedRequestError: If the query is empty or the configuration invalid.
            TooManyRequestsError: If every pooled connection is in use.
            DatabaseError: If the store rejects the query.
        """
        if not query or not query.strip():
            raise MalformedRequestError("Empty search query")
        mode = MetadataMode.parse(config.metadata_mode)
        plans = self.planner.plan([], config)
        logger.debug(f"Raw query search: {len(plans)} highlights")
        return self._run(query, list(params), config, mode, plans, keep_order=True)

    def get_subject(
        self,
        subject_id: int,
        mode: Optional[str] = None,
        parent_property: Optional[str] = None,
    ) -> AssembledGraph:
        """Assemble the graph of a single subject.

        Returns:
            The subject's graph, empty if the subject does not exist.
        """
        metadata_mode = MetadataMode.parse(mode)
        with self.db.pool.connection() as conn:
            return self.assembler.assemble(conn, subject_id, metadata_mode, parent_property)

    def get_subject_by_ids(self, ids: Union[str, Sequence[str]]) -> int:
        """Resolve identifiers to the internal id of the subject holding them.

        Raises:
            NotFoundError: If no subject holds any of the identifiers.
            AmbiguousMatchError: If the identifiers belong to different subjects.
        """
        if isinstance(ids, str):
            ids = [ids]
        return StatementRepository(self.db, self.schema, self.base_url).resolve(ids)

    def _run(
        self,
        query: str,
        params: list[Any],
        config: SearchConfig,
        mode: MetadataMode,
        plans: list[HighlightPlan],
        keep_order: bool,
    ) -> ResultStream:
        part = self.executor.compile(query, params, config, keep_order=keep_order)
        return ResultStream(
            self.db.pool,
            part,
            self.executor,
            self.assembler,
            mode,
            config,
            plans,
        )
