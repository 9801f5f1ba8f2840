"""Metadata search: term translation, paging, graph assembly and highlighting."""

from .assembler import GraphAssembler
from .config import SearchConfig
from .engine import SearchEngine
from .executor import DESCENDING, QueryExecutor
from .highlight import HighlightPlan, HighlightPlanner
from .modes import Direction, MetadataMode
from .query import QueryPart
from .stream import ResultStream
from .terms import OPERATOR_FTS, OPERATOR_REGEX, SearchTerm, TermTranslator

__all__ = [
    # Facade
    "SearchEngine",
    "SearchConfig",
    "ResultStream",
    # Terms
    "SearchTerm",
    "TermTranslator",
    "OPERATOR_FTS",
    "OPERATOR_REGEX",
    # Execution
    "QueryExecutor",
    "QueryPart",
    "DESCENDING",
    # Assembly and highlighting
    "GraphAssembler",
    "MetadataMode",
    "Direction",
    "HighlightPlan",
    "HighlightPlanner",
]
