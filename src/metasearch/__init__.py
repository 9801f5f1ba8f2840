"""metasearch: search over a statement-oriented metadata store."""

from .core import Config, Schema
from .search import SearchConfig, SearchEngine, SearchTerm
from .store import Database

__version__ = "0.1.0"

__all__ = [
    "Config",
    "Schema",
    "Database",
    "SearchEngine",
    "SearchConfig",
    "SearchTerm",
]
