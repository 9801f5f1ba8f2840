"""Core configuration, exceptions and types for metasearch."""

from .config import Config, Schema
from .exceptions import (
    AmbiguousMatchError,
    DatabaseError,
    MalformedRequestError,
    MetaSearchError,
    NotFoundError,
    TooManyRequestsError,
)
from .types import RESOURCE, AssembledGraph, GraphNode, Statement

__all__ = [
    "Config",
    "Schema",
    "MetaSearchError",
    "MalformedRequestError",
    "TooManyRequestsError",
    "DatabaseError",
    "NotFoundError",
    "AmbiguousMatchError",
    "RESOURCE",
    "Statement",
    "GraphNode",
    "AssembledGraph",
]
