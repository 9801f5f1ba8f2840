"""Parameterized SQL fragments."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class QueryPart:
    """A piece of SQL together with its positional parameters."""

    query: str = ""
    params: list[Any] = field(default_factory=list)

    def __str__(self) -> str:
        """Render the query with parameters inlined, for logging only."""
        rendered = self.query
        for param in self.params:
            literal = "NULL" if param is None else repr(param)
            rendered = rendered.replace("?", literal, 1)
        return rendered
