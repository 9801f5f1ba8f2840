"""Type definitions for metasearch."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional

XSD = "http://www.w3.org/2001/XMLSchema#"
XSD_STRING = XSD + "string"
XSD_BOOLEAN = XSD + "boolean"
XSD_DECIMAL = XSD + "decimal"
XSD_FLOAT = XSD + "float"
XSD_DOUBLE = XSD + "double"
XSD_INTEGER = XSD + "integer"
XSD_LONG = XSD + "long"
XSD_INT = XSD + "int"
XSD_POSITIVE_INTEGER = XSD + "positiveInteger"
XSD_NON_NEGATIVE_INTEGER = XSD + "nonNegativeInteger"
XSD_DATE = XSD + "date"
XSD_DATE_TIME = XSD + "dateTime"
XSD_TIME = XSD + "time"
XSD_DURATION = XSD + "duration"
XSD_ANY_URI = XSD + "anyURI"

# Datatype of identifier and relation statements (value is a URI)
RESOURCE = "http://www.w3.org/2000/01/rdf-schema#Resource"

NUMERIC_TYPES = frozenset(
    {
        XSD_BOOLEAN,
        XSD_DECIMAL,
        XSD_FLOAT,
        XSD_DOUBLE,
        XSD_INTEGER,
        XSD_LONG,
        XSD_INT,
        XSD_POSITIVE_INTEGER,
        XSD_NON_NEGATIVE_INTEGER,
    }
)
TEMPORAL_TYPES = frozenset({XSD_DATE, XSD_DATE_TIME, XSD_TIME})


@dataclass(frozen=True)
class Statement:
    """A single (subject, property, value, datatype, lang) tuple."""

    subject: str
    property: str
    value: str
    datatype: str = XSD_STRING
    lang: Optional[str] = None

    @property
    def is_resource(self) -> bool:
        """Whether the value points at another resource."""
        return self.datatype == RESOURCE


@dataclass
class GraphNode:
    """View of a single subject inside an AssembledGraph."""

    graph: "AssembledGraph"
    uri: str

    @property
    def statements(self) -> list[Statement]:
        return [s for s in self.graph.statements if s.subject == self.uri]

    def literals(self, prop: str) -> list[str]:
        """Return all values of a property, in statement order."""
        return [s.value for s in self.statements if s.property == prop]

    def literal(self, prop: str) -> Optional[str]:
        """Return the first value of a property, or None."""
        values = self.literals(prop)
        return values[0] if values else None

    def resources(self, prop: str) -> list["GraphNode"]:
        """Follow a relation property to the nodes it points at."""
        return [
            GraphNode(self.graph, s.value)
            for s in self.statements
            if s.property == prop and s.is_resource
        ]

    def resource(self, prop: str) -> Optional["GraphNode"]:
        """Follow a relation property to the first node it points at."""
        nodes = self.resources(prop)
        return nodes[0] if nodes else None


@dataclass
class AssembledGraph:
    """Statements assembled for one search match.

    Attributes:
        subject: URI of the matched subject.
        statements: Statements of the subject, its relatives and the
            synthetic highlight statements, in assembly order.
    """

    subject: str
    statements: list[Statement] = field(default_factory=list)
    _seen: set[Statement] = field(default_factory=set, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._seen.update(self.statements)

    def __iter__(self) -> Iterator[Statement]:
        return iter(self.statements)

    def __len__(self) -> int:
        return len(self.statements)

    @property
    def is_empty(self) -> bool:
        return not self.statements

    def add(self, statement: Statement) -> None:
        if statement not in self._seen:
            self._seen.add(statement)
            self.statements.append(statement)

    def subjects(self) -> list[str]:
        """Return subjects present in the graph, in first-seen order."""
        seen: dict[str, None] = {}
        for s in self.statements:
            seen.setdefault(s.subject, None)
        return list(seen)

    def node(self, uri: Optional[str] = None) -> GraphNode:
        return GraphNode(self, uri or self.subject)

    def literal(self, prop: str) -> Optional[str]:
        return self.node().literal(prop)

    def literals(self, prop: str) -> list[str]:
        return self.node().literals(prop)

    def resource(self, prop: str) -> Optional[GraphNode]:
        return self.node().resource(prop)
