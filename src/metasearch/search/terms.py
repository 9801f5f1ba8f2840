"""Search terms and their translation into SQL.

A SearchTerm describes one constraint of a search. The TermTranslator turns a
list of terms into a single query returning the ids of subjects matching all
of them (terms are AND-ed, the properties and values of one term are OR-ed).

Example:
    translator = TermTranslator(schema, base_url)
    part = translator.translate([
        SearchTerm("https://number.prop", 30, "<=", datatype=XSD_DECIMAL),
        SearchTerm("https://lorem.ipsum", "ipsum", OPERATOR_FTS),
    ])
    rows = conn.execute(part.query, part.params)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from loguru import logger

from ..core.config import Schema
from ..core.exceptions import MalformedRequestError
from ..core.types import NUMERIC_TYPES, RESOURCE, TEMPORAL_TYPES, XSD, XSD_DATE
from ..store.values import is_datetime, is_number, numeric_value, temporal_value, type_family
from .fts_query import to_fts5
from .query import QueryPart

OPERATOR_FTS = "@@"
OPERATOR_REGEX = "~"
OPERATORS = ("=", "<", "<=", ">", ">=", OPERATOR_REGEX, OPERATOR_FTS)

TYPE_NUMBER = "number"
TYPE_DATE = "date"
TYPE_DATETIME = "datetime"
TYPE_STRING = "string"
TYPE_RELATION = "relation"
TYPE_ID = "id"
TYPE_ALIASES = (TYPE_NUMBER, TYPE_DATE, TYPE_DATETIME, TYPE_STRING, TYPE_RELATION, TYPE_ID)

URI_REGEX = re.compile(r"^\w+:(//?)?\S+$")

_FAMILY_MEMBERS = {
    "number": sorted(NUMERIC_TYPES),
    "temporal": sorted(TEMPORAL_TYPES),
}


def _placeholders(values: Sequence[Any]) -> str:
    return ", ".join("?" for _ in values)


@dataclass
class SearchTerm:
    """A single search constraint.

    Attributes:
        properties: Properties to match; more than one means any of them.
        value: Value (or list of alternative values) to compare with.
        operator: One of ``=``, ``<``, ``<=``, ``>``, ``>=``, ``~`` (regular
            expression) or ``@@`` (full text match).
        negate: Match the subjects a relation points at instead of the
            subjects holding the relation.
        datatype: XSD datatype URI or one of the ``TYPE_*`` aliases. Statements
            stored with a datatype of another kind are not filtered out.
        language: Only statements in this language are compared.
    """

    properties: Sequence[str] | str
    value: Any = None
    operator: str = "="
    negate: bool = False
    datatype: Optional[str] = None
    language: Optional[str] = None

    def __post_init__(self) -> None:
        if isinstance(self.properties, str):
            self.properties = (self.properties,)
        self.properties = tuple(self.properties or ())
        if not self.properties or not all(self.properties):
            raise MalformedRequestError("Search term requires at least one property")
        if self.operator not in OPERATORS:
            raise MalformedRequestError(f"Unknown operator {self.operator}")
        if self.datatype is not None and not (
            self.datatype in TYPE_ALIASES
            or self.datatype == RESOURCE
            or self.datatype.startswith(XSD)
        ):
            raise MalformedRequestError(f"Unknown type {self.datatype}")
        if self.is_fulltext:
            if self.negate:
                raise MalformedRequestError("Full text terms cannot be negated")
            if not self.values or not str(self.values[0]).strip():
                raise MalformedRequestError("Full text term requires a query")
        if self.negate and self.value is None:
            raise MalformedRequestError("Inverse relation term requires a value")

    @property
    def is_fulltext(self) -> bool:
        return self.operator == OPERATOR_FTS

    @property
    def values(self) -> list[Any]:
        if isinstance(self.value, (list, tuple)):
            return list(self.value)
        return [self.value]

    @classmethod
    def from_form(cls, form: Mapping[str, Sequence[Any]], key: int) -> "SearchTerm":
        """Create a term from the ``key``-th entry of HTTP form style arrays.

        Recognized keys: ``property[]``, ``value[]``, ``operator[]``,
        ``type[]``, ``language[]`` and ``negate[]``.
        """

        def get(name: str, default: Any = None) -> Any:
            values = form.get(f"{name}[]", form.get(name, ()))
            return values[key] if key < len(values) and values[key] not in ("", None) else default

        negate = get("negate", False)
        if isinstance(negate, str):
            negate = negate.lower() in ("1", "true", "yes")
        return cls(
            properties=get("property", ()),
            value=get("value"),
            operator=get("operator", "="),
            negate=bool(negate),
            datatype=get("type"),
            language=get("language"),
        )


class TermTranslator:
    """Compiles search terms into a query returning matching subject ids."""

    def __init__(
        self,
        schema: Schema,
        base_url: str,
        non_relation_properties: Sequence[str] = (),
    ):
        """Initialize the translator.

        Args:
            schema: Well-known property mapping.
            base_url: Prefix turning internal subject ids into URIs.
            non_relation_properties: Properties stored only as literals.
        """
        self.schema = schema
        self.base_url = base_url
        self.non_relation_properties = frozenset(non_relation_properties)

    def translate(self, terms: Sequence[SearchTerm]) -> QueryPart:
        """Translate terms into one query with an ``id`` column.

        Raises:
            MalformedRequestError: If no terms are given or a term is invalid.
        """
        if not terms:
            raise MalformedRequestError("At least one search term is required")

        parts = [self.translate_term(term) for term in terms]
        if len(parts) == 1:
            return parts[0]

        query = f"SELECT id FROM ({parts[0].query}) t0"
        params = list(parts[0].params)
        for n, part in enumerate(parts[1:], start=1):
            query += f"\nJOIN ({part.query}) t{n} USING (id)"
            params.extend(part.params)
        logger.debug(f"Translated {len(terms)} search terms")
        return QueryPart(query, params)

    def translate_term(self, term: SearchTerm) -> QueryPart:
        """Translate a single term."""
        if term.is_fulltext:
            return self._fulltext(term)
        if term.datatype == TYPE_ID:
            return self._internal_ids(term)
        return self._union([self._single(term, value) for value in term.values])

    def _single(self, term: SearchTerm, value: Any) -> QueryPart:
        if term.properties == (self.schema.id,):
            return self._any_identifier(term, value)
        if term.negate:
            return self._relation(term, value, inverse=True)
        relation_props = [p for p in term.properties if p not in self.non_relation_properties]
        if term.datatype in (RESOURCE, TYPE_RELATION) and relation_props:
            return self._relation(term, value, inverse=False)
        literal = self._literal(term, value)
        if (
            term.datatype is None
            and term.operator == "="
            and relation_props
            and isinstance(value, str)
            and URI_REGEX.match(value)
        ):
            # a URI may be any alias of the relation target
            relation = self._relation(term, value, inverse=False, properties=relation_props)
            return self._union([literal, relation])
        return literal

    @staticmethod
    def _union(parts: list[QueryPart]) -> QueryPart:
        if len(parts) == 1:
            return parts[0]
        return QueryPart(
            "\nUNION\n".join(p.query for p in parts),
            [param for p in parts for param in p.params],
        )

    @staticmethod
    def _compare(column: str, operator: str) -> str:
        if operator == OPERATOR_REGEX:
            return f"{column} REGEXP ?"
        return f"{column} {operator} ?"

    def _any_identifier(self, term: SearchTerm, value: Any) -> QueryPart:
        if value is None:
            return QueryPart("SELECT DISTINCT id FROM identifiers", [])
        return QueryPart(
            f"SELECT DISTINCT id FROM identifiers WHERE {self._compare('ids', term.operator)}",
            [str(value)],
        )

    def _relation(
        self,
        term: SearchTerm,
        value: Any,
        inverse: bool,
        properties: Optional[Sequence[str]] = None,
    ) -> QueryPart:
        # inverse: subjects pointed at by the subject identified by value
        holder, target = ("r.target_id", "r.id") if inverse else ("r.id", "r.target_id")
        props = list(properties if properties is not None else term.properties)
        where = [f"r.property IN ({_placeholders(props)})"]
        params: list[Any] = props
        if value is not None:
            where.append(self._compare("i.ids", term.operator))
            params = params + [str(value)]
        query = f"""
            SELECT DISTINCT {holder} AS id
            FROM relations r JOIN identifiers i ON i.id = {target}
            WHERE {' AND '.join(where)}
        """
        return QueryPart(query, params)

    def _literal(self, term: SearchTerm, value: Any) -> QueryPart:
        props = list(term.properties)
        where = [f"property IN ({_placeholders(props)})"]
        params: list[Any] = list(props)
        if term.language:
            where.append("lang = ?")
            params.append(term.language)

        if value is None:
            return QueryPart(
                f"SELECT DISTINCT id FROM statements WHERE {' AND '.join(where)}",
                params,
            )

        family = self._family(term, value)
        column, param = self._column(term, value, family)
        compare = self._compare(column, term.operator)
        if term.datatype is not None:
            mismatch, mismatch_params = self._mismatch(family)
            where.append(f"({mismatch} OR {compare})")
            params.extend(mismatch_params)
        else:
            where.append(compare)
        params.append(param)

        query = f"SELECT DISTINCT id FROM statements WHERE {' AND '.join(where)}"
        if term.language:
            return QueryPart(query, params)

        # identifier and relation rows hold resource values
        if family == "string":
            id_match = self._compare("ids", term.operator)
            rel_match = self._compare("(? || target_id)", term.operator)
            id_params, rel_params = [param], [self.base_url, param]
        elif term.datatype is not None:
            # never of a number or temporal datatype, so they pass unfiltered
            id_match = rel_match = "1"
            id_params, rel_params = [], []
        else:
            return QueryPart(query, params)

        if self.schema.id in props:
            query += f"\nUNION\nSELECT DISTINCT id FROM identifiers WHERE {id_match}"
            params.extend(id_params)
        query += f"""
            UNION
            SELECT DISTINCT id FROM relations
            WHERE property IN ({_placeholders(props)}) AND {rel_match}
        """
        params.extend(props + rel_params)
        return QueryPart(query, params)

    def _family(self, term: SearchTerm, value: Any) -> str:
        if term.operator == OPERATOR_REGEX:
            return "string"
        if term.datatype is not None:
            alias = {TYPE_NUMBER: "number", TYPE_DATE: "temporal", TYPE_DATETIME: "temporal"}
            return alias.get(term.datatype) or type_family(term.datatype)
        if set(term.properties) <= self.non_relation_properties:
            return "string"
        if is_number(value):
            return "number"
        if is_datetime(value):
            return "temporal"
        return "string"

    @staticmethod
    def _column(term: SearchTerm, value: Any, family: str) -> tuple[str, Any]:
        if family == "number":
            number = numeric_value(value)
            if number is None:
                raise MalformedRequestError(f"Value {value!r} is not a number")
            return "value_n", number
        if family == "temporal":
            moment = temporal_value(value)
            if moment is None:
                raise MalformedRequestError(f"Value {value!r} is not a date")
            if term.datatype in (XSD_DATE, TYPE_DATE):
                return "substr(value_t, 1, 10)", moment[:10]
            return "value_t", moment
        return "value", str(value)

    @staticmethod
    def _mismatch(family: str) -> tuple[str, list[str]]:
        """SQL condition true for statements stored with a datatype of another family."""
        if family == "string":
            others = _FAMILY_MEMBERS["number"] + _FAMILY_MEMBERS["temporal"]
            return f"type IN ({_placeholders(others)})", others
        members = _FAMILY_MEMBERS[family]
        return f"type NOT IN ({_placeholders(members)})", members

    def _fulltext(self, term: SearchTerm) -> QueryPart:
        props = list(term.properties)
        query = f"""
            SELECT DISTINCT s.id
            FROM statements_fts JOIN statements s ON s.mid = statements_fts.rowid
            WHERE statements_fts MATCH ? AND s.property IN ({_placeholders(props)})
        """
        params: list[Any] = [to_fts5(str(term.values[0])), *props]
        if term.language:
            query += " AND (s.lang = ? OR s.lang IS NULL)"
            params.append(term.language)
        return QueryPart(query, params)

    def _internal_ids(self, term: SearchTerm) -> QueryPart:
        try:
            ids = [int(v) for v in term.values]
        except (TypeError, ValueError) as e:
            raise MalformedRequestError(f"Invalid subject id in {term.value!r}") from e
        return QueryPart(f"SELECT id FROM resources WHERE id IN ({_placeholders(ids)})", ids)
