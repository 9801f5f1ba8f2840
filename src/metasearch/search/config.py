"""Search request shaping: paging, ordering, metadata mode, highlighting."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping, Optional, Sequence, Union

HighlightParam = Union[None, str, int, bool, Sequence[Any]]

# Fields never serialized into request parameters
_NOT_SERIALIZED = ("metadata_mode", "metadata_parent_property", "count")


@dataclass
class SearchConfig:
    """Search configuration.

    The ``fts_*`` highlighting parameters accept a scalar or a list. A list is
    aligned with the full text terms of the search (the first entry configures
    the highlight statements suffixed ``1``, and so on); a scalar display
    parameter applies to every term, while a scalar ``fts_query`` or
    ``fts_property`` applies to the first term only.

    Attributes:
        limit: Maximum number of matches returned (None means no limit).
        offset: Number of matches skipped.
        order_by: Properties to order by, ``^`` prefix for descending order.
        order_by_lang: Only values in this language are used for ordering.
        metadata_mode: Named mode or ``D_N_X_A`` descriptor, see
            ``metasearch.search.modes``.
        metadata_parent_property: Relation followed by ancestor/descendant modes.
        resource_properties: If set, only these properties of matched subjects
            are returned.
        relatives_properties: If set, only these properties of related
            subjects are returned.
        fts_query: Query used for highlighting (defaults to the full text term
            values).
        fts_property: Property highlighted (defaults to the term properties).
        fts_start_sel: Marker inserted before a matched word.
        fts_stop_sel: Marker inserted after a matched word.
        fts_min_words: Minimum number of words in a fragment.
        fts_max_words: Maximum number of words in a fragment.
        fts_short_word: Words this long or shorter are dropped from fragment edges.
        fts_highlight_all: Return whole values instead of fragments.
        fts_max_fragments: Maximum number of fragments (0 means one headline).
        fts_fragment_delimiter: Separator between fragments.
        count: Total number of matches ignoring limit and offset. Set once the
            result stream has been fully consumed.
    """

    limit: Optional[int] = None
    offset: int = 0
    order_by: list[str] = field(default_factory=list)
    order_by_lang: Optional[str] = None
    metadata_mode: Optional[str] = None
    metadata_parent_property: Optional[str] = None
    resource_properties: list[str] = field(default_factory=list)
    relatives_properties: list[str] = field(default_factory=list)
    fts_query: HighlightParam = None
    fts_property: HighlightParam = None
    fts_start_sel: HighlightParam = None
    fts_stop_sel: HighlightParam = None
    fts_min_words: HighlightParam = None
    fts_max_words: HighlightParam = None
    fts_short_word: HighlightParam = None
    fts_highlight_all: HighlightParam = None
    fts_max_fragments: HighlightParam = None
    fts_fragment_delimiter: HighlightParam = None
    count: Optional[int] = None

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "SearchConfig":
        """Create a config from request parameters.

        Both ``name`` and ``name[]`` keys are accepted; camelCase names
        (``ftsQuery``, ``orderBy``, ...) are mapped onto the snake_case fields.
        """
        config = cls()
        for f in fields(cls):
            if f.name == "count":
                continue
            for key in _form_keys(f.name):
                if key in form:
                    setattr(config, f.name, _coerce(f.name, form[key]))
                    break
        return config

    def to_dict(self) -> dict[str, Any]:
        """Return non-empty request parameters keyed by their camelCase names."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in _NOT_SERIALIZED or value in (None, [], "") or (f.name == "offset" and not value):
                continue
            result[_camel(f.name)] = value
        return result


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _form_keys(name: str) -> list[str]:
    camel = _camel(name)
    return [camel, f"{camel}[]", name, f"{name}[]"]


_INT_FIELDS = ("limit", "offset", "fts_min_words", "fts_max_words", "fts_short_word", "fts_max_fragments")
_LIST_FIELDS = ("order_by", "resource_properties", "relatives_properties")


def _coerce(name: str, value: Any) -> Any:
    if name in _LIST_FIELDS:
        return list(value) if isinstance(value, (list, tuple)) else [value]
    if name in _INT_FIELDS:
        if isinstance(value, (list, tuple)):
            return [int(v) for v in value]
        return int(value)
    if name == "fts_highlight_all":
        if isinstance(value, (list, tuple)):
            return [_truthy(v) for v in value]
        return _truthy(value)
    if isinstance(value, tuple):
        return list(value)
    return value


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.lower() in ("1", "true", "yes")
    return bool(value)
