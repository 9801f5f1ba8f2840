"""Translation of web-search style queries into FTS5 MATCH expressions.

Supported syntax, similar to PostgreSQL's ``websearch_to_tsquery``:

- ``word word`` all words must match
- ``"quoted phrase"`` words must appear next to each other
- ``word or word`` either side may match
- ``-word`` the word must not match

Every token is emitted as an FTS5 string so URLs, colons and other
punctuation never reach the FTS5 query parser as operators.
"""

from __future__ import annotations

import re

from ..core.exceptions import MalformedRequestError

_TOKEN_REGEX = re.compile(r'(-?)"([^"]*)"?|(\S+)')


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def to_fts5(query: str) -> str:
    """Compile a web-search style query into an FTS5 expression.

    Args:
        query: User supplied query text.

    Returns:
        FTS5 MATCH expression.

    Raises:
        MalformedRequestError: If the query contains no searchable token.

    Example:
        >>> to_fts5('lorem "dolor sit" or amet -ipsum')
        '"lorem" AND ("dolor sit" OR "amet") NOT "ipsum"'
    """
    groups: list[list[str]] = []
    excluded: list[str] = []
    pending_or = False
    for match in _TOKEN_REGEX.finditer(query):
        negated, phrase, word = match.groups()
        if word is not None:
            if word.lower() == "or" and groups:
                pending_or = True
                continue
            negated = "-" if word.startswith("-") and len(word) > 1 else ""
            text = word[1:] if negated else word
        else:
            text = phrase
        text = text.strip()
        if not text:
            continue
        if negated:
            excluded.append(_quote(text))
        elif pending_or:
            groups[-1].append(_quote(text))
        else:
            groups.append([_quote(text)])
        pending_or = False

    if not groups:
        raise MalformedRequestError(f"Full text query has no searchable terms: {query!r}")

    parts = [g[0] if len(g) == 1 else "(" + " OR ".join(g) + ")" for g in groups]
    expression = " AND ".join(parts)
    for term in excluded:
        expression += f" NOT {term}"
    return expression
