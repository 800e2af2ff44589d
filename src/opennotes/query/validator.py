"""Syntactic safety check for user-supplied SQL.

Only statements starting with SELECT or WITH are accepted, and none of the
blocked keywords may appear as a standalone token. Tokens are split on
whitespace and ``( ) , ; = < >``, so a keyword inside a quoted literal
(``'DROP'``) keeps its quotes and is not matched.

This is a first filter only; the read-only connection that runs the query is
what actually prevents mutation.
"""

from __future__ import annotations

import re

from ..exceptions import QueryValidationError

ALLOWED_PREFIXES = ("SELECT", "WITH")

BLOCKED_KEYWORDS = frozenset(
    {
        "DROP",
        "DELETE",
        "UPDATE",
        "INSERT",
        "ALTER",
        "CREATE",
        "TRUNCATE",
        "REPLACE",
        "ATTACH",
        "DETACH",
        "PRAGMA",
    }
)

_DELIMITERS = re.compile(r"[\s(),;=<>]+")


def tokenize(normalized: str) -> list[str]:
    """Split an uppercased query into keyword-candidate tokens."""
    return [token for token in _DELIMITERS.split(normalized) if token]


def validate_sql(query: str) -> None:
    """Raise :class:`QueryValidationError` unless ``query`` is a plain read.

    >>> validate_sql("SELECT * FROM notes")
    >>> validate_sql("DROP TABLE notes")
    Traceback (most recent call last):
    ...
    opennotes.exceptions.query.QueryValidationError: invalid query: only SELECT queries are allowed
    """
    normalized = query.strip().upper()

    if not normalized:
        raise QueryValidationError(query, "query cannot be empty")

    if not normalized.startswith(ALLOWED_PREFIXES):
        raise QueryValidationError(query, "only SELECT queries are allowed")

    for token in tokenize(normalized):
        if token in BLOCKED_KEYWORDS:
            raise QueryValidationError(query, f"keyword '{token}' is not allowed")


def is_safe_sql(query: str) -> bool:
    """Return True when :func:`validate_sql` accepts ``query``."""
    try:
        validate_sql(query)
    except QueryValidationError:
        return False
    return True
