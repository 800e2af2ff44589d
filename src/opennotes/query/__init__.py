"""Query layer: DuckDB connections, SQL validation, and the safe gateway."""

from .database import DbService
from .gateway import MAX_QUERY_SECONDS, SafeQueryGateway
from .validator import BLOCKED_KEYWORDS, is_safe_sql, validate_sql

__all__ = [
    "DbService",
    "SafeQueryGateway",
    "MAX_QUERY_SECONDS",
    "BLOCKED_KEYWORDS",
    "validate_sql",
    "is_safe_sql",
]
