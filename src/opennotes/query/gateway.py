"""Safe execution of arbitrary read queries against notebook content.

Three layers stand between a caller's SQL and the notes on disk:

1. :func:`validate_sql` rejects anything that is not a plain SELECT/WITH
   before a connection is touched;
2. the statement runs on the read-only connection, where the engine itself
   refuses schema and data mutation, and only a single SELECT statement is
   executed;
3. execution is bounded by a deadline (30 seconds at most) and by the
   caller's :class:`CancelScope`.
"""

from __future__ import annotations

import threading
from typing import Any

import duckdb

from ..cancellation import CancelScope, check_scope
from ..exceptions import (
    DatabaseInitError,
    EmptyNotebookError,
    OperationCancelledError,
    QueryExecutionError,
    QueryTimeoutError,
    QueryValidationError,
)
from ..logging_config import get_logger
from .database import DbService, is_no_files_error, rows_to_dicts
from .validator import validate_sql

logger = get_logger(__name__)

# Hard ceiling for any safe query, whatever the caller asks for.
MAX_QUERY_SECONDS = 30.0

Row = dict[str, Any]


def effective_timeout(timeout: float | None = None, scope: CancelScope | None = None) -> float:
    """Tightest of the caller's timeout, the scope's deadline and the ceiling."""
    bounds = [MAX_QUERY_SECONDS]
    if timeout is not None:
        bounds.append(max(0.0, timeout))
    if scope is not None:
        remaining = scope.remaining()
        if remaining is not None:
            bounds.append(remaining)
    return min(bounds)


class SafeQueryGateway:
    """Runs validated read queries on the read-only connection.

    Usage::

        gateway = SafeQueryGateway(db)
        rows = gateway.execute("SELECT filepath FROM read_markdown('/notes/**/*.md')")
    """

    def __init__(self, db: DbService) -> None:
        self.db = db

    def execute(
        self,
        query: str,
        timeout: float | None = None,
        scope: CancelScope | None = None,
    ) -> list[Row]:
        """Validate and run ``query``, returning rows as column -> value dicts.

        Parameters
        ----------
        query:
            Caller-supplied SQL. Must start with SELECT or WITH.
        timeout:
            Seconds allowed for execution; capped at ``MAX_QUERY_SECONDS``.
        scope:
            Optional cancellation scope; cancelling it interrupts the query.

        Returns
        -------
        list[dict]
            One dict per row, keys in the query's column order. Empty when
            the query matched nothing.

        Raises
        ------
        QueryValidationError
            The query failed validation (no connection was used).
        QueryTimeoutError
            The deadline passed before the query finished.
        OperationCancelledError
            The scope was cancelled.
        EmptyNotebookError
            A markdown glob in the query matched no files.
        QueryExecutionError
            The engine rejected or failed the query.
        """
        try:
            validate_sql(query)
        except QueryValidationError as e:
            logger.warning("SQL query validation failed: %s", e)
            raise

        check_scope(scope, "query")

        try:
            con = self.db.get_read_only_db()
        except DatabaseInitError as e:
            logger.error("Failed to get read-only database connection: %s", e)
            raise

        deadline = effective_timeout(timeout, scope)
        if deadline <= 0:
            raise QueryTimeoutError(timeout if timeout is not None else 0.0, query=query)

        cursor = con.cursor()
        timed_out = threading.Event()

        def _on_deadline() -> None:
            timed_out.set()
            cursor.interrupt()

        timer = threading.Timer(deadline, _on_deadline)
        timer.daemon = True
        unregister = scope.on_cancel(cursor.interrupt) if scope is not None else None

        logger.debug("Executing SQL query (timeout %.1fs): %s", deadline, query)
        try:
            timer.start()
            self._require_single_select(cursor, query)
            cursor.execute(query)
            rows = rows_to_dicts(cursor)
        except duckdb.InterruptException as e:
            if scope is not None and scope.cancelled:
                raise OperationCancelledError("query") from e
            if timed_out.is_set() or (scope is not None and scope.expired):
                logger.warning("Query timed out after %.1fs", deadline)
                raise QueryTimeoutError(deadline, query=query) from e
            raise QueryExecutionError(str(e), query=query) from e
        except duckdb.Error as e:
            if is_no_files_error(e):
                raise EmptyNotebookError(query=query) from e
            logger.error("Query execution failed: %s", e)
            raise QueryExecutionError(str(e), query=query) from e
        finally:
            timer.cancel()
            if unregister is not None:
                unregister()
            cursor.close()

        logger.debug("Query returned %d row(s)", len(rows))
        return rows

    @staticmethod
    def _require_single_select(cursor: duckdb.DuckDBPyConnection, query: str) -> None:
        """Reject statement lists and non-SELECT statements at the engine level."""
        statements = cursor.extract_statements(query)
        if len(statements) != 1:
            raise QueryExecutionError(
                f"expected a single statement, got {len(statements)}", query=query
            )
        if statements[0].type != duckdb.StatementType.SELECT:
            raise QueryExecutionError(
                f"statement type {statements[0].type.name} is not allowed", query=query
            )
