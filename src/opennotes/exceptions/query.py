"""Query exceptions: validation, execution, cancellation."""

from typing import Optional

from .base import OpenNotesError


class QueryError(OpenNotesError):
    """Base class for query-related errors."""

    pass


class QueryValidationError(QueryError):
    """Raised when a query is rejected before reaching the engine."""

    def __init__(self, query: str, reason: str):
        super().__init__(f"invalid query: {reason}")
        self.query = query
        self.reason = reason


class QueryExecutionError(QueryError):
    """Raised when the engine fails a syntactically valid query."""

    def __init__(self, reason: str, query: Optional[str] = None):
        details = {"query": query} if query else None
        super().__init__(f"query execution failed: {reason}", details=details)
        self.query = query
        self.reason = reason


class EmptyNotebookError(QueryExecutionError):
    """Raised when a markdown glob matches no files."""

    def __init__(self, glob: str = "", query: Optional[str] = None):
        reason = f"no markdown files match {glob}" if glob else "no markdown files matched"
        super().__init__(reason, query=query)
        self.glob = glob


class DatabaseInitError(QueryError):
    """Raised when a database handle could not be initialized."""

    def __init__(self, handle: str, reason: str):
        super().__init__(
            f"failed to initialize {handle} database",
            details={"reason": reason},
        )
        self.handle = handle
        self.reason = reason


class CancelledError(OpenNotesError):
    """Base class for work stopped by a deadline or a cancellation."""

    pass


class QueryTimeoutError(CancelledError):
    """Raised when a query exceeds its deadline."""

    def __init__(self, timeout: float, query: Optional[str] = None):
        super().__init__(
            f"query timed out after {timeout:g}s",
            details={"query": query} if query else None,
        )
        self.timeout = timeout
        self.query = query


class OperationCancelledError(CancelledError):
    """Raised when the caller cancels an operation."""

    def __init__(self, operation: str):
        super().__init__(f"{operation} cancelled")
        self.operation = operation
