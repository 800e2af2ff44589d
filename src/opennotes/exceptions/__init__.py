"""Exception hierarchy for OpenNotes."""

from .base import OpenNotesError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidNotebookConfigError,
    InvalidNoteNameError,
    NotebookIOError,
    NotebookNotFoundError,
)
from .query import (
    CancelledError,
    DatabaseInitError,
    EmptyNotebookError,
    OperationCancelledError,
    QueryError,
    QueryExecutionError,
    QueryTimeoutError,
    QueryValidationError,
)

__all__ = [
    "OpenNotesError",
    "ConfigurationError",
    "InvalidConfigError",
    "InvalidNotebookConfigError",
    "InvalidNoteNameError",
    "NotebookIOError",
    "NotebookNotFoundError",
    "QueryError",
    "QueryValidationError",
    "QueryExecutionError",
    "EmptyNotebookError",
    "DatabaseInitError",
    "CancelledError",
    "QueryTimeoutError",
    "OperationCancelledError",
]
