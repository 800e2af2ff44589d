"""
OpenNotes - markdown notebooks on the local filesystem.

Decides which notebook applies to a working directory and runs read-only
SQL over notebook content through DuckDB.
"""

__version__ = "0.1.0"

from .cancellation import CancelScope
from .notebook import Notebook, NotebookConfig, NotebookService, NotebookStore
from .notes import Note, NoteService
from .query import DbService, SafeQueryGateway, validate_sql
from .services import Services

__all__ = [
    "Services",  # Main entry point (wired services)
    "NotebookService",
    "NotebookStore",
    "Notebook",
    "NotebookConfig",
    "Note",
    "NoteService",
    "DbService",
    "SafeQueryGateway",
    "validate_sql",
    "CancelScope",
]
