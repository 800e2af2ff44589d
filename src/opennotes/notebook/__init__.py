"""Notebook configuration, storage, and discovery."""

from .models import Notebook, NotebookConfig, NotebookGroup, StoredNotebookConfig
from .service import NotebookService
from .store import NOTES_DIR_NAME, NotebookStore, config_file_path

__all__ = [
    "Notebook",
    "NotebookConfig",
    "NotebookGroup",
    "StoredNotebookConfig",
    "NotebookService",
    "NotebookStore",
    "NOTES_DIR_NAME",
    "config_file_path",
]
