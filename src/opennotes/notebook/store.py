"""Reading and writing ``.opennotes.json`` notebook config files.

Layout on disk::

    SomeNotebook/
      .opennotes.json      {"root": ".notes", "name": "Some Notebook", ...}
      .notes/
        SomeNote.md
        AFolder/NestedNote.md

``root`` is stored relative to the config file's directory and resolved to
an absolute path on load.
"""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Iterator, Union

from ..config import NOTEBOOK_CONFIG_FILE, ConfigService
from ..exceptions import (
    ConfigurationError,
    InvalidConfigError,
    InvalidNotebookConfigError,
    NotebookIOError,
    NotebookNotFoundError,
)
from ..logging_config import get_logger
from ..validation import validate_notebook_name, validate_path
from .models import NotebookConfig, NotebookGroup, StoredNotebookConfig

logger = get_logger(__name__)

# Notes subdirectory created for new notebooks.
NOTES_DIR_NAME = ".notes"

PathLike = Union[str, Path]

_write_locks: dict[str, threading.Lock] = {}
_write_locks_guard = threading.Lock()


def _write_lock(config_path: str) -> threading.Lock:
    """One in-process lock per config file path."""
    with _write_locks_guard:
        lock = _write_locks.get(config_path)
        if lock is None:
            lock = _write_locks[config_path] = threading.Lock()
        return lock


def config_file_path(notebook_dir: PathLike) -> str:
    """Absolute config file path for a notebook directory."""
    return os.path.abspath(os.path.join(str(notebook_dir), NOTEBOOK_CONFIG_FILE))


class NotebookStore:
    """Loads, saves and creates notebook config files.

    The global registry is updated through ``config_service`` when a save
    asks for registration.
    """

    def __init__(self, config_service: ConfigService) -> None:
        self.config_service = config_service

    def has_notebook(self, path: PathLike) -> bool:
        """True iff ``path`` holds a notebook config file."""
        if not path:
            return False
        try:
            return os.path.isfile(config_file_path(path))
        except (OSError, ValueError):
            return False

    def load(self, path: PathLike) -> NotebookConfig:
        """Load and resolve the notebook config in directory ``path``.

        A missing notes directory is recreated rather than treated as an error.

        Raises:
            NotebookNotFoundError: If there is no config file
            InvalidNotebookConfigError: If the file is not a valid config
            ConfigurationError: If the notes directory cannot be created
            NotebookIOError: If the config file cannot be read
        """
        notebook_dir = os.path.abspath(str(path))
        config_path = config_file_path(notebook_dir)

        try:
            with open(config_path, encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            raise NotebookNotFoundError(notebook_dir)
        except json.JSONDecodeError as e:
            raise InvalidNotebookConfigError(config_path, f"invalid JSON: {e}")
        except OSError as e:
            raise NotebookIOError(config_path, str(e))

        try:
            stored = StoredNotebookConfig.from_dict(raw)
        except InvalidConfigError as e:
            raise InvalidNotebookConfigError(config_path, e.reason)

        root = os.path.normpath(os.path.join(notebook_dir, stored.root))
        self._ensure_root(root)

        logger.debug("Loaded notebook %r from %s", stored.name, config_path)
        return NotebookConfig(
            root=root,
            name=stored.name,
            contexts=stored.contexts,
            templates=stored.templates,
            groups=stored.groups,
            path=config_path,
        )

    @staticmethod
    def _ensure_root(root: str) -> None:
        try:
            os.stat(root)
        except FileNotFoundError:
            logger.info("Notes directory %s is missing, creating it", root)
            try:
                os.makedirs(root, exist_ok=True)
            except OSError as e:
                raise ConfigurationError(
                    f"notes path not found and could not create: {root}",
                    details={"reason": str(e)},
                )
        except OSError as e:
            raise ConfigurationError(f"notes path error: {root}", details={"reason": str(e)})

    def save(self, config: NotebookConfig, register: bool = False) -> None:
        """Write ``config`` to its config file, optionally registering it globally.

        ``root`` is stored relative to the config directory.

        Raises:
            NotebookIOError: If the config file cannot be written
        """
        config_dir = os.path.dirname(config.path)
        rel_root = os.path.relpath(config.root, config_dir) if config.root else "."
        stored = StoredNotebookConfig(
            root=rel_root or ".",
            name=config.name,
            contexts=config.contexts,
            templates=config.templates,
            groups=config.groups,
        )
        data = json.dumps(stored.to_dict(), indent=2) + "\n"

        with _write_lock(config.path):
            try:
                os.makedirs(config_dir, exist_ok=True)
                with open(config.path, "w", encoding="utf-8") as f:
                    f.write(data)
            except OSError as e:
                raise NotebookIOError(config.path, str(e))
        logger.debug("Saved notebook config %s", config.path)

        if register:
            self.config_service.register(config_dir)

    def create(self, name: str, path: PathLike = "", register: bool = False) -> NotebookConfig:
        """Create a notebook in ``path`` (default: current directory).

        The notes live in ``<path>/.notes``, the directory itself is the first
        context, and a default group covers every markdown file.

        Raises:
            InvalidConfigError: If the name or path is invalid
            NotebookIOError: If the notes directory or config cannot be written
        """
        validate_notebook_name(name)
        validate_path(str(path))

        notebook_dir = os.path.abspath(str(path) or os.getcwd())
        notes_dir = os.path.join(notebook_dir, NOTES_DIR_NAME)

        config = NotebookConfig(
            root=notes_dir,
            name=name,
            contexts=[notebook_dir],
            templates={},
            groups=[NotebookGroup.default()],
            path=config_file_path(notebook_dir),
        )

        try:
            os.makedirs(notes_dir, exist_ok=True)
        except OSError as e:
            raise NotebookIOError(notes_dir, str(e))

        self.save(config, register=register)
        logger.info("Created notebook %r at %s", name, notebook_dir)
        return config


def iter_ancestors(start: str) -> Iterator[str]:
    """Yield ``start`` and each parent directory, stopping before the filesystem root."""
    current = os.path.abspath(start) if start else ""
    while current and current != os.path.dirname(current):
        yield current
        current = os.path.dirname(current)
