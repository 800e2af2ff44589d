"""Notebook discovery: which notebook applies to a working directory.

Resolution precedence:
    1. Declared notebook path (global config or OPENNOTES_NOTEBOOK_PATH)
    2. Context match against every known notebook
    3. Nearest ancestor directory holding a ``.opennotes.json``

No match is a normal outcome (``None``), distinct from a config that fails
to load.
"""

from __future__ import annotations

import os
from typing import Optional

from ..cancellation import CancelScope, check_scope
from ..config import ConfigService
from ..exceptions import NotebookNotFoundError, OpenNotesError
from ..logging_config import get_logger
from ..notes import NoteService
from ..query.database import DbService
from ..query.gateway import SafeQueryGateway
from .models import Notebook, NotebookConfig
from .store import NotebookStore, iter_ancestors

logger = get_logger(__name__)


class NotebookService:
    """Opens, creates and discovers notebooks.

    Usage::

        service = NotebookService(config_service, store, db)
        nb = service.infer("/home/me/project/src")
        if nb is None:
            ...  # suggest creating one
    """

    def __init__(self, config_service: ConfigService, store: NotebookStore, db: DbService) -> None:
        self.config_service = config_service
        self.store = store
        self.db = db
        self.gateway = SafeQueryGateway(db)

    def _bind(self, config: NotebookConfig) -> Notebook:
        notes = NoteService(self.db, config.root, gateway=self.gateway)
        return Notebook(config=config, notes=notes)

    def has_notebook(self, path: str) -> bool:
        return self.store.has_notebook(path)

    def open(self, path: str) -> Notebook:
        """Load the notebook in ``path``.

        Raises:
            NotebookNotFoundError: If ``path`` has no notebook
            ConfigurationError: If its config cannot be loaded
        """
        if not self.store.has_notebook(path):
            raise NotebookNotFoundError(path)
        return self._bind(self.store.load(path))

    def create(self, name: str, path: str = "", register: bool = False) -> Notebook:
        return self._bind(self.store.create(name, path, register=register))

    def register(self, notebook: Notebook) -> None:
        """Save ``notebook`` and add its directory to the global registry."""
        self.store.save(notebook.config, register=True)

    def add_context(self, notebook: Notebook, path: str = "") -> bool:
        """Add ``path`` (default: cwd) to the notebook's contexts and save.

        Returns False, without writing, when the context is already present.
        """
        context = path or os.getcwd()
        if context in notebook.config.contexts:
            return False
        notebook.config.contexts.append(context)
        self.store.save(notebook.config, register=False)
        logger.info("Added context %s to notebook %r", context, notebook.name)
        return True

    def _try_open(self, path: str) -> Optional[Notebook]:
        """Open ``path``, logging and skipping notebooks that fail to load."""
        if not self.store.has_notebook(path):
            return None
        try:
            return self.open(path)
        except OpenNotesError as e:
            logger.warning("Skipping notebook at %s: %s", path, e)
            return None

    def list(self, cwd: str = "", scope: Optional[CancelScope] = None) -> list[Notebook]:
        """All known notebooks: registered ones first, then ancestors of ``cwd``.

        Entries are de-duplicated by config file path. Registry entries that
        no longer resolve, and configs that fail to load, are skipped.
        """
        notebooks: list[Notebook] = []
        seen: set[str] = set()

        for path in list(self.config_service.store.notebooks):
            check_scope(scope, "notebook listing")
            nb = self._try_open(path)
            if nb is not None and nb.config.path not in seen:
                seen.add(nb.config.path)
                notebooks.append(nb)

        for directory in iter_ancestors(cwd or os.getcwd()):
            check_scope(scope, "notebook listing")
            nb = self._try_open(directory)
            if nb is not None and nb.config.path not in seen:
                seen.add(nb.config.path)
                notebooks.append(nb)

        return notebooks

    def infer(self, cwd: str = "", scope: Optional[CancelScope] = None) -> Optional[Notebook]:
        """Resolve the notebook for ``cwd`` (default: current directory).

        Returns None when nothing matches.

        Raises:
            OperationCancelledError: If ``scope`` is cancelled or expires
            ConfigurationError: If the declared or ancestor notebook fails to load
        """
        cwd = os.path.abspath(cwd or os.getcwd())
        check_scope(scope, "notebook resolution")

        declared = self.config_service.declared_path
        if declared and self.store.has_notebook(declared):
            logger.debug("Using declared notebook %s", declared)
            return self.open(declared)

        for nb in self.list(cwd, scope=scope):
            context = nb.match_context(cwd)
            if context is not None:
                logger.debug("Notebook %r matched context %s", nb.name, context)
                return nb

        for directory in iter_ancestors(cwd):
            check_scope(scope, "notebook resolution")
            if self.store.has_notebook(directory):
                logger.debug("Found notebook in ancestor %s", directory)
                return self.open(directory)

        logger.debug("No notebook found for %s", cwd)
        return None
