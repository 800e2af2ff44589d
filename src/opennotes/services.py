"""Composition root: builds the long-lived services once per process."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from .config import ConfigService
from .notebook import NotebookService, NotebookStore
from .query.database import DEFAULT_EXTENSIONS, DbService


@dataclass
class Services:
    """The config store, database handles and notebook service, wired together."""

    config: ConfigService
    db: DbService
    store: NotebookStore
    notebooks: NotebookService

    @classmethod
    def create(
        cls,
        config_file: Optional[Path] = None,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ) -> Services:
        config = ConfigService.load(config_file)
        db = DbService(extensions=extensions)
        store = NotebookStore(config)
        return cls(
            config=config,
            db=db,
            store=store,
            notebooks=NotebookService(config, store, db),
        )

    def close(self) -> None:
        self.db.close()

    def __enter__(self) -> Services:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
