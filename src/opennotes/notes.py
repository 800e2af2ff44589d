"""Note queries over a single notebook's markdown files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Optional

from .cancellation import CancelScope
from .exceptions import EmptyNotebookError, OpenNotesError
from .logging_config import get_logger
from .query.database import DbService
from .query.gateway import Row, SafeQueryGateway
from .strings import slugify

logger = get_logger(__name__)

_FILEPATH_COLUMNS = {"filepath", "file_path", "filename"}
_CONTENT_COLUMNS = {"content", "body"}


def _metadata_to_dict(value: Any) -> dict[str, Any]:
    """Convert a DuckDB MAP value to a plain dict with string keys.

    Older drivers return MAPs as ``{"key": [...], "value": [...]}``.
    """
    if not isinstance(value, dict):
        return {}
    if set(value) == {"key", "value"} and isinstance(value["key"], list):
        value = dict(zip(value["key"], value["value"]))
    return {str(k): v for k, v in value.items()}


@dataclass
class Note:
    """A markdown note read from a notebook."""

    filepath: str
    relative: str
    content: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        """``metadata["title"]`` when set, else the slugified file stem."""
        title = self.metadata.get("title")
        if isinstance(title, str) and title:
            return title
        name = PurePosixPath(self.relative).name
        if name.endswith(".md"):
            name = name[:-3]
        return slugify(name)

    @classmethod
    def from_row(cls, row: Row, notebook_path: str) -> Note:
        note = cls(filepath="", relative="")
        prefix = notebook_path.rstrip("/") + "/"
        for column, value in row.items():
            if column in _FILEPATH_COLUMNS:
                if isinstance(value, str):
                    note.filepath = value
                    note.relative = value[len(prefix):] if value.startswith(prefix) else value
            elif column in _CONTENT_COLUMNS:
                if isinstance(value, str):
                    note.content = value
            elif column == "metadata":
                note.metadata.update(_metadata_to_dict(value))
            else:
                note.metadata[column] = value
        return note


class NoteService:
    """Note operations bound to one notebook root.

    Scans run on the main connection; caller-supplied SQL goes through the
    safe query gateway.
    """

    def __init__(
        self,
        db: DbService,
        notebook_path: str,
        gateway: Optional[SafeQueryGateway] = None,
    ) -> None:
        self.db = db
        self.notebook_path = notebook_path
        self.gateway = gateway or SafeQueryGateway(db)

    @property
    def glob(self) -> str:
        """Glob matching every markdown file under the notebook root."""
        return str(Path(self.notebook_path) / "**" / "*.md")

    def search_notes(self, query: str = "") -> list[Note]:
        """Return notes whose content or path contains ``query`` (case-insensitive).

        Raises:
            EmptyNotebookError: If the notebook has no markdown files
        """
        if not self.notebook_path:
            raise OpenNotesError("no notebook selected")

        glob = self.glob
        logger.debug("Searching notes glob=%s query=%r", glob, query)
        try:
            rows = self.db.query(
                "SELECT * FROM read_markdown(?, include_filepath:=true)", [glob]
            )
        except EmptyNotebookError as e:
            raise EmptyNotebookError(glob, query=e.query) from e

        needle = query.lower()
        notes = []
        for row in rows:
            note = Note.from_row(row, self.notebook_path)
            if needle and needle not in note.content.lower() and needle not in note.filepath.lower():
                continue
            notes.append(note)

        logger.debug("Found %d note(s)", len(notes))
        return notes

    def list_notes(self) -> list[Note]:
        """All notes, with an empty notebook reported as an empty list."""
        try:
            return self.search_notes()
        except EmptyNotebookError:
            logger.debug("Notebook %s has no notes", self.notebook_path)
            return []

    def count(self) -> int:
        """Number of markdown files in the notebook."""
        if not self.notebook_path:
            return 0
        try:
            rows = self.db.query("SELECT COUNT(*) AS count FROM read_markdown(?)", [self.glob])
        except EmptyNotebookError:
            return 0
        return int(rows[0]["count"]) if rows else 0

    def execute_sql_safe(
        self,
        query: str,
        timeout: Optional[float] = None,
        scope: Optional[CancelScope] = None,
    ) -> list[Row]:
        """Run caller-supplied SQL through the safe query gateway."""
        return self.gateway.execute(query, timeout=timeout, scope=scope)

    def query(self, sql: str) -> list[Row]:
        """Run trusted SQL on the main connection."""
        return self.db.query(sql)
