"""DuckDB connection lifecycle for notebook queries.

Two independent connections are kept per process:

- the **main** connection backs ordinary note scans (``read_markdown`` globs);
- the **read-only** connection backs only the safe query gateway. It is
  opened on a private database file with ``read_only=True``, so schema and
  data mutations are rejected by the engine itself.

Both are initialized lazily, exactly once, with the markdown extension
loaded. A failed initialization is remembered and re-raised to later callers
instead of being retried.

Usage::

    with DbService() as db:
        rows = db.query("SELECT * FROM read_markdown(?)", ["/notes/**/*.md"])
        ro = db.get_read_only_db()
"""

from __future__ import annotations

import shutil
import tempfile
import threading
from pathlib import Path
from typing import Any, Iterable, Sequence

import duckdb

from ..exceptions import DatabaseInitError, EmptyNotebookError, QueryExecutionError
from ..logging_config import get_logger

logger = get_logger(__name__)

# Extensions loaded into both connections.
DEFAULT_EXTENSIONS: tuple[str, ...] = ("markdown",)

# Extensions that live in the community repository rather than core.
COMMUNITY_EXTENSIONS = frozenset({"markdown"})


def _install_statement(extension: str) -> str:
    if extension in COMMUNITY_EXTENSIONS:
        return f"INSTALL {extension} FROM community"
    return f"INSTALL {extension}"


def is_no_files_error(error: BaseException) -> bool:
    """True when ``error`` is the engine's "glob matched no files" failure."""
    return "no files found" in str(error).lower()


def rows_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Drain ``cursor`` into a list of column -> value dicts.

    Column order follows the engine's result description.
    """
    if cursor.description is None:
        return []
    columns = [desc[0] for desc in cursor.description]
    return [dict(zip(columns, row)) for row in cursor.fetchall()]


class DbService:
    """Owns the main and read-only DuckDB connections.

    Thread-safe: each handle is guarded by its own lock, so concurrent first
    callers all receive the same fully initialized connection. Statements on
    the main connection are serialized; read-only queries run on per-call
    cursors and may overlap.

    Parameters
    ----------
    extensions:
        Extensions to install and load into both connections. Pass an empty
        tuple for a plain engine (used by tests that have no network access).
    """

    def __init__(self, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> None:
        self.extensions: tuple[str, ...] = tuple(extensions)

        self._db: duckdb.DuckDBPyConnection | None = None
        self._db_lock = threading.Lock()
        self._db_error: DatabaseInitError | None = None
        self._query_lock = threading.Lock()

        self._read_only: duckdb.DuckDBPyConnection | None = None
        self._read_only_lock = threading.Lock()
        self._read_only_error: DatabaseInitError | None = None
        self._read_only_dir: Path | None = None

    # ── handles ───────────────────────────────────────────────────

    def get_db(self) -> duckdb.DuckDBPyConnection:
        """Return the main connection, initializing it on first use.

        Raises
        ------
        DatabaseInitError
            If initialization failed, now or on an earlier call.
        """
        db = self._db
        if db is not None:
            return db

        with self._db_lock:
            if self._db is None:
                if self._db_error is not None:
                    raise self._db_error
                try:
                    self._db = self._open_main()
                except DatabaseInitError as e:
                    self._db_error = e
                    raise
            return self._db

    def get_read_only_db(self) -> duckdb.DuckDBPyConnection:
        """Return the read-only connection, initializing it on first use.

        Never substituted for the main connection, and vice versa.

        Raises
        ------
        DatabaseInitError
            If initialization failed, now or on an earlier call.
        """
        db = self._read_only
        if db is not None:
            return db

        with self._read_only_lock:
            if self._read_only is None:
                if self._read_only_error is not None:
                    raise self._read_only_error
                try:
                    self._read_only = self._open_read_only()
                except DatabaseInitError as e:
                    self._read_only_error = e
                    raise
            return self._read_only

    def _open_main(self) -> duckdb.DuckDBPyConnection:
        logger.debug("Initializing main database")
        try:
            con = duckdb.connect(database=":memory:")
        except duckdb.Error as e:
            raise DatabaseInitError("main", str(e)) from e

        try:
            for extension in self.extensions:
                logger.debug("Installing %s extension", extension)
                con.execute(_install_statement(extension))
                logger.debug("Loading %s extension", extension)
                con.execute(f"LOAD {extension}")
        except duckdb.Error as e:
            con.close()
            raise DatabaseInitError("main", f"failed to load extensions: {e}") from e

        logger.debug("Main database initialized")
        return con

    def _open_read_only(self) -> duckdb.DuckDBPyConnection:
        logger.debug("Initializing read-only database")
        tmp_dir = Path(tempfile.mkdtemp(prefix="opennotes-ro-"))
        db_path = tmp_dir / "readonly.duckdb"

        try:
            # Create the database file and install extensions, then reopen
            # it read-only so the engine refuses any mutation.
            bootstrap = duckdb.connect(database=str(db_path))
            try:
                for extension in self.extensions:
                    logger.debug("Installing %s extension on read-only database", extension)
                    bootstrap.execute(_install_statement(extension))
            finally:
                bootstrap.close()

            con = duckdb.connect(database=str(db_path), read_only=True)
            try:
                for extension in self.extensions:
                    logger.debug("Loading %s extension on read-only database", extension)
                    con.execute(f"LOAD {extension}")
            except duckdb.Error:
                con.close()
                raise
        except duckdb.Error as e:
            shutil.rmtree(tmp_dir, ignore_errors=True)
            raise DatabaseInitError("read-only", str(e)) from e

        self._read_only_dir = tmp_dir
        logger.debug("Read-only database initialized at %s", db_path)
        return con

    # ── queries ───────────────────────────────────────────────────

    def query(self, sql: str, params: Sequence[Any] | dict | None = None) -> list[dict[str, Any]]:
        """Execute SQL on the main connection and return rows as dicts.

        Parameters
        ----------
        sql:
            SQL statement. Use ``?`` for positional params or ``$name`` for
            named params.
        params:
            Positional (list) or named (dict) parameters.

        Raises
        ------
        QueryExecutionError
            If the engine rejects the statement.
        """
        db = self.get_db()
        with self._query_lock:
            cursor = db.cursor()
            try:
                if params:
                    cursor.execute(sql, params)
                else:
                    cursor.execute(sql)
                return rows_to_dicts(cursor)
            except duckdb.Error as e:
                if is_no_files_error(e):
                    raise EmptyNotebookError(query=sql) from e
                raise QueryExecutionError(str(e), query=sql) from e
            finally:
                cursor.close()

    # ── lifecycle ─────────────────────────────────────────────────

    @property
    def initialized(self) -> dict[str, bool]:
        """Which handles are currently open."""
        return {"main": self._db is not None, "read_only": self._read_only is not None}

    def close(self) -> None:
        """Close both connections. Uninitialized handles are skipped."""
        errors: list[str] = []

        with self._db_lock:
            if self._db is not None:
                logger.debug("Closing main database")
                try:
                    self._db.close()
                except duckdb.Error as e:
                    errors.append(str(e))
                self._db = None

        with self._read_only_lock:
            if self._read_only is not None:
                logger.debug("Closing read-only database")
                try:
                    self._read_only.close()
                except duckdb.Error as e:
                    errors.append(str(e))
                self._read_only = None
            if self._read_only_dir is not None:
                shutil.rmtree(self._read_only_dir, ignore_errors=True)
                self._read_only_dir = None

        if errors:
            logger.warning("Failed to close database(s): %s", "; ".join(errors))

    def __enter__(self) -> DbService:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
