"""Tests for query/database.py - connection lifecycle."""

import threading

import duckdb
import pytest

from opennotes.exceptions import DatabaseInitError, EmptyNotebookError, QueryExecutionError
from opennotes.query.database import (
    DbService,
    _install_statement,
    is_no_files_error,
    rows_to_dicts,
)


class TestLazyInit:
    def test_nothing_open_initially(self, db):
        assert db.initialized == {"main": False, "read_only": False}

    def test_get_db_returns_same_handle(self, db):
        first = db.get_db()
        assert db.get_db() is first
        assert db.initialized["main"] is True
        assert db.initialized["read_only"] is False

    def test_read_only_is_separate_handle(self, db):
        ro = db.get_read_only_db()
        assert db.get_read_only_db() is ro
        assert ro is not db.get_db()

    def test_concurrent_first_callers_share_handle(self, db):
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(db.get_db())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 8
        assert all(handle is results[0] for handle in results)

    def test_init_failure_is_cached(self, monkeypatch):
        calls = []

        def failing_open(self):
            calls.append(1)
            raise DatabaseInitError("main", "boom")

        monkeypatch.setattr(DbService, "_open_main", failing_open)
        db = DbService(extensions=())

        with pytest.raises(DatabaseInitError) as first:
            db.get_db()
        with pytest.raises(DatabaseInitError) as second:
            db.get_db()

        assert len(calls) == 1
        assert second.value is first.value
        assert "boom" in str(second.value)

    def test_read_only_failure_does_not_affect_main(self, monkeypatch):
        def failing_open(self):
            raise DatabaseInitError("read-only", "nope")

        monkeypatch.setattr(DbService, "_open_read_only", failing_open)
        db = DbService(extensions=())
        try:
            with pytest.raises(DatabaseInitError):
                db.get_read_only_db()
            assert db.query("SELECT 1 AS x") == [{"x": 1}]
        finally:
            db.close()


class TestReadOnly:
    def test_rejects_create_table(self, db):
        ro = db.get_read_only_db()
        with pytest.raises(duckdb.Error):
            ro.execute("CREATE TABLE t (x INTEGER)")

    def test_allows_select(self, db):
        ro = db.get_read_only_db()
        assert ro.execute("SELECT 2 + 2").fetchone() == (4,)


class TestQuery:
    def test_rows_as_dicts(self, db):
        assert db.query("SELECT 42 AS answer, 'x' AS label") == [{"answer": 42, "label": "x"}]

    def test_positional_params(self, db):
        assert db.query("SELECT ? AS v", [5]) == [{"v": 5}]

    def test_named_params(self, db):
        assert db.query("SELECT $name AS v", {"name": "n"}) == [{"v": "n"}]

    def test_engine_error(self, db):
        with pytest.raises(QueryExecutionError) as exc_info:
            db.query("SELECT * FROM no_such_table")
        assert exc_info.value.query == "SELECT * FROM no_such_table"

    def test_no_files_error(self, db, tmp_path):
        with pytest.raises(EmptyNotebookError):
            db.query("SELECT * FROM read_csv(?)", [str(tmp_path / "*.csv")])

    def test_main_connection_is_writable(self, db):
        db.query("CREATE TABLE t (x INTEGER)")
        db.query("INSERT INTO t VALUES (1), (2)")
        assert db.query("SELECT count(*) AS n FROM t") == [{"n": 2}]


class TestClose:
    def test_close_uninitialized(self):
        DbService(extensions=()).close()

    def test_close_resets_handles(self, db):
        db.get_db()
        db.get_read_only_db()
        db.close()
        assert db.initialized == {"main": False, "read_only": False}

    def test_context_manager(self):
        with DbService(extensions=()) as db:
            db.get_db()
        assert db.initialized["main"] is False


class TestHelpers:
    def test_install_statement_community(self):
        assert _install_statement("markdown") == "INSTALL markdown FROM community"

    def test_install_statement_core(self):
        assert _install_statement("json") == "INSTALL json"

    def test_is_no_files_error(self):
        assert is_no_files_error(Exception('IO Error: No files found that match the pattern "x"'))
        assert not is_no_files_error(Exception("Catalog Error"))

    def test_rows_to_dicts_without_result(self):
        class NoResult:
            description = None

        assert rows_to_dicts(NoResult()) == []


@pytest.mark.slow
class TestMarkdownExtension:
    """Needs network access to install the markdown extension."""

    def test_extension_loaded_on_both_handles(self, tmp_path):
        (tmp_path / "a.md").write_text("# A\n\nhello\n")
        with DbService() as db:
            rows = db.query(
                "SELECT * FROM read_markdown(?, include_filepath:=true)", [str(tmp_path / "*.md")]
            )
            assert len(rows) == 1

            ro = db.get_read_only_db()
            count = ro.execute(
                "SELECT count(*) FROM read_markdown(?)", [str(tmp_path / "*.md")]
            ).fetchone()
            assert count == (1,)

    def test_unknown_extension_fails_init(self):
        db = DbService(extensions=("opennotes_no_such_extension",))
        with pytest.raises(DatabaseInitError):
            db.get_db()
        with pytest.raises(DatabaseInitError):
            db.get_db()
