"""Tests for the opennotes CLI commands."""

import json

import pytest
from typer.testing import CliRunner

from opennotes import __version__
from opennotes.cli import app
from opennotes.config import NOTEBOOK_CONFIG_FILE
from opennotes.services import Services

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_extensions(monkeypatch):
    """Build CLI services on a plain engine so no extension is downloaded."""
    create = Services.create.__func__

    def create_plain(cls, config_file=None, extensions=()):
        return create(cls, config_file, extensions=())

    monkeypatch.setattr(Services, "create", classmethod(create_plain))


@pytest.fixture
def notebook_dir(workspace):
    result = runner.invoke(app, ["notebook", "create", str(workspace), "--name", "Work"])
    assert result.exit_code == 0, result.output
    return workspace


class TestRoot:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_init_writes_global_config(self, isolated_env):
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 0, result.output
        assert json.loads(isolated_env.read_text()) == {"notebooks": []}


class TestNotebookCommands:
    def test_create(self, workspace, isolated_env):
        result = runner.invoke(
            app, ["notebook", "create", str(workspace), "--name", "Work", "--register"]
        )
        assert result.exit_code == 0, result.output
        assert "Created notebook 'Work'" in result.output
        assert (workspace / NOTEBOOK_CONFIG_FILE).is_file()
        assert json.loads(isolated_env.read_text())["notebooks"] == [str(workspace)]

    def test_create_invalid_name(self, workspace):
        result = runner.invoke(app, ["notebook", "create", str(workspace), "--name", "no/slash"])
        assert result.exit_code == 1
        assert not (workspace / NOTEBOOK_CONFIG_FILE).exists()

    def test_show_current(self, notebook_dir, monkeypatch):
        monkeypatch.chdir(notebook_dir)
        result = runner.invoke(app, ["notebook"])
        assert result.exit_code == 0, result.output
        assert "Work" in result.output

    def test_show_without_notebook(self, workspace, monkeypatch):
        monkeypatch.chdir(workspace)
        result = runner.invoke(app, ["notebook"])
        assert result.exit_code == 0
        assert "No notebook found" in result.output

    def test_show_explicit_missing(self, workspace):
        result = runner.invoke(app, ["--notebook", str(workspace), "notebook"])
        assert result.exit_code == 1
        assert "notebook create" in result.output

    def test_list(self, notebook_dir, monkeypatch):
        monkeypatch.chdir(notebook_dir)
        result = runner.invoke(app, ["notebook", "list"])
        assert result.exit_code == 0, result.output
        assert "Notebooks (1)" in result.output

    def test_register(self, notebook_dir, isolated_env):
        result = runner.invoke(app, ["notebook", "register", str(notebook_dir)])
        assert result.exit_code == 0, result.output
        assert json.loads(isolated_env.read_text())["notebooks"] == [str(notebook_dir)]

    def test_register_missing(self, workspace):
        result = runner.invoke(app, ["notebook", "register", str(workspace)])
        assert result.exit_code == 1
        assert "No notebook found" in result.output

    def test_add_context(self, notebook_dir, tmp_path):
        other = tmp_path / "elsewhere"
        other.mkdir()
        args = ["--notebook", str(notebook_dir), "notebook", "add-context", str(other)]

        result = runner.invoke(app, args)
        assert result.exit_code == 0, result.output
        data = json.loads((notebook_dir / NOTEBOOK_CONFIG_FILE).read_text())
        assert data["contexts"] == [str(notebook_dir), str(other)]

        again = runner.invoke(app, args)
        assert again.exit_code == 0
        assert "already" in again.output

    def test_nb_alias(self, notebook_dir, monkeypatch):
        monkeypatch.chdir(notebook_dir)
        assert runner.invoke(app, ["nb", "list"]).exit_code == 0

    def test_broken_config_reported(self, workspace, monkeypatch):
        (workspace / NOTEBOOK_CONFIG_FILE).write_text("{broken")
        monkeypatch.chdir(workspace)
        result = runner.invoke(app, ["notebook"])
        assert result.exit_code == 1
        assert "configuration is invalid" in result.output


class TestNotesCommands:
    def test_sql_select(self, notebook_dir):
        result = runner.invoke(
            app, ["--notebook", str(notebook_dir), "notes", "search", "--sql", "SELECT 42 AS answer"]
        )
        assert result.exit_code == 0, result.output
        assert "answer" in result.output
        assert "42" in result.output
        assert "1 row" in result.output

    def test_sql_write_rejected(self, notebook_dir):
        result = runner.invoke(
            app, ["--notebook", str(notebook_dir), "notes", "search", "--sql", "DROP TABLE notes"]
        )
        assert result.exit_code == 1
        assert "Query rejected" in result.output

    def test_sql_empty_result(self, notebook_dir):
        result = runner.invoke(
            app,
            ["--notebook", str(notebook_dir), "notes", "search", "--sql", "SELECT * FROM range(0)"],
        )
        assert result.exit_code == 0
        assert "No results" in result.output

    def test_search_requires_query(self, notebook_dir):
        result = runner.invoke(app, ["--notebook", str(notebook_dir), "notes", "search"])
        assert result.exit_code == 1
        assert "query argument required" in result.output

    def test_add_from_title(self, notebook_dir):
        result = runner.invoke(
            app, ["--notebook", str(notebook_dir), "notes", "add", "--title", "My Idea"]
        )
        assert result.exit_code == 0, result.output
        note = notebook_dir / ".notes" / "my-idea.md"
        assert note.is_file()
        assert "# My Idea" in note.read_text()

    def test_add_with_template(self, notebook_dir):
        config_path = notebook_dir / NOTEBOOK_CONFIG_FILE
        data = json.loads(config_path.read_text())
        data["templates"] = {"daily": "# {{title}}\n\n## Log\n"}
        config_path.write_text(json.dumps(data))

        result = runner.invoke(
            app,
            ["--notebook", str(notebook_dir), "notes", "add", "today", "-t", "daily", "--title", "Today"],
        )
        assert result.exit_code == 0, result.output
        assert (notebook_dir / ".notes" / "today.md").read_text() == "# Today\n\n## Log\n"

    def test_add_existing(self, notebook_dir):
        (notebook_dir / ".notes" / "dup.md").write_text("x")
        result = runner.invoke(app, ["--notebook", str(notebook_dir), "notes", "add", "dup"])
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_add_traversal_rejected(self, notebook_dir):
        result = runner.invoke(app, ["--notebook", str(notebook_dir), "notes", "add", "../escape"])
        assert result.exit_code == 1
        assert not (notebook_dir / "escape.md").exists()

    def test_remove_force(self, notebook_dir):
        note = notebook_dir / ".notes" / "gone.md"
        note.write_text("bye")
        result = runner.invoke(
            app, ["--notebook", str(notebook_dir), "notes", "remove", "gone", "--force"]
        )
        assert result.exit_code == 0, result.output
        assert not note.exists()

    def test_remove_declined(self, notebook_dir):
        note = notebook_dir / ".notes" / "kept.md"
        note.write_text("stay")
        result = runner.invoke(
            app, ["--notebook", str(notebook_dir), "notes", "remove", "kept"], input="n\n"
        )
        assert result.exit_code == 0
        assert note.exists()

    def test_remove_missing(self, notebook_dir):
        result = runner.invoke(
            app, ["--notebook", str(notebook_dir), "notes", "remove", "nothing", "-f"]
        )
        assert result.exit_code == 1
        assert "note not found" in result.output

    def test_remove_absolute_path_rejected(self, notebook_dir, tmp_path):
        victim = tmp_path / "victim.md"
        victim.write_text("keep me")
        result = runner.invoke(
            app, ["--notebook", str(notebook_dir), "notes", "remove", str(victim), "--force"]
        )
        assert result.exit_code == 1
        assert "Removed note" not in result.output
        assert victim.exists()

    def test_add_absolute_path_rejected(self, notebook_dir, tmp_path):
        target = tmp_path / "outside"
        result = runner.invoke(app, ["--notebook", str(notebook_dir), "notes", "add", str(target)])
        assert result.exit_code == 1
        assert not (tmp_path / "outside.md").exists()

    def test_add_in_subdirectory(self, notebook_dir):
        result = runner.invoke(
            app, ["--notebook", str(notebook_dir), "notes", "add", "projects/plan"]
        )
        assert result.exit_code == 0, result.output
        assert (notebook_dir / ".notes" / "projects" / "plan.md").is_file()
