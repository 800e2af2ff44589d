"""Note commands: list, search, add, remove."""

import os
from datetime import datetime
from typing import Optional

import typer

from ..exceptions import EmptyNotebookError, OpenNotesError
from ..strings import generate_note_content, slugify
from ..validation import resolve_note_path
from . import notes_app
from ._common import console, fail, report_error, require_notebook
from ._display import display_note_list, display_sql_results


@notes_app.command("list")
def list_notes(ctx: typer.Context):
    """List all notes in the current notebook."""
    nb = require_notebook(ctx)
    try:
        notes = nb.notes.list_notes()
    except OpenNotesError as e:
        report_error(e)
    display_note_list(notes)


@notes_app.command()
def search(
    ctx: typer.Context,
    query: Optional[str] = typer.Argument(
        None,
        help="Text to find in note content or file names",
    ),
    sql: Optional[str] = typer.Option(
        None,
        "--sql",
        help="Run a read-only SQL query against the notes instead",
    ),
):
    """
    Search notes by content or filename.

    [bold cyan]Examples:[/bold cyan]

      opennotes notes search "meeting"

      opennotes notes search --sql "SELECT * FROM read_markdown('**/*.md') LIMIT 10"
    """
    if sql:
        nb = require_notebook(ctx)
        try:
            rows = nb.notes.execute_sql_safe(sql)
        except EmptyNotebookError:
            console.print("No notes found.")
            return
        except OpenNotesError as e:
            report_error(e)
        display_sql_results(rows)
        return

    if not query:
        fail("query argument required (or use --sql)")

    nb = require_notebook(ctx)
    try:
        notes = nb.notes.search_notes(query)
    except EmptyNotebookError:
        notes = []
    except OpenNotesError as e:
        report_error(e)

    if not notes:
        console.print(f"No notes found matching '{query}'")
        return

    console.print(f"Found {len(notes)} note(s) matching '{query}':")
    console.print()
    display_note_list(notes)


@notes_app.command()
def add(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(
        None,
        help="Note file name (default: from --title, else a timestamp)",
    ),
    template: str = typer.Option(
        "",
        "--template",
        "-t",
        help="Template to use",
    ),
    title: str = typer.Option(
        "",
        "--title",
        help="Note title",
    ),
):
    """Create a new note in the current notebook."""
    nb = require_notebook(ctx)

    if name:
        filename = name
    elif title:
        filename = slugify(title) + ".md"
    else:
        filename = datetime.now().strftime("%Y-%m-%d-%H%M%S") + ".md"
    if not filename.endswith(".md"):
        filename += ".md"

    try:
        note_path = resolve_note_path(nb.config.root, filename)
    except OpenNotesError as e:
        report_error(e)

    if os.path.exists(note_path):
        fail(f"note already exists: {note_path}")

    content = generate_note_content(title, template, nb.config.templates)
    try:
        os.makedirs(os.path.dirname(note_path), exist_ok=True)
        with open(note_path, "x", encoding="utf-8") as f:
            f.write(content)
    except OSError as e:
        fail(f"failed to create note: {e}")

    console.print(f"[green]Created note:[/green] {note_path}")


@notes_app.command()
def remove(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Note to remove (.md optional)"),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Skip confirmation prompt",
    ),
):
    """Remove a note from the current notebook."""
    nb = require_notebook(ctx)

    filename = name if name.endswith(".md") else name + ".md"
    try:
        note_path = resolve_note_path(nb.config.root, filename)
    except OpenNotesError as e:
        report_error(e)

    if not os.path.isfile(note_path):
        fail(f"note not found: {note_path}")

    if not force and not typer.confirm(f"Remove note '{filename}'?", default=False):
        console.print("Cancelled.")
        return

    try:
        os.remove(note_path)
    except OSError as e:
        fail(f"failed to remove note: {e}")

    console.print(f"[green]Removed note:[/green] {note_path}")
