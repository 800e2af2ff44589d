"""Rich rendering for notebooks, notes and query results."""

from typing import Any, Sequence

from rich.markup import escape
from rich.table import Table

from ..notebook import Notebook
from ..notes import Note
from ._common import console


def display_notebook_info(nb: Notebook) -> None:
    config = nb.config
    console.print(f"[bold cyan]{escape(config.name)}[/bold cyan]")

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="dim")
    table.add_column(style="bold")
    table.add_row("Config", escape(config.path))
    table.add_row("Root", escape(config.root))
    console.print(table)

    if config.contexts:
        console.print()
        console.print("[bold]Contexts[/bold]")
        for context in config.contexts:
            console.print(f"  - {escape(context)}")

    if config.groups:
        console.print()
        console.print("[bold]Groups[/bold]")
        for group in config.groups:
            globs = ", ".join(group.globs)
            console.print(f"  - {escape(group.name)} ({escape(globs)})")

    if config.templates:
        console.print()
        console.print("[bold]Templates[/bold]")
        for name in sorted(config.templates):
            console.print(f"  - {escape(name)}")


def display_notebook_list(notebooks: Sequence[Notebook]) -> None:
    table = Table(
        title=f"Notebooks ({len(notebooks)})",
        show_lines=False,
        pad_edge=True,
    )
    table.add_column("Name", style="bold")
    table.add_column("Config", style="cyan")
    table.add_column("Root")
    table.add_column("Contexts", style="dim")

    for nb in notebooks:
        table.add_row(
            escape(nb.config.name),
            escape(nb.config.path),
            escape(nb.config.root),
            escape("\n".join(nb.config.contexts)),
        )
    console.print(table)


def display_note_list(notes: Sequence[Note]) -> None:
    if not notes:
        console.print("No notes found.")
        return

    console.print(f"[bold]Notes ({len(notes)})[/bold]")
    console.print()
    for note in notes:
        console.print(f"- [link=file://{note.filepath}]{escape(note.relative)}[/link]")


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def display_sql_results(rows: Sequence[dict[str, Any]]) -> None:
    """Render query rows as a table; columns follow the first row's order."""
    if not rows:
        console.print("No results")
        return

    columns = list(rows[0].keys())
    table = Table(show_lines=False, pad_edge=True)
    for column in columns:
        table.add_column(escape(column))
    for row in rows:
        table.add_row(*(escape(_format_value(row.get(column))) for column in columns))

    console.print(table)
    console.print(f"[dim]{len(rows)} row{'s' if len(rows) != 1 else ''}[/dim]")
