"""CLI entry point: registers all subcommands."""

import typer

app = typer.Typer(
    name="opennotes",
    help="OpenNotes - manage markdown notebooks and query them with DuckDB SQL",
    add_completion=False,
    rich_markup_mode="rich",
)

notebook_app = typer.Typer(
    help="Manage notebooks - create, list, register, and configure notebooks.",
    rich_markup_mode="rich",
)
notes_app = typer.Typer(
    help="Manage notes in the current notebook.",
    rich_markup_mode="rich",
)

app.add_typer(notebook_app, name="notebook")
app.add_typer(notebook_app, name="nb", hidden=True)
app.add_typer(notes_app, name="notes")


# Import subcommands to register them
from .root import main as _main_callback  # noqa: F401, E402
from .init import init as _init  # noqa: F401, E402
from .notebook import show as _notebook_show  # noqa: F401, E402
from .notes import list_notes as _notes_list  # noqa: F401, E402


def main() -> None:
    app()
