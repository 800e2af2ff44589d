"""Notebook commands: show, list, create, register, add-context."""

from pathlib import Path
from typing import Optional

import typer

from ..exceptions import OpenNotesError
from . import notebook_app
from ._common import console, get_state, print_no_notebook, report_error, require_notebook
from ._display import display_notebook_info, display_notebook_list


@notebook_app.callback(invoke_without_command=True)
def show(ctx: typer.Context):
    """
    Show the current notebook (when run without a subcommand).

    [bold cyan]Examples:[/bold cyan]

      opennotes notebook

      opennotes notebook list

      opennotes notebook create --name "Work Notes"
    """
    if ctx.invoked_subcommand is not None:
        return

    state = get_state(ctx)
    try:
        if state.notebook_path:
            nb = state.services.notebooks.open(state.notebook_path)
        else:
            nb = state.services.notebooks.infer()
    except OpenNotesError as e:
        report_error(e)

    if nb is None:
        print_no_notebook()
        return

    display_notebook_info(nb)


@notebook_app.command("list")
def list_notebooks(ctx: typer.Context):
    """List registered notebooks and notebooks in ancestor directories."""
    notebooks = get_state(ctx).services.notebooks.list()
    if not notebooks:
        print_no_notebook()
        return
    display_notebook_list(notebooks)


@notebook_app.command()
def create(
    ctx: typer.Context,
    path: Optional[Path] = typer.Argument(
        None,
        help="Directory for the notebook (default: current directory)",
        file_okay=False,
        dir_okay=True,
    ),
    name: str = typer.Option(
        ...,
        "--name",
        "-n",
        help="Notebook name",
    ),
    register: bool = typer.Option(
        False,
        "--register",
        "-r",
        help="Register this notebook globally",
    ),
):
    """
    Create a new notebook.

    Writes a .opennotes.json config and a .notes/ directory.

    [bold cyan]Examples:[/bold cyan]

      opennotes notebook create --name "My Notes"

      opennotes notebook create ~/work/notes --name "Work" --register
    """
    services = get_state(ctx).services
    try:
        nb = services.notebooks.create(name, str(path) if path else "", register=register)
    except OpenNotesError as e:
        report_error(e)

    console.print(f"[green]Created notebook '{nb.config.name}'[/green]")
    console.print(f"  Config: {nb.config.path}")
    console.print(f"  Notes:  {nb.config.root}")
    if register:
        console.print("  Registered globally")


@notebook_app.command()
def register(
    ctx: typer.Context,
    path: Optional[Path] = typer.Argument(
        None,
        help="Notebook directory (default: current directory)",
    ),
):
    """Register an existing notebook in the global configuration."""
    services = get_state(ctx).services
    target = str(path.resolve()) if path else str(Path.cwd())

    try:
        nb = services.notebooks.open(target)
        services.notebooks.register(nb)
    except OpenNotesError as e:
        report_error(e)

    console.print(f"[green]Registered notebook '{nb.config.name}' at {target}[/green]")


@notebook_app.command("add-context")
def add_context(
    ctx: typer.Context,
    path: Optional[Path] = typer.Argument(
        None,
        help="Context directory (default: current directory)",
    ),
):
    """
    Add a directory as a context of the current notebook.

    Working in a context directory (or below it) selects the notebook
    automatically.
    """
    nb = require_notebook(ctx)
    context = str(path.resolve()) if path else str(Path.cwd())

    try:
        added = get_state(ctx).services.notebooks.add_context(nb, context)
    except OpenNotesError as e:
        report_error(e)

    if added:
        console.print(f"[green]Added context '{context}' to notebook '{nb.config.name}'[/green]")
    else:
        console.print(f"Context '{context}' is already set on notebook '{nb.config.name}'")
