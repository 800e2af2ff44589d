"""Shared CLI helpers."""

from dataclasses import dataclass
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape

from ..exceptions import (
    CancelledError,
    InvalidNotebookConfigError,
    NotebookNotFoundError,
    OpenNotesError,
    QueryValidationError,
)
from ..notebook import Notebook
from ..services import Services

console = Console()

CREATE_HINT = 'opennotes notebook create --name "My Notebook"'


@dataclass
class CliState:
    """Per-invocation state built by the root callback."""

    services: Services
    notebook_path: Optional[str] = None


def get_state(ctx: typer.Context) -> CliState:
    state = ctx.obj
    if not isinstance(state, CliState):
        raise RuntimeError("CLI state is not initialized")
    return state


def fail(message: str) -> NoReturn:
    console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)


def report_error(error: OpenNotesError) -> NoReturn:
    """Print ``error`` with a hint matching its kind, then exit 1."""
    if isinstance(error, NotebookNotFoundError):
        console.print(f"[yellow]{escape(str(error))}[/yellow]")
        console.print(f"Create one with:\n  [bold]{escape(CREATE_HINT)}[/bold]")
    elif isinstance(error, InvalidNotebookConfigError):
        console.print(f"[red]Notebook configuration is invalid:[/red] {escape(str(error))}")
        console.print("Fix or remove the config file and try again.")
    elif isinstance(error, QueryValidationError):
        console.print(f"[red]Query rejected:[/red] {escape(error.reason)}")
    elif isinstance(error, CancelledError):
        console.print(f"[yellow]Stopped:[/yellow] {escape(str(error))}")
    else:
        console.print(f"[red]Error:[/red] {escape(str(error))}")
    raise typer.Exit(1)


def print_no_notebook() -> None:
    console.print("[yellow]No notebook found.[/yellow]")
    console.print()
    console.print("Create one with:")
    console.print(f"  [bold]{escape(CREATE_HINT)}[/bold]")


def require_notebook(ctx: typer.Context) -> Notebook:
    """The notebook named by --notebook, else the inferred one; exits if none."""
    state = get_state(ctx)
    try:
        if state.notebook_path:
            return state.services.notebooks.open(state.notebook_path)
        nb = state.services.notebooks.infer()
    except OpenNotesError as e:
        report_error(e)

    if nb is None:
        print_no_notebook()
        raise typer.Exit(1)
    return nb
