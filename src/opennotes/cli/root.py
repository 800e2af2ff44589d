"""Root callback: logging, global options and service wiring."""

from typing import Optional

import typer

from .. import __version__
from ..exceptions import OpenNotesError
from ..logging_config import setup_logging
from ..services import Services
from . import app
from ._common import CliState, console, report_error


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"opennotes {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    notebook: Optional[str] = typer.Option(
        None,
        "--notebook",
        help="Path to notebook (skips discovery)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only log errors",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """
    OpenNotes manages markdown notes organized in notebooks.

    Notes are plain markdown files; notebooks are directories with a
    [bold].opennotes.json[/bold] config. Content can be queried with DuckDB SQL.

    [bold cyan]Environment:[/bold cyan]

      OPENNOTES_CONFIG          Global config file (default: ~/.config/opennotes/config.json)

      OPENNOTES_NOTEBOOK_PATH   Declared active notebook

      DEBUG, LOG_LEVEL          Log verbosity
    """
    setup_logging(verbose=verbose, quiet=quiet)

    try:
        services = Services.create()
    except OpenNotesError as e:
        report_error(e)

    ctx.obj = CliState(services=services, notebook_path=notebook)
    ctx.call_on_close(services.close)
