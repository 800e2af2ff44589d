"""Init command."""

import typer

from ..exceptions import OpenNotesError
from . import app
from ._common import console, get_state, report_error


@app.command()
def init(ctx: typer.Context):
    """
    Create the global configuration file.

    Written to ~/.config/opennotes/config.json, or the path in
    OPENNOTES_CONFIG.
    """
    config = get_state(ctx).services.config
    try:
        config.write()
    except OpenNotesError as e:
        report_error(e)
    console.print(f"OpenNotes initialized at [bold]{config.config_file}[/bold]")
