#!/usr/bin/env python3
"""
xrelay CLI - Cross-chain checkpoint reception

Main entrypoint for the xrelay command-line tool.
"""

import typer
from rich.table import Table

from cli.commands import checkpoint, codec, emitter, envelope, receive
from cli.context import console
from xrelay.logging_config import setup_logging

# Initialize Typer app
app = typer.Typer(
    name="xrelay",
    help="Cross-chain checkpoint reception CLI",
    add_completion=False,
)

# Add command groups
app.add_typer(emitter.app, name="emitter", help="Trusted emitter administration")
app.add_typer(checkpoint.app, name="checkpoint", help="Stored checkpoint queries")
app.add_typer(codec.app, name="codec", help="Checkpoint payload encoding")
app.add_typer(envelope.app, name="envelope", help="Guardian keys and signed envelopes")

# Add standalone commands
app.command(name="receive")(receive.receive_command)


@app.callback()
def configure(
    log_level: str = typer.Option(None, "--log-level", help="Override XRELAY_LOG_LEVEL"),
):
    setup_logging(level=log_level)


@app.command()
def version():
    """Show version information."""
    from cli import __version__
    from xrelay.codec import VERSION

    table = Table(show_header=False, box=None)
    table.add_row("[bold]xrelay CLI[/bold]", f"v{__version__}")
    table.add_row("Message version", str(VERSION))

    console.print(table)


def main():
    """Main entrypoint."""
    app()


if __name__ == "__main__":
    main()
