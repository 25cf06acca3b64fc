"""
Shared helpers for CLI commands: settings resolution and error output.
"""

import json
from dataclasses import replace
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from xrelay.config import Settings

console = Console()


def resolve_settings(data_dir: Optional[str] = None) -> Settings:
    """Environment settings, with the --data-dir option taking precedence."""
    settings = Settings.from_env()
    if data_dir:
        settings = replace(settings, data_dir=Path(data_dir))
    return settings


def fail(message: str, json_output: bool = False, **fields) -> None:
    """Print an error and exit with status 1."""
    if json_output:
        print(json.dumps({"error": message, **fields}))
    else:
        console.print(f"[red]Error: {message}[/red]")
    raise typer.Exit(1)


DATA_DIR_OPTION = typer.Option(
    None,
    "--data-dir",
    "-d",
    help="State directory (default: $XRELAY_DATA_DIR or ~/.xrelay)",
)
