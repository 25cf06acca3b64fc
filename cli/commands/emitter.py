"""
Emitter commands: add, remove, list
"""

import json
import os
from typing import List, Optional

import typer
from rich.table import Table

from cli.context import DATA_DIR_OPTION, console, fail, resolve_settings
from xrelay.core.chains import chain_name
from xrelay.core.errors import RegistryError, StoreError
from xrelay.registry import AccessPolicy, FileEmitterRegistry

app = typer.Typer()

CALLER_OPTION = typer.Option(
    None,
    "--as",
    help="Calling identity (default: $XRELAY_ADMIN)",
)


def _open_registry(data_dir: Optional[str]) -> FileEmitterRegistry:
    settings = resolve_settings(data_dir)
    return FileEmitterRegistry(str(settings.emitters_path), AccessPolicy(settings.admin))


def _caller(caller: Optional[str]) -> str:
    return caller or os.getenv("XRELAY_ADMIN", "")


@app.command()
def add(
    chain_ids: List[int] = typer.Argument(..., help="Transport chain id(s)"),
    emitter: List[str] = typer.Option(
        ..., "--emitter", "-e", help="Emitter (32-byte hex), one per chain id"
    ),
    caller: Optional[str] = CALLER_OPTION,
    data_dir: Optional[str] = DATA_DIR_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Trust one or more emitters. Several pairs are applied all-or-nothing.

    Examples:
        xrelay emitter add 10004 -e 0x00..01
        xrelay emitter add 10004 6 -e 0x00..01 -e 0x00..02
    """
    try:
        registry = _open_registry(data_dir)
        if len(chain_ids) == 1 and len(emitter) == 1:
            registry.add(_caller(caller), chain_ids[0], emitter[0])
        else:
            registry.add_batch(_caller(caller), chain_ids, emitter)
    except (RegistryError, StoreError, ValueError, TypeError) as e:
        fail(str(e), json_output, type=type(e).__name__)

    if json_output:
        print(json.dumps({"success": True, "added": len(chain_ids)}))
    else:
        console.print(f"[green]✓ Trusted {len(chain_ids)} emitter(s)[/green]")


@app.command()
def remove(
    chain_id: int = typer.Argument(..., help="Transport chain id"),
    emitter: str = typer.Argument(..., help="Emitter (32-byte hex)"),
    caller: Optional[str] = CALLER_OPTION,
    data_dir: Optional[str] = DATA_DIR_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Stop trusting an emitter."""
    try:
        registry = _open_registry(data_dir)
        registry.remove(_caller(caller), chain_id, emitter)
    except (RegistryError, StoreError, ValueError, TypeError) as e:
        fail(str(e), json_output, type=type(e).__name__)

    if json_output:
        print(json.dumps({"success": True}))
    else:
        console.print("[green]✓ Emitter removed[/green]")


@app.command(name="list")
def list_command(
    chain_id: Optional[int] = typer.Option(None, "--chain", "-c", help="Only this chain"),
    data_dir: Optional[str] = DATA_DIR_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List trusted emitters."""
    try:
        entries = _open_registry(data_dir).list_emitters(chain_id)
    except StoreError as e:
        fail(str(e), json_output)

    if json_output:
        print(json.dumps([{"chain_id": c, "emitter": e} for c, e in entries], indent=2))
        return

    if not entries:
        console.print("[yellow]No trusted emitters[/yellow]")
        return

    table = Table(title="Trusted Emitters")
    table.add_column("Chain", style="cyan")
    table.add_column("Name")
    table.add_column("Emitter", style="green")
    for c, e in entries:
        table.add_row(str(c), chain_name(c), e)
    console.print(table)
