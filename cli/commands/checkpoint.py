"""
Checkpoint commands: get, by-cid, exists, stats, verify-log
"""

import json
from typing import List, Optional

import typer
from rich.table import Table

from cli.context import DATA_DIR_OPTION, console, fail, resolve_settings
from xrelay.core.chains import chain_name
from xrelay.core.clock import SystemClock
from xrelay.core.errors import CheckpointNotFoundError, IntegrityError, StoreError
from xrelay.codec import tag_to_text
from xrelay.replay import FileReplayGuard
from xrelay.store import FileCheckpointStore, StoredCheckpoint

app = typer.Typer()


def _open_store(data_dir: Optional[str]) -> FileCheckpointStore:
    try:
        return FileCheckpointStore(str(resolve_settings(data_dir).checkpoints_path))
    except (StoreError, IntegrityError) as e:
        fail(str(e))


def _show(checkpoint: StoredCheckpoint, json_output: bool) -> None:
    if json_output:
        print(json.dumps(checkpoint.to_dict(), indent=2))
        return

    now = SystemClock().now()
    table = Table(show_header=False, box=None)
    table.add_row("[bold]Message ID[/bold]", checkpoint.message_id)
    table.add_row("CID", checkpoint.cid)
    table.add_row("Content hash", checkpoint.content_hash)
    table.add_row("Tag", f"{checkpoint.tag} ({tag_to_text(checkpoint.tag)!r})")
    table.add_row("Creator", checkpoint.creator)
    table.add_row(
        "Source chain", f"{checkpoint.source_chain_id} ({chain_name(checkpoint.source_chain_id)})"
    )
    table.add_row("Emitter", checkpoint.emitter)
    table.add_row("Created at", str(checkpoint.created_at))
    table.add_row("Received at", str(checkpoint.received_at))
    status = "[red]expired[/red]" if checkpoint.is_expired(now) else "[green]valid[/green]"
    table.add_row("Expires at", f"{checkpoint.expires_at} {status}")
    if checkpoint.revoked:
        table.add_row("Revoked", "[yellow]yes[/yellow]")
    console.print(table)


@app.command()
def get(
    message_id: str = typer.Argument(..., help="Transport message id (0x hex)"),
    data_dir: Optional[str] = DATA_DIR_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show a stored checkpoint by transport message id."""
    try:
        checkpoint = _open_store(data_dir).get(message_id)
    except CheckpointNotFoundError as e:
        fail(str(e), json_output)
    _show(checkpoint, json_output)


@app.command(name="by-cid")
def by_cid(
    cid: str = typer.Argument(..., help="Content identifier"),
    chain_ids: List[int] = typer.Option(
        ..., "--chain", "-c", help="Source chain id; repeat to search several in order"
    ),
    data_dir: Optional[str] = DATA_DIR_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Show the checkpoint for a cid on a chain, or the first match across chains.

    Examples:
        xrelay checkpoint by-cid bafy... -c 10004
        xrelay checkpoint by-cid bafy... -c 10004 -c 6 -c 10002
    """
    store = _open_store(data_dir)
    try:
        if len(chain_ids) == 1:
            checkpoint = store.get_by_content_and_chain(cid, chain_ids[0])
        else:
            checkpoint = store.get_first_across_chains(cid, chain_ids)
    except CheckpointNotFoundError as e:
        fail(str(e), json_output)
    _show(checkpoint, json_output)


@app.command()
def exists(
    cid: str = typer.Argument(..., help="Content identifier"),
    chain_ids: List[int] = typer.Option(..., "--chain", "-c", help="Source chain id (repeatable)"),
    data_dir: Optional[str] = DATA_DIR_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Report, per chain, whether a cid has been checkpointed."""
    flags = _open_store(data_dir).exists_on_any_of(cid, chain_ids)

    if json_output:
        print(json.dumps({str(c): f for c, f in zip(chain_ids, flags)}))
        return

    table = Table(title=f"CID {cid}")
    table.add_column("Chain", style="cyan")
    table.add_column("Name")
    table.add_column("Exists")
    for c, f in zip(chain_ids, flags):
        table.add_row(str(c), chain_name(c), "[green]yes[/green]" if f else "[dim]no[/dim]")
    console.print(table)


@app.command()
def stats(
    data_dir: Optional[str] = DATA_DIR_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show total and per-chain checkpoint counts."""
    store = _open_store(data_dir)
    counts = store.chain_counts()

    if json_output:
        print(
            json.dumps(
                {"total": store.total_count(), "by_chain": {str(c): n for c, n in counts.items()}},
                indent=2,
            )
        )
        return

    table = Table(title=f"Checkpoints: {store.total_count()}")
    table.add_column("Chain", style="cyan")
    table.add_column("Name")
    table.add_column("Count", justify="right")
    for c, n in sorted(counts.items()):
        table.add_row(str(c), chain_name(c), str(n))
    console.print(table)


@app.command(name="verify-log")
def verify_log(
    data_dir: Optional[str] = DATA_DIR_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Verify the hash chains of the checkpoint and consumed-id journals.

    Exit code 0 if both chains are intact, 1 otherwise.
    """
    settings = resolve_settings(data_dir)
    results = {}
    try:
        results["checkpoints"] = FileCheckpointStore(str(settings.checkpoints_path)).verify_chain()
        results["consumed"] = FileReplayGuard(str(settings.consumed_path)).verify_chain()
    except (IntegrityError, StoreError) as e:
        fail(str(e), json_output, valid=False)

    if json_output:
        print(json.dumps({"valid": True, **results}))
    else:
        console.print("[green]✓ Hash chains intact[/green]")
        console.print(f"  Checkpoint records: {results['checkpoints']}")
        console.print(f"  Consumed ids: {results['consumed']}")
