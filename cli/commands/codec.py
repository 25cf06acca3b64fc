"""
Codec commands: encode, decode
"""

import json
from typing import Optional

import typer
from rich.table import Table

from cli.context import console, fail
from xrelay.codec import (
    VERSION,
    CheckpointMessage,
    checkpoint_id,
    decode,
    encode,
    encode_legacy,
    message_hash,
    tag_from_text,
    tag_to_text,
    validation_error,
)
from xrelay.core.chains import chain_name
from xrelay.core.clock import SystemClock
from xrelay.core.errors import MalformedMessageError

app = typer.Typer()


def read_hex(value: str) -> bytes:
    """Parse 0x-prefixed or bare hex, ignoring surrounding whitespace."""
    text = value.strip()
    if text[:2] in ("0x", "0X"):
        text = text[2:]
    return bytes.fromhex(text)


@app.command(name="encode")
def encode_command(
    cid: str = typer.Option(..., "--cid", help="Content identifier"),
    creator: str = typer.Option(..., "--creator", help="Creator address (20-byte hex)"),
    chain_id: int = typer.Option(..., "--chain", "-c", help="Source transport chain id"),
    tag: str = typer.Option("", "--tag", "-t", help="Tag label (at most 31 bytes of text)"),
    tag_hex: Optional[str] = typer.Option(None, "--tag-hex", help="Raw 32-byte tag, overrides --tag"),
    expires_in: int = typer.Option(86400, "--expires-in", help="Seconds until expiry"),
    created_at: Optional[int] = typer.Option(None, "--created-at", help="Creation time (default: now)"),
    schema_version: int = typer.Option(VERSION, "--schema-version", help="Version field value"),
    legacy: bool = typer.Option(False, "--legacy", help="Use the 7-field legacy layout"),
):
    """
    Encode a checkpoint payload and print it as hex.

    Examples:
        xrelay codec encode --cid bafy... --creator 0xabc... -c 10004 -t test
        xrelay codec encode --cid bafy... --creator 0xabc... -c 10004 --legacy --schema-version 1
    """
    now = SystemClock().now()
    created = now if created_at is None else created_at
    try:
        message = CheckpointMessage(
            cid=cid,
            tag=tag_hex if tag_hex else tag_from_text(tag),
            expires_at=created + expires_in,
            creator=creator,
            created_at=created,
            source_chain_id=chain_id,
            version=schema_version,
        )
        data = encode_legacy(message) if legacy else encode(message)
    except (ValueError, TypeError) as e:
        fail(str(e))

    print("0x" + data.hex())


@app.command(name="decode")
def decode_command(
    payload: str = typer.Argument(..., help="Payload hex (or @file containing hex)"),
    now: Optional[int] = typer.Option(None, "--now", help="Validation instant (default: now)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Decode a checkpoint payload and report whether it would pass validation.

    Exit code 0 if the payload decodes and validates, 1 otherwise.
    """
    try:
        if payload.startswith("@"):
            with open(payload[1:], "r") as f:
                payload = f.read()
        message = decode(read_hex(payload))
    except (OSError, ValueError) as e:
        fail(f"invalid hex input: {e}", json_output)
    except MalformedMessageError as e:
        fail(str(e), json_output, reason=e.reason.value)

    instant = SystemClock().now() if now is None else now
    error = validation_error(message, instant)

    if json_output:
        print(
            json.dumps(
                {
                    "message": message.to_dict(),
                    "checkpoint_id": checkpoint_id(message),
                    "message_hash": message_hash(message),
                    "valid": error is None,
                    "reason": error.reason.value if error else None,
                },
                indent=2,
            )
        )
    else:
        table = Table(show_header=False, box=None)
        table.add_row("[bold]Version[/bold]", str(message.version))
        table.add_row("CID", message.cid)
        table.add_row("Tag", f"{message.tag} ({tag_to_text(message.tag)!r})")
        table.add_row("Creator", message.creator)
        table.add_row(
            "Source chain", f"{message.source_chain_id} ({chain_name(message.source_chain_id)})"
        )
        table.add_row("Created at", str(message.created_at))
        table.add_row("Expires at", str(message.expires_at))
        table.add_row("Revoked", str(message.revoked))
        table.add_row("Checkpoint ID", checkpoint_id(message))
        table.add_row("Message hash", message_hash(message))
        console.print(table)
        if error is None:
            console.print("[green]✓ Valid[/green]")
        else:
            console.print(f"[red]✗ {error.reason.value}: {error}[/red]")

    if error is not None:
        raise typer.Exit(1)
