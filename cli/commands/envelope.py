"""
Envelope commands: keygen, build
"""

import json
from typing import Optional

import typer

from cli.commands.codec import read_hex
from cli.context import console, fail
from xrelay.core.clock import SystemClock
from xrelay.transport import GuardianKey, MockTransport, ensure_keypair

app = typer.Typer()


@app.command()
def keygen(
    key_path: Optional[str] = typer.Option(
        None,
        "--out",
        "-o",
        help="Private key path (default: ~/.xrelay/keys/guardian_ed25519)",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Create a guardian Ed25519 keypair if it does not exist yet."""
    private_path, public_path = ensure_keypair(key_path)
    pubkey_id = GuardianKey.load_from_file(private_path).get_pubkey_id()

    if json_output:
        print(json.dumps({"private_key": private_path, "public_key": public_path, "pubkey_id": pubkey_id}))
    else:
        console.print(f"[green]✓ Guardian key ready[/green]")
        console.print(f"  Private key: [cyan]{private_path}[/cyan]")
        console.print(f"  Public key: [cyan]{public_path}[/cyan]")
        console.print(f"  Public key ID: {pubkey_id}")


@app.command()
def build(
    payload: str = typer.Argument(..., help="Checkpoint payload hex (see `xrelay codec encode`)"),
    chain_id: int = typer.Option(..., "--chain", "-c", help="Emitter transport chain id"),
    emitter: str = typer.Option(..., "--emitter", "-e", help="Emitter (32-byte hex)"),
    sequence: int = typer.Option(0, "--sequence", "-s", help="Emitter sequence number"),
    nonce: int = typer.Option(0, "--nonce", help="Envelope nonce"),
    key_path: Optional[str] = typer.Option(None, "--key", "-k", help="Guardian private key PEM"),
    unsigned: bool = typer.Option(False, "--unsigned", help="Zero signature (mock transport)"),
):
    """
    Wrap a payload in a transport envelope and print it as hex.

    Examples:
        xrelay envelope build 0x... -c 10004 -e 0x... --key guardian_ed25519
        xrelay envelope build 0x... -c 10004 -e 0x... --unsigned
    """
    if not unsigned and not key_path:
        fail("either --key or --unsigned is required")

    timestamp = SystemClock().now()
    try:
        data = read_hex(payload)
        if unsigned:
            raw = MockTransport().create_envelope(chain_id, emitter, sequence, data, timestamp, nonce)
        else:
            key = GuardianKey.load_from_file(key_path)
            raw = key.build_envelope(chain_id, emitter, sequence, data, timestamp, nonce)
    except (OSError, ValueError, TypeError) as e:
        fail(str(e))

    print("0x" + raw.hex())
