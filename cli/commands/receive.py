"""
Receive command: run one transport envelope through the reception pipeline.
"""

import json
from typing import Optional

import typer
from rich.table import Table

from cli.commands.codec import read_hex
from cli.context import DATA_DIR_OPTION, console, fail, resolve_settings
from xrelay.core.chains import chain_name
from xrelay.core.errors import ReceptionError, StoreError
from xrelay.metrics import start_metrics_server
from xrelay.receiver import CheckpointReceiver
from xrelay.transport import GuardianVerifier, MockTransport


def receive_command(
    envelope_file: str = typer.Argument(..., help="File holding the envelope as hex"),
    pubkey: Optional[str] = typer.Option(
        None,
        "--pubkey",
        "-p",
        help="Guardian public key PEM (default: $XRELAY_GUARDIAN_PUBKEY)",
    ),
    mock: bool = typer.Option(False, "--mock", help="Skip signature checks (mock transport)"),
    data_dir: Optional[str] = DATA_DIR_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Receive a checkpoint from a transport envelope.

    Exit code 0 if the checkpoint was stored, 1 if it was rejected.

    Examples:
        xrelay receive envelope.hex --pubkey guardian_ed25519.pub
        xrelay receive envelope.hex --mock --json
    """
    settings = resolve_settings(data_dir)

    try:
        with open(envelope_file, "r") as f:
            raw = read_hex(f.read())
    except (OSError, ValueError) as e:
        fail(f"cannot read envelope: {e}", json_output)

    if mock:
        verifier = MockTransport()
    else:
        key_path = pubkey or settings.guardian_pubkey
        if not key_path:
            fail("no guardian public key (use --pubkey, XRELAY_GUARDIAN_PUBKEY or --mock)", json_output)
        try:
            verifier = GuardianVerifier.load_from_file(key_path)
        except (OSError, ValueError) as e:
            fail(f"cannot load guardian key: {e}", json_output)

    start_metrics_server(settings.metrics_enabled, settings.metrics_port)

    try:
        receiver = CheckpointReceiver.from_settings(settings, verifier)
        receipt = receiver.receive_checkpoint_sync(raw)
    except ReceptionError as e:
        fail(str(e), json_output, reason=e.reason.value, stage=e.stage)
    except StoreError as e:
        fail(str(e), json_output)

    if json_output:
        print(json.dumps(receipt.to_dict(), indent=2))
        return

    console.print("[green]✓ Checkpoint received[/green]")
    table = Table(show_header=False, box=None)
    table.add_row("Message ID", receipt.message_id)
    table.add_row("CID", receipt.cid)
    table.add_row("Content hash", receipt.content_hash)
    table.add_row(
        "Source chain", f"{receipt.source_chain_id} ({chain_name(receipt.source_chain_id)})"
    )
    table.add_row("Creator", receipt.creator)
    table.add_row("Expires at", str(receipt.expires_at))
    console.print(table)
