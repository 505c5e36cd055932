"""``batchsettle disburse PLAN``: dry-run an immediate batch on a scratch ledger.

A fresh in-memory ledger is created, the sender is credited with exactly
what the plan needs and pre-approves the disburser for every token, then
the batch is executed with the native value given on the command line.
The balance changes and the journal are printed.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from batchsettle.cli.commands.validate import load_plan_or_exit
from batchsettle.cli.render import SettlementRenderer
from batchsettle.config import SettleConfig
from batchsettle.core.asset_ledger import InMemoryAssetLedger
from batchsettle.core.disburser import ImmediateBatchDisburser
from batchsettle.core.errors import SettlementError
from batchsettle.core.hasher import label_address
from batchsettle.core.journal import AuditJournal
from batchsettle.models.assets import NATIVE

console = Console()


def disburse_cmd(
    plan_file: Path = typer.Argument(..., help="Path to the JSON plan file."),
    native_funds: int = typer.Option(
        None,
        "--native-funds",
        "-n",
        min=0,
        help="Native value attached to the call (defaults to the plan's native total).",
    ),
    sender_label: str = typer.Option(
        "sender",
        "--sender",
        help="Label the sender address is derived from.",
    ),
) -> None:
    """Simulate an immediate batch transfer and show the balance changes."""
    settings = SettleConfig()
    renderer = SettlementRenderer(console=console, native_symbol=settings.native_symbol)

    plan = load_plan_or_exit(plan_file)
    if native_funds is None:
        native_funds = plan.required_native

    ledger = InMemoryAssetLedger()
    journal = AuditJournal()
    sender = label_address(sender_label)
    disburser = ImmediateBatchDisburser(ledger, journal, sender)

    # The sender holds exactly the attached native value and the token totals.
    ledger.mint(NATIVE, sender, native_funds)
    for token in plan.token_assets:
        total = plan.required_by_asset[token]
        ledger.mint(token, sender, total)
        ledger.approve(token, sender, disburser.address, total)

    holders = [sender, *plan.recipients]
    assets = plan.distinct_assets
    before = {(h, a): ledger.balance_of(a, h) for h in holders for a in assets}

    try:
        disburser.batch_transfer(
            sender, plan.recipients, plan.amounts, plan.asset_refs, native_funds
        )
    except SettlementError as exc:
        console.print(f"[bold red]Batch rejected:[/bold red] {exc}")
        raise typer.Exit(code=1)

    after = {(h, a): ledger.balance_of(a, h) for h in holders for a in assets}
    console.print(renderer.balance_diff_table(before, after, {sender: "sender"}))
    console.print(renderer.journal_table(journal))
    renderer.print_chain_verification(journal)
