"""``batchsettle demo``: run the three reference scenarios on a scratch ledger.

A. Immediate native batch: 5+ recipients paid in one call with the exact
   native total attached.
B. Abandoned escrow: the same plan, funded with only half the native total.
   Completion is rejected and the owner recovers the deposit to the treasury.
C. Token escrow: one recipient, one token, funded exactly and completed by
   an unrelated relayer.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel

from batchsettle.cli.render import SettlementRenderer
from batchsettle.config import SettleConfig
from batchsettle.core.asset_ledger import InMemoryAssetLedger
from batchsettle.core.disburser import ImmediateBatchDisburser
from batchsettle.core.errors import SettlementError
from batchsettle.core.escrow import DelegatedBatchEscrow
from batchsettle.core.hasher import label_address
from batchsettle.core.journal import AuditJournal
from batchsettle.models.assets import NATIVE, NativeAsset, TokenAsset

console = Console()


def generate_recipients(batch_size: int) -> list[str]:
    return [label_address(f"recipient-{idx + 1}") for idx in range(batch_size)]


def generate_amounts(batch_size: int) -> list[int]:
    """10, 20, 30, ... capped at 100."""
    return [min((idx + 1) * 10, 100) for idx in range(batch_size)]


def _snapshot(
    ledger: InMemoryAssetLedger, holders: list[str], assets: list[NativeAsset | TokenAsset]
) -> dict[tuple[str, NativeAsset | TokenAsset], int]:
    return {(h, a): ledger.balance_of(a, h) for h in holders for a in assets}


def demo_cmd(
    batch_size: int = typer.Option(
        None,
        "--batch-size",
        "-b",
        help="Recipients in scenarios A and B (minimum 5; defaults to config).",
    ),
) -> None:
    """Run the immediate, abandoned-escrow and token-escrow scenarios."""
    settings = SettleConfig() if batch_size is None else SettleConfig(demo_batch_size=batch_size)
    renderer = SettlementRenderer(console=console, native_symbol=settings.native_symbol)
    size = settings.demo_batch_size

    ledger = InMemoryAssetLedger()
    journal = AuditJournal()
    payer = label_address("payer")
    initiator = label_address("initiator")
    treasury = label_address("treasury")
    relayer = label_address("relayer")
    labels = {payer: "payer", initiator: "initiator", treasury: "treasury", relayer: "relayer"}

    recipients = generate_recipients(size)
    amounts = generate_amounts(size)
    total = sum(amounts)

    # -- Scenario A -------------------------------------------------------
    console.print(Panel(
        f"[bold]A. Immediate batch[/bold]: {size} recipients, {total} {settings.native_symbol}",
        border_style="cyan",
    ))
    disburser = ImmediateBatchDisburser(ledger, journal, payer)
    labels[disburser.address] = "disburser"
    ledger.mint(NATIVE, payer, total)
    before = _snapshot(ledger, [payer, *recipients], [NATIVE])
    disburser.batch_transfer(payer, recipients, amounts, [], native_funds=total)
    after = _snapshot(ledger, [payer, *recipients], [NATIVE])
    console.print(renderer.balance_diff_table(before, after, labels))

    # -- Scenario B -------------------------------------------------------
    deposit = total // 2
    console.print(Panel(
        f"[bold]B. Abandoned escrow[/bold]: {deposit} of {total} "
        f"{settings.native_symbol} deposited",
        border_style="cyan",
    ))
    escrow = DelegatedBatchEscrow(ledger, journal, initiator, recipients, amounts, settings=settings)
    labels[escrow.address] = "escrow B"
    ledger.mint(NATIVE, treasury, deposit)
    ledger.transfer_native(treasury, escrow.address, deposit)
    try:
        escrow.complete_transfer(relayer)
    except SettlementError as exc:
        console.print(f"[yellow]Completion rejected:[/yellow] {exc}")
    before = _snapshot(ledger, [escrow.address, treasury], [NATIVE])
    escrow.batch_recover(initiator, treasury)
    after = _snapshot(ledger, [escrow.address, treasury], [NATIVE])
    console.print(renderer.balance_diff_table(before, after, labels))

    # -- Scenario C -------------------------------------------------------
    token = TokenAsset(address=label_address("token-1"))
    console.print(Panel(
        f"[bold]C. Token escrow[/bold]: 10 of {token.address} to one recipient",
        border_style="cyan",
    ))
    token_escrow = DelegatedBatchEscrow(
        ledger, journal, initiator, recipients[:1], [10], [token], settings=settings
    )
    labels[token_escrow.address] = "escrow C"
    ledger.mint(token, treasury, 10)
    ledger.transfer_asset(token, treasury, token_escrow.address, 10)
    before = _snapshot(ledger, [token_escrow.address, recipients[0]], [token])
    token_escrow.complete_transfer(relayer)
    after = _snapshot(ledger, [token_escrow.address, recipients[0]], [token])
    console.print(renderer.balance_diff_table(before, after, labels))

    console.print(renderer.journal_table(journal))
    renderer.print_chain_verification(journal)
