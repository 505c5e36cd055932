"""Rich terminal rendering for plans, balances and journal entries.

Color scheme
------------
- cyan      : native currency
- magenta   : tokens
- green     : credits / valid chain
- red       : debits / broken chain
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from rich.console import Console
from rich.table import Table

from batchsettle.core.journal import AuditJournal, JournalIntegrityError
from batchsettle.models.assets import NativeAsset, TokenAsset
from batchsettle.models.plan import BatchPlan


def _short(address: str) -> str:
    return f"{address[:8]}…{address[-4:]}"


class SettlementRenderer:
    """Turns plans, balance diffs and journals into Rich tables.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    native_symbol:
        Display name for the native asset.
    """

    def __init__(self, console: Console | None = None, native_symbol: str = "ETH") -> None:
        self.console = console or Console()
        self.native_symbol = native_symbol

    def asset_label(self, asset: NativeAsset | TokenAsset) -> str:
        if isinstance(asset, NativeAsset):
            return f"[cyan]{self.native_symbol}[/cyan]"
        return f"[magenta]{_short(asset.address)}[/magenta]"

    # ------------------------------------------------------------------
    # Plans
    # ------------------------------------------------------------------

    def plan_table(self, plan: BatchPlan) -> Table:
        table = Table(title="Batch plan", header_style="bold cyan")
        table.add_column("#", style="dim", justify="right")
        table.add_column("Recipient")
        table.add_column("Amount", justify="right")
        table.add_column("Asset")
        for idx, (recipient, amount, asset) in enumerate(plan.entries()):
            table.add_row(str(idx), recipient, str(amount), self.asset_label(asset))
        return table

    def totals_table(self, plan: BatchPlan) -> Table:
        table = Table(title="Required per asset", header_style="bold cyan")
        table.add_column("Asset")
        table.add_column("Required", justify="right")
        for asset, total in plan.required_by_asset.items():
            table.add_row(self.asset_label(asset), str(total))
        return table

    # ------------------------------------------------------------------
    # Balances
    # ------------------------------------------------------------------

    def balance_diff_table(
        self,
        before: Mapping[tuple[str, NativeAsset | TokenAsset], int],
        after: Mapping[tuple[str, NativeAsset | TokenAsset], int],
        labels: Mapping[str, str] | None = None,
        *,
        title: str = "Balance changes",
    ) -> Table:
        """Rows for every (holder, asset) pair whose balance moved."""
        labels = labels or {}
        table = Table(title=title, header_style="bold cyan")
        table.add_column("Holder")
        table.add_column("Asset")
        table.add_column("Before", justify="right")
        table.add_column("After", justify="right")
        table.add_column("Change", justify="right")
        for key in after:
            holder, asset = key
            delta = after[key] - before.get(key, 0)
            if not delta:
                continue
            style = "green" if delta > 0 else "red"
            table.add_row(
                labels.get(holder, _short(holder)),
                self.asset_label(asset),
                str(before.get(key, 0)),
                str(after[key]),
                f"[{style}]{delta:+d}[/{style}]",
            )
        return table

    # ------------------------------------------------------------------
    # Journal
    # ------------------------------------------------------------------

    def journal_table(self, journal: AuditJournal, *, contracts: Iterable[str] | None = None) -> Table:
        wanted = set(contracts) if contracts is not None else None
        table = Table(title="Audit journal", header_style="bold cyan")
        table.add_column("#", style="dim", justify="right")
        table.add_column("Event", style="bold")
        table.add_column("Contract")
        table.add_column("Payload")
        for entry in journal.entries():
            if wanted is not None and entry.contract not in wanted:
                continue
            payload = {k: v for k, v in entry.payload.items() if k not in ("event", "contract")}
            table.add_row(str(entry.sequence), entry.event_name, _short(entry.contract), str(payload))
        return table

    def print_chain_verification(self, journal: AuditJournal) -> bool:
        try:
            journal.verify_chain()
        except JournalIntegrityError as exc:
            self.console.print(f"[bold red]Journal hash chain is BROKEN:[/bold red] {exc}")
            return False
        self.console.print(f"[green]Journal hash chain is valid ({len(journal)} entries).[/green]")
        return True
