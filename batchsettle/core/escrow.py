"""Delegated batch escrow.

A single-use container created with a fixed batch plan.  Third parties fund
the escrow address out-of-band, anyone may trigger ``complete_transfer``
once every asset is covered, and the owner may ``batch_recover`` whatever
is stuck when the plan is abandoned.

Completion is all-or-nothing across the whole plan.  Recovery is decided
per asset: an asset is swept back only if its balance cannot cover its
share of the plan, so fully funded assets stay reserved for completion.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum
from typing import Any

from batchsettle.config import SettleConfig
from batchsettle.core.access import AccessControl
from batchsettle.core.asset_ledger import AssetLedger
from batchsettle.core.errors import (
    EscrowAlreadyCompleted,
    InsufficientBalance,
    InsufficientTokenBalance,
    NothingToRecover,
)
from batchsettle.core.journal import AuditJournal
from batchsettle.models.assets import NATIVE, NativeAsset, TokenAsset, normalize_address
from batchsettle.models.events import BatchRecovered, BatchTransfer, BatchTransferRequested
from batchsettle.models.journal import JournalEntry
from batchsettle.models.plan import BatchPlan

logger = logging.getLogger(__name__)


class EscrowState(str, Enum):
    OPEN = "open"
    COMPLETED = "completed"


class DelegatedBatchEscrow:
    """Holds one immutable ``BatchPlan`` and settles it when funded.

    Construction validates the plan before anything touches the ledger, so
    an invalid plan leaves no escrow account behind.

    Parameters
    ----------
    ledger:
        Ledger the escrow lives on.
    journal:
        Where the escrow's events are recorded.
    initiator:
        Principal creating the escrow.
    recipients, amounts, asset_refs:
        The plan.  Empty ``asset_refs`` pays every entry in native currency.
    owner:
        Principal allowed to ``batch_recover``; defaults to ``initiator``.
    settings:
        Runtime settings; ``allow_repeat_completion`` decides whether a
        completed escrow may be completed again after re-funding.
    """

    def __init__(
        self,
        ledger: AssetLedger,
        journal: AuditJournal,
        initiator: str,
        recipients: Sequence[str],
        amounts: Sequence[int],
        asset_refs: Sequence[Any] = (),
        *,
        owner: str | None = None,
        settings: SettleConfig | None = None,
    ) -> None:
        self._plan = BatchPlan.build(recipients, amounts, asset_refs)
        self._ledger = ledger
        self._journal = journal
        self._allow_repeat = (settings or SettleConfig()).allow_repeat_completion
        self._state = EscrowState.OPEN
        self.initiator = normalize_address(initiator)
        self.access = AccessControl(owner or self.initiator)

        with ledger.transaction():
            self.address = ledger.deploy(self.initiator)
            journal.append(
                BatchTransferRequested(
                    contract=self.address,
                    initiator=self.initiator,
                    recipients=list(self._plan.recipients),
                    amounts=list(self._plan.amounts),
                    asset_refs=self._plan.asset_ref_strings(),
                )
            )

        logger.info(
            "Escrow %s created by %s for %d transfers across %d assets.",
            self.address, self.initiator, len(self._plan), len(self._plan.distinct_assets),
        )

    # ------------------------------------------------------------------
    # Read-only plan accessors
    # ------------------------------------------------------------------

    @property
    def plan(self) -> BatchPlan:
        return self._plan

    @property
    def owner(self) -> str:
        return self.access.owner

    @property
    def state(self) -> EscrowState:
        return self._state

    @property
    def recipients(self) -> tuple[str, ...]:
        return self._plan.recipients

    @property
    def amounts(self) -> tuple[int, ...]:
        return self._plan.amounts

    @property
    def asset_refs(self) -> tuple[NativeAsset | TokenAsset, ...]:
        return self._plan.asset_refs

    def recipient_at(self, index: int) -> str:
        return self._plan.recipients[index]

    def amount_at(self, index: int) -> int:
        return self._plan.amounts[index]

    def asset_ref_at(self, index: int) -> NativeAsset | TokenAsset:
        return self._plan.asset_refs[index]

    @property
    def recipients_length(self) -> int:
        return len(self._plan.recipients)

    @property
    def amounts_length(self) -> int:
        return len(self._plan.amounts)

    @property
    def asset_refs_length(self) -> int:
        return len(self._plan.asset_refs)

    def funding_status(self) -> dict[NativeAsset | TokenAsset, tuple[int, int]]:
        """Map each distinct asset to ``(current balance, required total)``."""
        return {
            asset: (self._ledger.balance_of(asset, self.address), required)
            for asset, required in self._plan.required_by_asset.items()
        }

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def complete_transfer(self, caller: str) -> JournalEntry:
        """Pay out the whole plan from the escrow's balances. Anyone may call.

        Every asset must be covered before the first transfer is issued.
        """
        caller = normalize_address(caller)
        with self._ledger.transaction():
            if self._state is EscrowState.COMPLETED and not self._allow_repeat:
                logger.warning("Rejected repeat completion of escrow %s by %s.", self.address, caller)
                raise EscrowAlreadyCompleted()

            required = self._plan.required_by_asset
            if NATIVE in required:
                held = self._ledger.balance_of(NATIVE, self.address)
                if held < required[NATIVE]:
                    logger.warning(
                        "Escrow %s holds %d native, needs %d.",
                        self.address, held, required[NATIVE],
                    )
                    raise InsufficientBalance(
                        f"insufficient balance: escrow holds {held}, "
                        f"plan requires {required[NATIVE]}"
                    )
            for token in self._plan.token_assets:
                held = self._ledger.balance_of(token, self.address)
                if held < required[token]:
                    logger.warning(
                        "Escrow %s holds %d of %s, needs %d.",
                        self.address, held, token, required[token],
                    )
                    raise InsufficientTokenBalance(token.address)

            for recipient, amount, asset in self._plan.entries():
                self._ledger.transfer(asset, self.address, recipient, amount)

            entry = self._journal.append(
                BatchTransfer(
                    contract=self.address,
                    sender=self.address,
                    recipients=list(self._plan.recipients),
                    amounts=list(self._plan.amounts),
                    asset_refs=self._plan.asset_ref_strings(),
                )
            )
            self._state = EscrowState.COMPLETED

        logger.info("Escrow %s completed by %s.", self.address, caller)
        return entry

    # ------------------------------------------------------------------
    # Recovery
    # ------------------------------------------------------------------

    def batch_recover(self, caller: str, to: str) -> JournalEntry:
        """Sweep every under-funded asset back to ``to``. Owner only.

        An asset is recoverable when its balance is strictly below its
        required total; its entire balance is swept, not just the shortfall.
        Assets that are fully funded are left in place.
        """
        self.access.require_owner(caller)
        to = normalize_address(to)

        with self._ledger.transaction():
            swept_amounts: list[int] = []
            swept_refs: list[str] = []
            for asset, required in self._plan.required_by_asset.items():
                balance = self._ledger.balance_of(asset, self.address)
                if balance >= required:
                    continue
                self._ledger.transfer(asset, self.address, to, balance)
                swept_amounts.append(balance)
                swept_refs.append(asset.to_ref())

            if not swept_refs:
                logger.warning("Escrow %s: every asset is funded, nothing to recover.", self.address)
                raise NothingToRecover()

            entry = self._journal.append(
                BatchRecovered(
                    contract=self.address,
                    to=to,
                    amounts=swept_amounts,
                    asset_refs=swept_refs,
                )
            )

        logger.info(
            "Escrow %s recovered %s to %s.",
            self.address, dict(zip(swept_refs, swept_amounts)), to,
        )
        return entry
