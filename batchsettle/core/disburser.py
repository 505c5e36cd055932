"""Immediate batch disburser.

Pays many recipients from one caller in a single call.  Native value is
supplied with the call and must match the plan's native total exactly;
tokens are pulled from the caller using allowances granted to the
disburser beforehand.  Either every transfer lands or none does.

The disburser never holds native value between calls.  Tokens sent to it
by mistake can be swept out by the owner with ``recover``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from batchsettle.core.access import AccessControl
from batchsettle.core.asset_ledger import AssetLedger
from batchsettle.core.errors import (
    DirectFundingRejected,
    NativeRecoveryUnsupported,
    WrongNativeAmount,
)
from batchsettle.core.journal import AuditJournal
from batchsettle.models.assets import NativeAsset, TokenAsset, normalize_address, parse_asset_ref
from batchsettle.models.events import BatchTransfer, Recovered
from batchsettle.models.journal import JournalEntry
from batchsettle.models.plan import BatchPlan

logger = logging.getLogger(__name__)


class ImmediateBatchDisburser:
    """Validates and pays a caller-supplied batch in one atomic step.

    Parameters
    ----------
    ledger:
        Ledger the disburser is deployed on.
    journal:
        Where committed ``BatchTransfer`` / ``Recovered`` events go.
    deployer:
        Principal creating the disburser.
    owner:
        Principal allowed to call ``recover``; defaults to ``deployer``.
    """

    def __init__(
        self,
        ledger: AssetLedger,
        journal: AuditJournal,
        deployer: str,
        *,
        owner: str | None = None,
    ) -> None:
        self._ledger = ledger
        self._journal = journal
        self._accepting_native = False
        self.access = AccessControl(owner or deployer)
        self.address = ledger.deploy(deployer, receive_hook=self._on_native_received)
        logger.info("Disburser deployed at %s (owner %s).", self.address, self.owner)

    @property
    def owner(self) -> str:
        return self.access.owner

    def _on_native_received(self, sender: str, amount: int) -> None:
        if not self._accepting_native:
            logger.warning(
                "Rejected direct transfer of %d native from %s to disburser %s.",
                amount, sender, self.address,
            )
            raise DirectFundingRejected()

    # ------------------------------------------------------------------
    # Batch transfer
    # ------------------------------------------------------------------

    def batch_transfer(
        self,
        caller: str,
        recipients: Sequence[str],
        amounts: Sequence[int],
        asset_refs: Sequence[Any] = (),
        native_funds: int = 0,
    ) -> JournalEntry:
        """Pay every recipient its amount, or raise and pay nobody.

        ``native_funds`` is the native value ``caller`` attaches to the call.
        It must equal the plan's native total exactly.
        """
        caller = normalize_address(caller)
        plan = BatchPlan.build(recipients, amounts, asset_refs)

        required = plan.required_native
        if isinstance(native_funds, bool) or not isinstance(native_funds, int):
            logger.warning(
                "Rejected batch from %s: non-integer native value %r.", caller, native_funds
            )
            raise WrongNativeAmount(f"wrong native amount: {native_funds!r} is not an integer")
        if native_funds != required:
            logger.warning(
                "Rejected batch from %s: %d native supplied, %d required.",
                caller, native_funds, required,
            )
            raise WrongNativeAmount(
                f"wrong native amount: supplied {native_funds}, required {required}"
            )

        with self._ledger.transaction():
            if native_funds:
                self._accepting_native = True
                try:
                    self._ledger.transfer_native(caller, self.address, native_funds)
                finally:
                    self._accepting_native = False

            for recipient, amount, asset in plan.entries():
                if isinstance(asset, NativeAsset):
                    self._ledger.transfer_native(self.address, recipient, amount)
                else:
                    self._ledger.transfer_asset(
                        asset, caller, recipient, amount, spender=self.address
                    )

            entry = self._journal.append(
                BatchTransfer(
                    contract=self.address,
                    sender=caller,
                    recipients=list(plan.recipients),
                    amounts=list(plan.amounts),
                    asset_refs=plan.asset_ref_strings(),
                )
            )

        logger.info(
            "Batch of %d transfers from %s committed (%d native).",
            len(plan), caller, native_funds,
        )
        return entry

    # ------------------------------------------------------------------
    # Recovery of stranded tokens
    # ------------------------------------------------------------------

    def recover(self, caller: str, to: str, asset: Any) -> JournalEntry:
        """Sweep the disburser's whole balance of one token to ``to``. Owner only."""
        self.access.require_owner(caller)
        token = parse_asset_ref(asset)
        if not isinstance(token, TokenAsset):
            raise NativeRecoveryUnsupported()
        to = normalize_address(to)

        with self._ledger.transaction():
            balance = self._ledger.balance_of(token, self.address)
            self._ledger.transfer_asset(token, self.address, to, balance)
            entry = self._journal.append(
                Recovered(contract=self.address, to=to, amount=balance, asset_ref=token.to_ref())
            )

        logger.info("Recovered %d of %s from disburser %s to %s.", balance, token, self.address, to)
        return entry
