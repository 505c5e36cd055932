"""Failure taxonomy for batch settlement.

Every failure is fatal to the call that raised it and the ledger is rolled
back before the exception reaches the caller.  Nothing here is logged and
swallowed: callers see the exception with a stable ``reason`` string they
can match on.

Families
--------
- ``InvalidPlan``         structural problems with recipients/amounts/assets
- ``FundingMismatch``     native value supplied does not match the plan
- ``AssetTransferFailure`` the ledger could not move an asset
- ``AccessDenied``        privileged call from someone other than the owner
- ``NothingToRecover``    recovery requested while every asset is funded
"""

from __future__ import annotations


class SettlementError(RuntimeError):
    """Base class for every batch settlement failure."""

    reason: str = "settlement failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.reason)


# ---------------------------------------------------------------------------
# Plan validation
# ---------------------------------------------------------------------------


class InvalidPlan(SettlementError):
    reason = "invalid batch plan"


class NoRecipients(InvalidPlan):
    reason = "no recipients"


class MismatchedAmounts(InvalidPlan):
    reason = "recipients and amounts arrays are not equal length"


class MismatchedAssetRefs(InvalidPlan):
    reason = (
        "recipients and asset refs arrays are not equal length "
        "and asset refs is not empty"
    )


class ZeroAmount(InvalidPlan):
    reason = "transfer amount is zero"


class InvalidAmount(InvalidPlan):
    reason = "transfer amount is not an integer"


class NullRecipient(InvalidPlan):
    reason = "recipient is the null address"


class InvalidAddress(InvalidPlan):
    reason = "malformed address"


# ---------------------------------------------------------------------------
# Funding
# ---------------------------------------------------------------------------


class FundingMismatch(SettlementError):
    reason = "native funds do not match the plan"


class WrongNativeAmount(FundingMismatch):
    reason = "wrong native amount"


class DirectFundingRejected(FundingMismatch):
    reason = "direct native transfers are not accepted"


# ---------------------------------------------------------------------------
# Ledger-level transfer failures
# ---------------------------------------------------------------------------


class AssetTransferFailure(SettlementError):
    reason = "asset transfer failed"


class InsufficientBalance(AssetTransferFailure):
    reason = "insufficient balance"


class InsufficientTokenBalance(AssetTransferFailure):
    reason = "transfer amount exceeds balance"

    def __init__(self, token: str | None = None, message: str | None = None) -> None:
        self.token = token
        if message is None and token is not None:
            message = f"{self.reason} (token {token})"
        super().__init__(message)


class InsufficientAllowanceOrBalance(AssetTransferFailure):
    reason = "insufficient allowance"


# ---------------------------------------------------------------------------
# Access control, recovery, lifecycle
# ---------------------------------------------------------------------------


class AccessDenied(SettlementError):
    reason = "access denied"


class NotOwner(AccessDenied):
    reason = "caller is not the owner"


class NothingToRecover(SettlementError):
    reason = "every asset is sufficiently funded, nothing to recover"


class NativeRecoveryUnsupported(SettlementError):
    reason = "native currency cannot be recovered from the disburser"


class EscrowAlreadyCompleted(SettlementError):
    reason = "escrow transfer already completed"
