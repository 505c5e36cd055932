"""Audit records emitted by settlement operations.

Each event names the contract address that emitted it, so a single
journal can hold records from many disbursers and escrows.  Asset refs are
stored as plain strings (``"native"`` or a token address).
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict


class AuditEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    event: str
    contract: str


class BatchTransfer(AuditEvent):
    """A batch was disbursed in full.

    ``sender`` is the paying caller for the immediate disburser and the
    escrow's own address for a delegated completion.
    """

    event: Literal["BatchTransfer"] = "BatchTransfer"
    sender: str
    recipients: list[str]
    amounts: list[int]
    asset_refs: list[str]


class BatchTransferRequested(AuditEvent):
    """An escrow was created with a fixed plan."""

    event: Literal["BatchTransferRequested"] = "BatchTransferRequested"
    initiator: str
    recipients: list[str]
    amounts: list[int]
    asset_refs: list[str]


class BatchRecovered(AuditEvent):
    """Under-funded escrow assets were swept back, one entry per asset."""

    event: Literal["BatchRecovered"] = "BatchRecovered"
    to: str
    amounts: list[int]
    asset_refs: list[str]


class Recovered(AuditEvent):
    """Tokens stranded on the disburser were swept to ``to``."""

    event: Literal["Recovered"] = "Recovered"
    to: str
    amount: int
    asset_ref: str
