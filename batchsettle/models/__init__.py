"""batchsettle data models: all Pydantic v2, all frozen (immutable)."""

from batchsettle.models.assets import (
    NATIVE,
    NULL_ADDRESS,
    Asset,
    NativeAsset,
    TokenAsset,
    parse_asset_ref,
)
from batchsettle.models.events import (
    AuditEvent,
    BatchRecovered,
    BatchTransfer,
    BatchTransferRequested,
    Recovered,
)
from batchsettle.models.journal import JournalEntry
from batchsettle.models.plan import BatchPlan

__all__ = [
    # assets
    "Asset",
    "NativeAsset",
    "TokenAsset",
    "NATIVE",
    "NULL_ADDRESS",
    "parse_asset_ref",
    # plan
    "BatchPlan",
    # events
    "AuditEvent",
    "BatchTransfer",
    "BatchTransferRequested",
    "BatchRecovered",
    "Recovered",
    # journal
    "JournalEntry",
]
