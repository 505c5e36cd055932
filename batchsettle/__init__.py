"""batchsettle: atomic batch disbursement and delegated batch escrow.

- ImmediateBatchDisburser: pay many recipients from one caller, all or nothing
- DelegatedBatchEscrow: fixed plan, funded out-of-band, completed by anyone
- Per-asset recovery of under-funded escrows by the owner
- Hash-chained audit journal of every committed event
"""

__version__ = "0.2.0"
__description__ = "Atomic batch disbursement and delegated batch escrow"

from batchsettle.core.asset_ledger import InMemoryAssetLedger
from batchsettle.core.disburser import ImmediateBatchDisburser
from batchsettle.core.escrow import DelegatedBatchEscrow
from batchsettle.core.journal import AuditJournal
from batchsettle.cli.app import app as cli

__all__ = [
    "AuditJournal",
    "DelegatedBatchEscrow",
    "ImmediateBatchDisburser",
    "InMemoryAssetLedger",
    "cli",
    "__version__",
]
