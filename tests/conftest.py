"""Shared test fixtures for batchsettle."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from batchsettle.config import SettleConfig
from batchsettle.core.asset_ledger import InMemoryAssetLedger
from batchsettle.core.disburser import ImmediateBatchDisburser
from batchsettle.core.escrow import DelegatedBatchEscrow
from batchsettle.core.journal import AuditJournal
from batchsettle.models.assets import NATIVE, TokenAsset


def make_address(n: int) -> str:
    """Deterministic lowercase test address."""
    return f"0x{n:040x}"


@pytest.fixture
def address() -> Callable[[int], str]:
    """Factory fixture: deterministic address from an integer."""
    return make_address


@pytest.fixture
def ledger() -> InMemoryAssetLedger:
    """Provide a fresh, empty in-memory ledger."""
    return InMemoryAssetLedger()


@pytest.fixture
def journal() -> AuditJournal:
    """Provide a fresh audit journal."""
    return AuditJournal()


@pytest.fixture
def settings() -> SettleConfig:
    """Default settings, independent of the environment."""
    return SettleConfig(allow_repeat_completion=False, environment="development")


# ---------------------------------------------------------------------------
# Principals
# ---------------------------------------------------------------------------


@pytest.fixture
def payer() -> str:
    return make_address(0xA1)


@pytest.fixture
def initiator() -> str:
    return make_address(0xA2)


@pytest.fixture
def treasury() -> str:
    return make_address(0xA3)


@pytest.fixture
def relayer() -> str:
    """Untrusted caller of completion methods."""
    return make_address(0xA4)


@pytest.fixture
def recipients() -> list[str]:
    return [make_address(0xB00 + idx) for idx in range(5)]


@pytest.fixture
def amounts() -> list[int]:
    return [10, 20, 30, 40, 50]


@pytest.fixture
def tokens() -> list[TokenAsset]:
    """One distinct token per recipient."""
    return [TokenAsset(address=make_address(0xC00 + idx)) for idx in range(5)]


# ---------------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------------


@pytest.fixture
def disburser(
    ledger: InMemoryAssetLedger, journal: AuditJournal, payer: str
) -> ImmediateBatchDisburser:
    """A disburser deployed (and owned) by ``payer``."""
    return ImmediateBatchDisburser(ledger, journal, payer)


@pytest.fixture
def make_escrow(
    ledger: InMemoryAssetLedger,
    journal: AuditJournal,
    initiator: str,
    settings: SettleConfig,
) -> Callable[..., DelegatedBatchEscrow]:
    """Factory fixture: build an escrow owned by ``initiator``."""

    def _factory(recipients, amounts, asset_refs=(), **overrides) -> DelegatedBatchEscrow:
        overrides.setdefault("settings", settings)
        return DelegatedBatchEscrow(
            ledger, journal, initiator, recipients, amounts, asset_refs, **overrides
        )

    return _factory


@pytest.fixture
def fund_escrow(
    ledger: InMemoryAssetLedger, treasury: str
) -> Callable[..., None]:
    """Factory fixture: deposit each entry's amount from the treasury.

    ``modifier(amount, idx)`` may change the deposited amount per entry.
    """

    def _fund(escrow: DelegatedBatchEscrow, modifier=None) -> None:
        for idx, (_, amount, asset) in enumerate(escrow.plan.entries()):
            deposit = modifier(amount, idx) if modifier else amount
            ledger.mint(asset, treasury, deposit)
            if asset == NATIVE:
                ledger.transfer_native(treasury, escrow.address, deposit)
            else:
                ledger.transfer_asset(asset, treasury, escrow.address, deposit)

    return _fund
