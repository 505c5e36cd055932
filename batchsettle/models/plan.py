"""Batch plan model: who gets how much of which asset.

A ``BatchPlan`` is the single validation boundary for plan invariants.
Constructing one either yields a plan whose invariants hold or raises an
``InvalidPlan`` subclass, checked in a fixed order so failures are reported
deterministically:

0. every address well formed       (``InvalidAddress``)
   every amount an integer         (``InvalidAmount``)
1. at least one recipient          (``NoRecipients``)
2. one amount per recipient        (``MismatchedAmounts``)
3. asset refs empty or aligned     (``MismatchedAssetRefs``)
4. per entry, in plan order:
   amount > 0                      (``ZeroAmount``)
   recipient is not the null addr  (``NullRecipient``)
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from batchsettle.core.errors import (
    InvalidAmount,
    MismatchedAmounts,
    MismatchedAssetRefs,
    NoRecipients,
    NullRecipient,
    ZeroAmount,
)
from batchsettle.models.assets import (
    NATIVE,
    NULL_ADDRESS,
    Asset,
    NativeAsset,
    TokenAsset,
    normalize_address,
    parse_asset_ref,
)


class BatchPlan(BaseModel):
    """Validated, immutable (recipients, amounts, asset_refs) triple.

    ``asset_refs`` may be empty, meaning every entry pays the native asset.
    """

    model_config = ConfigDict(frozen=True)

    recipients: tuple[str, ...]
    amounts: tuple[int, ...]
    asset_refs: tuple[Asset, ...] = ()

    @field_validator("recipients", mode="before")
    @classmethod
    def _normalize_recipients(cls, value: Any) -> tuple[str, ...]:
        return tuple(normalize_address(r) for r in value or ())

    @field_validator("amounts", mode="before")
    @classmethod
    def _check_amount_types(cls, value: Any) -> tuple[int, ...]:
        amounts = tuple(value or ())
        for idx, amount in enumerate(amounts):
            if isinstance(amount, bool) or not isinstance(amount, int):
                raise InvalidAmount(
                    f"transfer amount at index {idx} is not an integer: {amount!r}"
                )
        return amounts

    @field_validator("asset_refs", mode="before")
    @classmethod
    def _parse_asset_refs(cls, value: Any) -> tuple[NativeAsset | TokenAsset, ...]:
        return tuple(parse_asset_ref(ref) for ref in value or ())

    @model_validator(mode="after")
    def _check_invariants(self) -> BatchPlan:
        if not self.recipients:
            raise NoRecipients()
        if len(self.recipients) != len(self.amounts):
            raise MismatchedAmounts()
        if self.asset_refs and len(self.asset_refs) != len(self.recipients):
            raise MismatchedAssetRefs()
        for idx, (recipient, amount) in enumerate(zip(self.recipients, self.amounts)):
            if amount <= 0:
                raise ZeroAmount(f"transfer amount is zero or negative at index {idx}")
            if recipient == NULL_ADDRESS:
                raise NullRecipient(f"recipient is the null address at index {idx}")
        return self

    @classmethod
    def build(
        cls,
        recipients: Sequence[str],
        amounts: Sequence[int],
        asset_refs: Sequence[Any] | None = None,
    ) -> BatchPlan:
        """Build a plan from plain sequences (lists, tuples, JSON arrays)."""
        return cls(
            recipients=tuple(recipients or ()),
            amounts=tuple(amounts or ()),
            asset_refs=tuple(asset_refs or ()),
        )

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.recipients)

    def asset_for(self, index: int) -> NativeAsset | TokenAsset:
        """Asset paid at ``index``; native when ``asset_refs`` is empty."""
        if not self.asset_refs:
            if not 0 <= index < len(self.recipients):
                raise IndexError(index)
            return NATIVE
        return self.asset_refs[index]

    def entries(self) -> Iterator[tuple[str, int, NativeAsset | TokenAsset]]:
        """Yield ``(recipient, amount, asset)`` in plan order."""
        for idx, (recipient, amount) in enumerate(zip(self.recipients, self.amounts)):
            yield recipient, amount, self.asset_for(idx)

    @property
    def required_by_asset(self) -> dict[NativeAsset | TokenAsset, int]:
        """Sum of amounts per asset, keyed in first-seen plan order."""
        totals: dict[NativeAsset | TokenAsset, int] = {}
        for _, amount, asset in self.entries():
            totals[asset] = totals.get(asset, 0) + amount
        return totals

    @property
    def distinct_assets(self) -> list[NativeAsset | TokenAsset]:
        """Every asset the plan references, deduplicated, first-seen order."""
        return list(self.required_by_asset)

    @property
    def required_native(self) -> int:
        return self.required_by_asset.get(NATIVE, 0)

    @property
    def token_assets(self) -> list[TokenAsset]:
        return [a for a in self.distinct_assets if isinstance(a, TokenAsset)]

    def asset_ref_strings(self) -> list[str]:
        """``asset_refs`` as plain strings, as supplied (empty stays empty)."""
        return [a.to_ref() for a in self.asset_refs]
