"""Asset identifiers: the base currency or a fungible token.

``Asset`` is a tagged variant discriminated on ``kind``.  Transfer code
branches once on the tag instead of relying on polymorphic dispatch.
"""

from __future__ import annotations

import re
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from batchsettle.core.errors import InvalidAddress

NULL_ADDRESS = "0x" + "0" * 40
NATIVE_REF = "native"

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def normalize_address(value: Any) -> str:
    """Return ``value`` as a lowercase ``0x`` address or raise ``InvalidAddress``."""
    if not isinstance(value, str) or not _ADDRESS_RE.match(value):
        raise InvalidAddress(f"malformed address: {value!r}")
    return value.lower()


class NativeAsset(BaseModel):
    """The ledger's base currency."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["native"] = "native"

    @property
    def is_native(self) -> bool:
        return True

    def to_ref(self) -> str:
        return NATIVE_REF

    def __str__(self) -> str:
        return NATIVE_REF


class TokenAsset(BaseModel):
    """A fungible token identified by its contract address."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["token"] = "token"
    address: str

    @field_validator("address", mode="before")
    @classmethod
    def _check_address(cls, value: Any) -> str:
        address = normalize_address(value)
        if address == NULL_ADDRESS:
            raise InvalidAddress("the null address denotes the native asset, not a token")
        return address

    @property
    def is_native(self) -> bool:
        return False

    def to_ref(self) -> str:
        return self.address

    def __str__(self) -> str:
        return self.address


Asset = Annotated[Union[NativeAsset, TokenAsset], Field(discriminator="kind")]

NATIVE = NativeAsset()

_asset_adapter: TypeAdapter[Asset] = TypeAdapter(Asset)


def parse_asset_ref(ref: Any) -> NativeAsset | TokenAsset:
    """Coerce a caller-supplied asset reference into an ``Asset``.

    ``None``, ``"native"`` and the null address all mean the base currency,
    any other address string names a token.
    """
    if isinstance(ref, (NativeAsset, TokenAsset)):
        return ref
    if ref is None:
        return NATIVE
    if isinstance(ref, dict):
        return _asset_adapter.validate_python(ref)
    if isinstance(ref, str):
        if ref.lower() == NATIVE_REF:
            return NATIVE
        if normalize_address(ref) == NULL_ADDRESS:
            return NATIVE
        return TokenAsset(address=ref)
    raise InvalidAddress(f"unsupported asset reference: {ref!r}")
