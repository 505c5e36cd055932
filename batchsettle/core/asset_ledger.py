"""Asset ledger: the balance store settlement contracts move value through.

``AssetLedger`` is the protocol the disburser and the escrow depend on.
``InMemoryAssetLedger`` is the reference implementation used by the CLI and
the test-suite.

Transactions
------------
Every public settlement operation runs inside ``ledger.transaction()``.  The
ledger holds one re-entrant lock, so operations against the same ledger are
serialised, and takes a snapshot of balances, allowances and deployed
contracts on entry.  If the body raises, the snapshot is restored before the
exception propagates: a failed call commits nothing.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, Protocol

from batchsettle.core.errors import (
    InsufficientAllowanceOrBalance,
    InsufficientBalance,
    InsufficientTokenBalance,
)
from batchsettle.core.hasher import derive_contract_address
from batchsettle.models.assets import NATIVE, NativeAsset, TokenAsset, normalize_address

logger = logging.getLogger(__name__)

# Called with (sender, amount) before native value lands on a contract.
# Raising rejects the transfer.
ReceiveHook = Callable[[str, int], None]


def _check_amount(amount: Any, action: str) -> None:
    """Amounts are non-negative integers; ``bool`` does not count."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValueError(f"cannot {action} a non-integer amount: {amount!r}")
    if amount < 0:
        raise ValueError(f"cannot {action} a negative amount: {amount}")


class AssetLedger(Protocol):
    """What settlement contracts need from the underlying ledger."""

    def balance_of(self, asset: NativeAsset | TokenAsset, holder: str) -> int: ...

    def transfer(
        self, asset: NativeAsset | TokenAsset, sender: str, to: str, amount: int
    ) -> None: ...

    def transfer_native(self, sender: str, to: str, amount: int) -> None: ...

    def transfer_asset(
        self,
        token: TokenAsset,
        sender: str,
        to: str,
        amount: int,
        *,
        spender: str | None = None,
    ) -> None: ...

    def deploy(self, creator: str, receive_hook: ReceiveHook | None = None) -> str: ...

    def transaction(self) -> Any: ...


class InMemoryAssetLedger:
    """Dictionary-backed ledger with ERC-20 style allowances."""

    def __init__(self) -> None:
        self._balances: dict[NativeAsset | TokenAsset, dict[str, int]] = {}
        self._allowances: dict[tuple[TokenAsset, str, str], int] = {}
        self._contracts: dict[str, ReceiveHook | None] = {}
        self._nonces: dict[str, int] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        return {
            "balances": {asset: dict(book) for asset, book in self._balances.items()},
            "allowances": dict(self._allowances),
            "contracts": dict(self._contracts),
            "nonces": dict(self._nonces),
        }

    def restore(self, snapshot: dict[str, Any]) -> None:
        self._balances = {asset: dict(book) for asset, book in snapshot["balances"].items()}
        self._allowances = dict(snapshot["allowances"])
        self._contracts = dict(snapshot["contracts"])
        self._nonces = dict(snapshot["nonces"])

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Serialise the body against this ledger and roll back on failure."""
        with self._lock:
            saved = self.snapshot()
            try:
                yield
            except BaseException:
                self.restore(saved)
                logger.debug("Ledger transaction rolled back.")
                raise

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def deploy(self, creator: str, receive_hook: ReceiveHook | None = None) -> str:
        """Register a contract account and return its derived address."""
        creator = normalize_address(creator)
        with self._lock:
            nonce = self._nonces.get(creator, 0)
            address = derive_contract_address(creator, nonce)
            while address in self._contracts:
                nonce += 1
                address = derive_contract_address(creator, nonce)
            self._nonces[creator] = nonce + 1
            self._contracts[address] = receive_hook
        logger.debug("Deployed contract %s for %s (nonce %d).", address, creator, nonce)
        return address

    def is_contract(self, address: str) -> bool:
        return normalize_address(address) in self._contracts

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def balance_of(self, asset: NativeAsset | TokenAsset, holder: str) -> int:
        return self._balances.get(asset, {}).get(normalize_address(holder), 0)

    def balances_of(self, holder: str) -> dict[NativeAsset | TokenAsset, int]:
        """Every non-zero balance held by ``holder``."""
        holder = normalize_address(holder)
        return {
            asset: book[holder]
            for asset, book in self._balances.items()
            if book.get(holder, 0)
        }

    def allowance(self, token: TokenAsset, owner: str, spender: str) -> int:
        return self._allowances.get(
            (token, normalize_address(owner), normalize_address(spender)), 0
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def mint(self, asset: NativeAsset | TokenAsset, holder: str, amount: int) -> None:
        """Credit ``amount`` of ``asset`` to ``holder`` out of thin air."""
        _check_amount(amount, "mint")
        holder = normalize_address(holder)
        with self._lock:
            book = self._balances.setdefault(asset, {})
            book[holder] = book.get(holder, 0) + amount

    def approve(self, token: TokenAsset, owner: str, spender: str, amount: int) -> None:
        """Authorise ``spender`` to move up to ``amount`` of ``owner``'s token."""
        _check_amount(amount, "approve")
        with self._lock:
            key = (token, normalize_address(owner), normalize_address(spender))
            self._allowances[key] = amount

    def transfer(
        self, asset: NativeAsset | TokenAsset, sender: str, to: str, amount: int
    ) -> None:
        """Move ``amount`` of ``asset`` held by ``sender`` to ``to``."""
        if isinstance(asset, NativeAsset):
            self.transfer_native(sender, to, amount)
        else:
            self.transfer_asset(asset, sender, to, amount)

    def transfer_native(self, sender: str, to: str, amount: int) -> None:
        _check_amount(amount, "transfer")
        sender, to = normalize_address(sender), normalize_address(to)
        with self._lock:
            hook = self._contracts.get(to)
            if hook is not None:
                hook(sender, amount)
            if self.balance_of(NATIVE, sender) < amount:
                raise InsufficientBalance(
                    f"insufficient balance: {sender} holds "
                    f"{self.balance_of(NATIVE, sender)}, needs {amount}"
                )
            self._move(NATIVE, sender, to, amount)

    def transfer_asset(
        self,
        token: TokenAsset,
        sender: str,
        to: str,
        amount: int,
        *,
        spender: str | None = None,
    ) -> None:
        """Move ``amount`` of ``token`` from ``sender`` to ``to``.

        When ``spender`` is given the move draws down the allowance
        ``sender`` granted to ``spender``, and any shortfall (allowance or
        balance) raises ``InsufficientAllowanceOrBalance``.
        """
        _check_amount(amount, "transfer")
        sender, to = normalize_address(sender), normalize_address(to)
        with self._lock:
            balance = self.balance_of(token, sender)
            if spender is not None:
                key = (token, sender, normalize_address(spender))
                allowed = self._allowances.get(key, 0)
                if allowed < amount or balance < amount:
                    raise InsufficientAllowanceOrBalance(
                        f"insufficient allowance or balance for {token}: "
                        f"allowance {allowed}, balance {balance}, needs {amount}"
                    )
                self._allowances[key] = allowed - amount
            elif balance < amount:
                raise InsufficientTokenBalance(token.address)
            self._move(token, sender, to, amount)

    def _move(
        self, asset: NativeAsset | TokenAsset, sender: str, to: str, amount: int
    ) -> None:
        _check_amount(amount, "transfer")
        if amount == 0:
            return
        book = self._balances.setdefault(asset, {})
        book[sender] = book.get(sender, 0) - amount
        book[to] = book.get(to, 0) + amount
        logger.debug("Moved %d %s from %s to %s.", amount, asset, sender, to)
