"""Tests for the in-memory asset ledger."""

from __future__ import annotations

import pytest

from batchsettle.core.asset_ledger import InMemoryAssetLedger
from batchsettle.core.errors import (
    DirectFundingRejected,
    InsufficientAllowanceOrBalance,
    InsufficientBalance,
    InsufficientTokenBalance,
)
from batchsettle.models.assets import NATIVE


class TestBalances:
    def test_unknown_holder_has_zero(self, ledger, payer, tokens):
        assert ledger.balance_of(NATIVE, payer) == 0
        assert ledger.balance_of(tokens[0], payer) == 0

    def test_mint_credits(self, ledger, payer, tokens):
        ledger.mint(NATIVE, payer, 100)
        ledger.mint(tokens[0], payer, 7)
        assert ledger.balance_of(NATIVE, payer) == 100
        assert ledger.balances_of(payer) == {NATIVE: 100, tokens[0]: 7}

    def test_mint_negative_rejected(self, ledger, payer):
        with pytest.raises(ValueError):
            ledger.mint(NATIVE, payer, -1)

    @pytest.mark.parametrize("bad", [1.5, True, "3"])
    def test_mint_non_integer_rejected(self, ledger, payer, bad):
        with pytest.raises(ValueError):
            ledger.mint(NATIVE, payer, bad)
        assert ledger.balances_of(payer) == {}

    def test_approve_non_integer_rejected(self, ledger, payer, relayer, tokens):
        with pytest.raises(ValueError):
            ledger.approve(tokens[0], payer, relayer, 2.0)
        assert ledger.allowance(tokens[0], payer, relayer) == 0

    def test_balance_lookup_normalises_case(self, ledger):
        holder = "0x" + "AB" * 20
        ledger.mint(NATIVE, holder, 3)
        assert ledger.balance_of(NATIVE, holder.lower()) == 3


class TestTransfers:
    def test_native_transfer(self, ledger, payer, treasury):
        ledger.mint(NATIVE, payer, 100)
        ledger.transfer_native(payer, treasury, 40)
        assert ledger.balance_of(NATIVE, payer) == 60
        assert ledger.balance_of(NATIVE, treasury) == 40

    def test_native_shortfall(self, ledger, payer, treasury):
        ledger.mint(NATIVE, payer, 10)
        with pytest.raises(InsufficientBalance):
            ledger.transfer_native(payer, treasury, 11)
        assert ledger.balance_of(NATIVE, payer) == 10

    def test_token_shortfall_names_token(self, ledger, payer, treasury, tokens):
        ledger.mint(tokens[0], payer, 5)
        with pytest.raises(InsufficientTokenBalance) as excinfo:
            ledger.transfer_asset(tokens[0], payer, treasury, 6)
        assert excinfo.value.token == tokens[0].address

    def test_generic_transfer_branches_on_tag(self, ledger, payer, treasury, tokens):
        ledger.mint(NATIVE, payer, 5)
        ledger.mint(tokens[0], payer, 5)
        ledger.transfer(NATIVE, payer, treasury, 2)
        ledger.transfer(tokens[0], payer, treasury, 3)
        assert ledger.balance_of(NATIVE, treasury) == 2
        assert ledger.balance_of(tokens[0], treasury) == 3

    def test_float_transfer_rejected(self, ledger, payer, treasury, relayer, tokens):
        ledger.mint(NATIVE, payer, 10)
        ledger.mint(tokens[0], payer, 10)
        ledger.approve(tokens[0], payer, relayer, 10)
        with pytest.raises(ValueError):
            ledger.transfer_native(payer, treasury, 10.0)
        with pytest.raises(ValueError):
            ledger.transfer_asset(tokens[0], payer, treasury, 4.0, spender=relayer)
        assert ledger.balance_of(NATIVE, payer) == 10
        assert type(ledger.balance_of(NATIVE, payer)) is int
        assert ledger.allowance(tokens[0], payer, relayer) == 10

    def test_zero_transfer_is_noop(self, ledger, payer, treasury):
        ledger.transfer_native(payer, treasury, 0)
        assert ledger.balances_of(treasury) == {}


class TestAllowances:
    def test_spend_within_allowance(self, ledger, payer, treasury, relayer, tokens):
        ledger.mint(tokens[0], payer, 100)
        ledger.approve(tokens[0], payer, relayer, 30)
        ledger.transfer_asset(tokens[0], payer, treasury, 20, spender=relayer)
        assert ledger.balance_of(tokens[0], treasury) == 20
        assert ledger.allowance(tokens[0], payer, relayer) == 10

    def test_allowance_shortfall(self, ledger, payer, treasury, relayer, tokens):
        ledger.mint(tokens[0], payer, 100)
        ledger.approve(tokens[0], payer, relayer, 5)
        with pytest.raises(InsufficientAllowanceOrBalance):
            ledger.transfer_asset(tokens[0], payer, treasury, 6, spender=relayer)

    def test_balance_shortfall_with_allowance(self, ledger, payer, treasury, relayer, tokens):
        ledger.mint(tokens[0], payer, 5)
        ledger.approve(tokens[0], payer, relayer, 50)
        with pytest.raises(InsufficientAllowanceOrBalance):
            ledger.transfer_asset(tokens[0], payer, treasury, 6, spender=relayer)
        assert ledger.allowance(tokens[0], payer, relayer) == 50


class TestTransactions:
    def test_failed_transaction_rolls_back(self, ledger, payer, treasury):
        ledger.mint(NATIVE, payer, 10)
        with pytest.raises(InsufficientBalance):
            with ledger.transaction():
                ledger.transfer_native(payer, treasury, 5)
                ledger.transfer_native(payer, treasury, 6)
        assert ledger.balance_of(NATIVE, payer) == 10
        assert ledger.balance_of(NATIVE, treasury) == 0

    def test_successful_transaction_commits(self, ledger, payer, treasury):
        ledger.mint(NATIVE, payer, 10)
        with ledger.transaction():
            ledger.transfer_native(payer, treasury, 5)
        assert ledger.balance_of(NATIVE, treasury) == 5

    def test_rollback_forgets_deployments(self, ledger, payer):
        with pytest.raises(RuntimeError):
            with ledger.transaction():
                address = ledger.deploy(payer)
                raise RuntimeError("abort")
        assert not ledger.is_contract(address)
        assert ledger.deploy(payer) == address


class TestDeploy:
    def test_addresses_are_deterministic(self, payer):
        first, second = InMemoryAssetLedger(), InMemoryAssetLedger()
        assert first.deploy(payer) == second.deploy(payer)

    def test_consecutive_deployments_differ(self, ledger, payer):
        assert ledger.deploy(payer) != ledger.deploy(payer)

    def test_receive_hook_can_reject(self, ledger, payer):
        def reject(sender: str, amount: int) -> None:
            raise DirectFundingRejected()

        contract = ledger.deploy(payer, receive_hook=reject)
        ledger.mint(NATIVE, payer, 10)
        with pytest.raises(DirectFundingRejected):
            ledger.transfer_native(payer, contract, 1)
        assert ledger.balance_of(NATIVE, payer) == 10
