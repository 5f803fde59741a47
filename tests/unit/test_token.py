"""Тесты для InMemoryToken (value-transfer capability)."""

import pytest

from src.core.domain.units import ZERO_ADDRESS, derive_address
from src.core.errors import InsufficientBalance, InvalidAddress
from src.ledger.journal import Journal
from src.ledger.token import InMemoryToken

ALICE = derive_address("alice")
BOB = derive_address("bob")


@pytest.fixture
def journal():
    return Journal()


@pytest.fixture
def token(journal):
    token = InMemoryToken(journal, "USDC")
    token.mint(ALICE, 1_000)
    return token


def test_address_derived_from_symbol(journal):
    assert InMemoryToken(journal, "WETH").address == derive_address("token:WETH")


def test_explicit_address(journal):
    address = derive_address("custom")
    assert InMemoryToken(journal, "X", address=address).address == address


def test_mint_and_balance(token):
    assert token.balance_of(ALICE) == 1_000
    assert token.balance_of(BOB) == 0


def test_transfer_moves_balance(token):
    assert token.transfer(ALICE, BOB, 400) is True

    assert token.balance_of(ALICE) == 600
    assert token.balance_of(BOB) == 400


def test_transfer_insufficient_balance(token):
    with pytest.raises(InsufficientBalance) as exc_info:
        token.transfer(ALICE, BOB, 1_001)

    assert exc_info.value.balance == 1_000
    assert exc_info.value.amount == 1_001
    assert token.balance_of(ALICE) == 1_000


def test_transfer_to_zero_address_rejected(token):
    with pytest.raises(InvalidAddress):
        token.transfer(ALICE, ZERO_ADDRESS, 1)


def test_transfer_negative_amount_rejected(token):
    with pytest.raises(ValueError):
        token.transfer(ALICE, BOB, -1)


def test_transfer_rolled_back_by_journal(journal, token):
    with pytest.raises(RuntimeError):
        with journal.atomic():
            token.transfer(ALICE, BOB, 250)
            raise RuntimeError("revert")

    assert token.balance_of(ALICE) == 1_000
    assert token.balance_of(BOB) == 0
