"""
Shared fixtures for FinTrack tests.

Test strategy:
1. Unit tests for pure pieces (models, reducer, calculators, validators)
2. Async tests for the sync controller and the facade against the
   in-memory remote store
3. No real API calls in tests
"""

from datetime import date
from decimal import Decimal
from typing import Optional

import pytest

from fintrack.models import (
    Account,
    Category,
    CategoryType,
    CreditCard,
    Transaction,
    TransactionType,
    User,
)
from fintrack.models.catalog import ENGLISH_CATALOG
from fintrack.services.auth import InMemoryUserStore, PasswordAuthService
from fintrack.services.cache import LocalCache
from fintrack.services.storage import create_memory_store
from fintrack.state import AppState, AuthState, Reducer, StateStore


def make_account(
    account_id: str = "acc-1",
    initial_balance: str = "0",
    active: bool = True,
    bank_name: str = "Test Bank",
) -> Account:
    return Account(
        id=account_id,
        bank_name=bank_name,
        account_number="0001-2",
        initial_balance=Decimal(initial_balance),
        active=active,
    )


def make_card(card_id: str = "card-1", name: str = "Gold", inactive: bool = False) -> CreditCard:
    return CreditCard(id=card_id, name=name, flag="Visa", inactive=inactive)


def make_category(
    category_id: str = "cat-1",
    name: str = "Groceries",
    category_type: CategoryType = CategoryType.EXPENSE,
    is_default: bool = False,
) -> Category:
    return Category(id=category_id, name=name, type=category_type, is_default=is_default)


def make_tx(
    tx_id: str,
    amount: str = "10",
    on: date = date(2024, 5, 10),
    tx_type: TransactionType = TransactionType.EXPENSE,
    account_id: Optional[str] = "acc-1",
    card_id: Optional[str] = None,
    category: str = "Groceries",
    paid: Optional[bool] = None,
) -> Transaction:
    if tx_type is TransactionType.CREDIT_CARD_EXPENSE:
        account_id = None
        card_id = card_id or "card-1"
    return Transaction(
        id=tx_id,
        account_id=account_id,
        credit_card_id=card_id,
        category=category,
        description=f"tx {tx_id}",
        date=on,
        amount=Decimal(amount),
        type=tx_type,
        paid=paid,
    )


USER = User(id="user-1", email="ana@example.com")


@pytest.fixture
def reducer() -> Reducer:
    return Reducer(ENGLISH_CATALOG)


@pytest.fixture
def seeded_state() -> AppState:
    """Two accounts, one card, one custom category, signed in."""
    return AppState(
        accounts=(make_account("acc-1", "1000"), make_account("acc-2", "500")),
        credit_cards=(make_card(),),
        categories=(make_category(),),
        auth=AuthState(is_authenticated=True, user=USER),
    )


@pytest.fixture
def cache() -> LocalCache:
    return LocalCache()


@pytest.fixture
def remote():
    return create_memory_store()


@pytest.fixture
def users() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def auth(users, cache) -> PasswordAuthService:
    return PasswordAuthService(users, cache)


@pytest.fixture
def store(reducer) -> StateStore:
    return StateStore(reducer)
