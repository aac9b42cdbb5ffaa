"""
Reducer Actions

One frozen model per intent the reducer understands. Actions that
synthesize transactions carry the ids for them, generated when the
action is built, so applying an action is fully deterministic.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from fintrack.models.entities import (
    Account,
    Category,
    CreditCard,
    Transaction,
    User,
    new_id,
)
from fintrack.state.app_state import AppState


class Action(BaseModel):
    """Base for all actions."""
    model_config = ConfigDict(frozen=True)


# Session

class Hydrate(Action):
    """Replace the entire state with a pre-validated snapshot."""
    state: AppState


class Login(Action):
    user: User


class Logout(Action):
    pass


class ToggleTheme(Action):
    pass


# Accounts

class AddAccount(Action):
    account: Account


class UpdateAccount(Action):
    account: Account


class DeleteAccount(Action):
    account_id: str


# Credit cards

class AddCreditCard(Action):
    credit_card: CreditCard


class UpdateCreditCard(Action):
    credit_card: CreditCard


class DeleteCreditCard(Action):
    credit_card_id: str


# Categories

class AddCategory(Action):
    category: Category


class UpdateCategory(Action):
    category: Category


class DeleteCategory(Action):
    """Carries the whole category: the cascade needs its name and type."""
    category: Category


# Transactions

class AddTransaction(Action):
    transaction: Transaction


class UpdateTransaction(Action):
    transaction: Transaction


class DeleteTransaction(Action):
    transaction_id: str


# Compound

class PayInvoice(Action):
    """
    Pay a credit card invoice from a bank account.

    `amount` is what the user typed; it is not reconciled against the
    charges being settled.
    """
    credit_card_id: str
    account_id: str
    amount: Decimal = Field(..., ge=0)
    date: dt.date
    payment_id: str = Field(default_factory=new_id)


class TransferBetweenAccounts(Action):
    """Move money between two accounts as an expense/income pair."""
    from_account_id: str
    to_account_id: str
    amount: Decimal = Field(..., ge=0)
    date: dt.date
    description: str = ""
    expense_id: str = Field(default_factory=new_id)
    income_id: str = Field(default_factory=new_id)
