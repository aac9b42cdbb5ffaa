"""
Core Entity Models for FinTrack

These models define the strict schemas for the four entity kinds the
system manages (accounts, credit cards, categories, transactions) plus
the signed-in user. They are designed to:
1. Enforce type safety at runtime
2. Be immutable, so every reader observes a stable snapshot
3. Serialize losslessly for the local cache and the remote store
4. Keep the camelCase wire shape via aliases

DESIGN DECISION: A transaction stores its category by NAME, not by id.
This is an explicit denormalization; renames and deletions of categories
are cascaded by the reducer.
"""

import datetime as dt
import random
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class CategoryType(str, Enum):
    """Whether a category classifies money coming in or going out."""
    INCOME = "income"
    EXPENSE = "expense"


class TransactionType(str, Enum):
    """
    Transaction kinds.

    The type selects which owner field is populated:
    income/expense -> account_id, creditCardExpense -> credit_card_id.
    """
    INCOME = "income"
    EXPENSE = "expense"
    CREDIT_CARD_EXPENSE = "creditCardExpense"

    @property
    def uses_account(self) -> bool:
        return self is not TransactionType.CREDIT_CARD_EXPENSE


class Theme(str, Enum):
    """UI theme preference, kept in state so logout can preserve it."""
    LIGHT = "light"
    DARK = "dark"

    def toggled(self) -> "Theme":
        return Theme.DARK if self is Theme.LIGHT else Theme.LIGHT


def new_id() -> str:
    """
    Generate a client-side record id.

    Timestamp plus a random fraction. Ids are opaque unique strings;
    nothing parses them.
    """
    return f"{dt.datetime.now(dt.timezone.utc).isoformat()}{random.random()}"


class EntityModel(BaseModel):
    """Base for all entities: frozen, camelCase aliases, names also accepted."""
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# ENTITIES
# =============================================================================

class User(EntityModel):
    """An authenticated user as returned by the auth boundary."""

    id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1, max_length=254)


class Account(EntityModel):
    """
    A bank account.

    Inactive accounts are hidden from balance totals and from new
    transactions, but transactions already referencing them stay valid.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque unique id"
    )
    bank_name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Bank name"
    )
    account_number: str = Field(
        ...,
        max_length=50,
        description="Account number as the user typed it"
    )
    initial_balance: Decimal = Field(
        default=Decimal("0"),
        description="Balance before any tracked transaction"
    )
    active: bool = Field(
        default=True,
        description="Whether the account counts toward totals"
    )


class CreditCard(EntityModel):
    """A credit card whose charges are settled by invoice payments."""

    id: str = Field(..., min_length=1)
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Card nickname"
    )
    last_four_digits: Optional[str] = Field(
        default=None,
        max_length=4,
        description="Last four digits printed on the card"
    )
    flag: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Card network (Visa, Mastercard, ...)"
    )
    inactive: bool = Field(
        default=False,
        description="Inactive cards are hidden from invoices and new charges"
    )
    invoice_closing_day: Optional[int] = Field(default=None, ge=1, le=31)
    invoice_due_day: Optional[int] = Field(default=None, ge=1, le=31)


class Category(EntityModel):
    """
    A transaction category.

    Default categories are immutable and undeletable; that rule is
    enforced before dispatch, not by the reducer.
    """

    id: str = Field(..., min_length=1)
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name, also the key transactions refer to"
    )
    type: CategoryType
    is_default: bool = Field(default=False)


class Transaction(EntityModel):
    """
    A single income, expense or credit card charge.

    `paid` and `paid_in_invoice_id` only apply to credit card charges and
    record which payment transaction settled them.
    """

    id: str = Field(..., min_length=1)
    account_id: Optional[str] = None
    credit_card_id: Optional[str] = None
    category: str = Field(
        ...,
        description="Category NAME at the time of entry"
    )
    description: str = Field(default="", max_length=500)
    date: dt.date
    amount: Annotated[
        Decimal,
        Field(ge=0, description="Amount, non-negative by convention")
    ]
    type: TransactionType
    paid: Optional[bool] = None
    paid_in_invoice_id: Optional[str] = None

    @model_validator(mode='after')
    def validate_owner(self) -> 'Transaction':
        """Exactly one of account_id / credit_card_id, selected by type."""
        if self.type.uses_account:
            if not self.account_id:
                raise ValueError(f"{self.type.value} transactions require an account_id")
            if self.credit_card_id:
                raise ValueError(f"{self.type.value} transactions cannot have a credit_card_id")
        else:
            if not self.credit_card_id:
                raise ValueError("creditCardExpense transactions require a credit_card_id")
            if self.account_id:
                raise ValueError("creditCardExpense transactions cannot have an account_id")
        return self

    @property
    def is_unpaid_charge(self) -> bool:
        return self.type is TransactionType.CREDIT_CARD_EXPENSE and not self.paid
