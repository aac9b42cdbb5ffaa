"""
Application State

The whole in-memory picture of one user's finances plus session flags.
It is a frozen value: every action produces a new AppState, and readers
(calculators, the sync controller) only ever hold snapshots.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from fintrack.models.entities import (
    Account,
    Category,
    CreditCard,
    Theme,
    Transaction,
    User,
)


class AuthState(BaseModel):
    """Who is signed in, if anyone."""
    model_config = ConfigDict(frozen=True)

    is_authenticated: bool = False
    user: Optional[User] = None


class AppState(BaseModel):
    """
    Root state value.

    The four entity collections are tuples so a snapshot can never be
    mutated in place.
    """
    model_config = ConfigDict(frozen=True)

    accounts: tuple[Account, ...] = ()
    credit_cards: tuple[CreditCard, ...] = ()
    transactions: tuple[Transaction, ...] = ()
    categories: tuple[Category, ...] = ()
    auth: AuthState = Field(default_factory=AuthState)
    theme: Theme = Theme.LIGHT

    @property
    def user_id(self) -> Optional[str]:
        if self.auth.is_authenticated and self.auth.user:
            return self.auth.user.id
        return None

    def domain_changed(self, other: "AppState") -> bool:
        """True when any entity collection differs from `other`."""
        return (
            self.accounts != other.accounts
            or self.credit_cards != other.credit_cards
            or self.transactions != other.transactions
            or self.categories != other.categories
        )

    def counts(self) -> dict[str, int]:
        return {
            "accounts": len(self.accounts),
            "credit_cards": len(self.credit_cards),
            "transactions": len(self.transactions),
            "categories": len(self.categories),
        }


def initial_state(theme: Theme = Theme.LIGHT) -> AppState:
    """Empty domain collections, signed out."""
    return AppState(theme=theme)
