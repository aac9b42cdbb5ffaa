"""State package: state shape, actions, reducer and store."""

from fintrack.state.actions import (
    Action,
    AddAccount,
    AddCategory,
    AddCreditCard,
    AddTransaction,
    DeleteAccount,
    DeleteCategory,
    DeleteCreditCard,
    DeleteTransaction,
    Hydrate,
    Login,
    Logout,
    PayInvoice,
    ToggleTheme,
    TransferBetweenAccounts,
    UpdateAccount,
    UpdateCategory,
    UpdateCreditCard,
    UpdateTransaction,
)
from fintrack.state.app_state import AppState, AuthState, initial_state
from fintrack.state.reducer import Reducer, sort_transactions
from fintrack.state.store import StateStore

__all__ = [
    # State
    "AppState",
    "AuthState",
    "initial_state",
    # Actions
    "Action",
    "AddAccount",
    "AddCategory",
    "AddCreditCard",
    "AddTransaction",
    "DeleteAccount",
    "DeleteCategory",
    "DeleteCreditCard",
    "DeleteTransaction",
    "Hydrate",
    "Login",
    "Logout",
    "PayInvoice",
    "ToggleTheme",
    "TransferBetweenAccounts",
    "UpdateAccount",
    "UpdateCategory",
    "UpdateCreditCard",
    "UpdateTransaction",
    # Reducer / store
    "Reducer",
    "StateStore",
    "sort_transactions",
]
