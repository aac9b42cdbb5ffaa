"""
State Reducer

DESIGN DECISION: All mutation rules live in one pure function,
reduce(state, action) -> state. No I/O, no clock, no randomness:
given the same inputs it always returns the same state.

The reducer trusts its caller. Referential-integrity checks (deleting
an account with transactions, editing a default category, transferring
to the same account) are pre-dispatch guards in fintrack.validation.

RULES THE REDUCER OWNS:
1. Transactions are sorted newest-first after every transaction change
2. A category rename rewrites matching transactions in the same step
3. A category deletion moves its transactions to the fallback category
4. Logout clears everything except the theme
"""

from typing import Callable, Iterable, TypeVar

from fintrack.models.catalog import ENGLISH_CATALOG, CategoryCatalog
from fintrack.models.entities import Transaction, TransactionType
from fintrack.state import actions as a
from fintrack.state.app_state import AppState, AuthState, initial_state

T = TypeVar("T")


def sort_transactions(transactions: Iterable[Transaction]) -> tuple[Transaction, ...]:
    """
    Sort newest-first.

    sorted() is stable with reverse=True, so equal dates keep their
    relative order.
    """
    return tuple(sorted(transactions, key=lambda t: t.date, reverse=True))


def upsert(items: tuple[T, ...], record: T, prepend: bool = False) -> tuple[T, ...]:
    """Replace the item with record's id, or add record if absent."""
    if any(item.id == record.id for item in items):
        return tuple(record if item.id == record.id else item for item in items)
    if prepend:
        return (record,) + items
    return items + (record,)


def remove(items: tuple[T, ...], record_id: str) -> tuple[T, ...]:
    return tuple(item for item in items if item.id != record_id)


def rename_category(
    transactions: tuple[Transaction, ...],
    old_name: str,
    new_name: str,
) -> tuple[Transaction, ...]:
    """Point every transaction filed under old_name to new_name."""
    return tuple(
        t.model_copy(update={"category": new_name}) if t.category == old_name else t
        for t in transactions
    )


class Reducer:
    """
    Pure state transition function.

    Constructed with the category catalog that names the fallback,
    invoice payment and transfer categories. Unknown actions leave the
    state unchanged.
    """

    def __init__(self, catalog: CategoryCatalog = ENGLISH_CATALOG):
        self._catalog = catalog
        self._handlers: dict[type, Callable[[AppState, a.Action], AppState]] = {
            a.Hydrate: self._hydrate,
            a.Login: self._login,
            a.Logout: self._logout,
            a.ToggleTheme: self._toggle_theme,
            a.AddAccount: self._add_account,
            a.UpdateAccount: self._update_account,
            a.DeleteAccount: self._delete_account,
            a.AddCreditCard: self._add_credit_card,
            a.UpdateCreditCard: self._update_credit_card,
            a.DeleteCreditCard: self._delete_credit_card,
            a.AddCategory: self._add_category,
            a.UpdateCategory: self._update_category,
            a.DeleteCategory: self._delete_category,
            a.AddTransaction: self._add_transaction,
            a.UpdateTransaction: self._update_transaction,
            a.DeleteTransaction: self._delete_transaction,
            a.PayInvoice: self._pay_invoice,
            a.TransferBetweenAccounts: self._transfer,
        }

    @property
    def catalog(self) -> CategoryCatalog:
        return self._catalog

    def reduce(self, state: AppState, action: a.Action) -> AppState:
        handler = self._handlers.get(type(action))
        if handler is None:
            return state
        return handler(state, action)

    __call__ = reduce

    # Session

    def _hydrate(self, state: AppState, action: a.Hydrate) -> AppState:
        snapshot = action.state
        return snapshot.model_copy(
            update={"transactions": sort_transactions(snapshot.transactions)}
        )

    def _login(self, state: AppState, action: a.Login) -> AppState:
        return state.model_copy(
            update={"auth": AuthState(is_authenticated=True, user=action.user)}
        )

    def _logout(self, state: AppState, action: a.Logout) -> AppState:
        return initial_state(theme=state.theme)

    def _toggle_theme(self, state: AppState, action: a.ToggleTheme) -> AppState:
        return state.model_copy(update={"theme": state.theme.toggled()})

    # Accounts

    def _add_account(self, state: AppState, action: a.AddAccount) -> AppState:
        return state.model_copy(update={"accounts": upsert(state.accounts, action.account)})

    def _update_account(self, state: AppState, action: a.UpdateAccount) -> AppState:
        return state.model_copy(update={"accounts": upsert(state.accounts, action.account)})

    def _delete_account(self, state: AppState, action: a.DeleteAccount) -> AppState:
        return state.model_copy(update={"accounts": remove(state.accounts, action.account_id)})

    # Credit cards

    def _add_credit_card(self, state: AppState, action: a.AddCreditCard) -> AppState:
        return state.model_copy(
            update={"credit_cards": upsert(state.credit_cards, action.credit_card)}
        )

    def _update_credit_card(self, state: AppState, action: a.UpdateCreditCard) -> AppState:
        return state.model_copy(
            update={"credit_cards": upsert(state.credit_cards, action.credit_card)}
        )

    def _delete_credit_card(self, state: AppState, action: a.DeleteCreditCard) -> AppState:
        return state.model_copy(
            update={"credit_cards": remove(state.credit_cards, action.credit_card_id)}
        )

    # Categories

    def _add_category(self, state: AppState, action: a.AddCategory) -> AppState:
        return state.model_copy(update={"categories": upsert(state.categories, action.category)})

    def _update_category(self, state: AppState, action: a.UpdateCategory) -> AppState:
        new_category = action.category
        old_category = next((c for c in state.categories if c.id == new_category.id), None)
        categories = upsert(state.categories, new_category)

        if old_category is None or old_category.name == new_category.name:
            return state.model_copy(update={"categories": categories})

        return state.model_copy(update={
            "categories": categories,
            "transactions": rename_category(
                state.transactions, old_category.name, new_category.name
            ),
        })

    def _delete_category(self, state: AppState, action: a.DeleteCategory) -> AppState:
        deleted = action.category
        fallback = self._catalog.fallback_for(deleted.type)
        return state.model_copy(update={
            "categories": remove(state.categories, deleted.id),
            "transactions": rename_category(state.transactions, deleted.name, fallback),
        })

    # Transactions

    def _add_transaction(self, state: AppState, action: a.AddTransaction) -> AppState:
        transactions = upsert(state.transactions, action.transaction, prepend=True)
        return state.model_copy(update={"transactions": sort_transactions(transactions)})

    def _update_transaction(self, state: AppState, action: a.UpdateTransaction) -> AppState:
        transactions = upsert(state.transactions, action.transaction, prepend=True)
        return state.model_copy(update={"transactions": sort_transactions(transactions)})

    def _delete_transaction(self, state: AppState, action: a.DeleteTransaction) -> AppState:
        # paid_in_invoice_id pointers to the removed id are left as they are
        return state.model_copy(
            update={"transactions": remove(state.transactions, action.transaction_id)}
        )

    # Compound

    def _pay_invoice(self, state: AppState, action: a.PayInvoice) -> AppState:
        card = next((c for c in state.credit_cards if c.id == action.credit_card_id), None)
        if card is None:
            return state

        payment = Transaction(
            id=action.payment_id,
            account_id=action.account_id,
            category=self._catalog.invoice_payment,
            description=self._catalog.describe_invoice_payment(card.name),
            date=action.date,
            amount=action.amount,
            type=TransactionType.EXPENSE,
        )

        # Every open charge is settled, whatever the paid amount
        settled = tuple(
            t.model_copy(update={"paid": True, "paid_in_invoice_id": payment.id})
            if t.credit_card_id == card.id and t.is_unpaid_charge
            else t
            for t in state.transactions
        )

        return state.model_copy(
            update={"transactions": sort_transactions((payment,) + settled)}
        )

    def _transfer(self, state: AppState, action: a.TransferBetweenAccounts) -> AppState:
        description = action.description.strip() or self._catalog.transfer_description

        outgoing = Transaction(
            id=action.expense_id,
            account_id=action.from_account_id,
            category=self._catalog.transfer,
            description=description,
            date=action.date,
            amount=action.amount,
            type=TransactionType.EXPENSE,
        )
        incoming = Transaction(
            id=action.income_id,
            account_id=action.to_account_id,
            category=self._catalog.transfer,
            description=description,
            date=action.date,
            amount=action.amount,
            type=TransactionType.INCOME,
        )

        return state.model_copy(update={
            "transactions": sort_transactions((outgoing, incoming) + state.transactions)
        })
