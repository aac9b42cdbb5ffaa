"""
Balance Calculators

DESIGN DECISION: Balances are DERIVED, never stored.
Every call recomputes from the account's initial balance and the
transaction log, so there is nothing to invalidate when a
transaction is edited or deleted.
"""

from decimal import Decimal
from typing import Iterable, Optional, Sequence

from fintrack.models.entities import (
    Account,
    Category,
    CategoryType,
    CreditCard,
    Transaction,
    TransactionType,
)
from fintrack.models.catalog import CategoryCatalog
from fintrack.models.reports import OpenInvoice

ZERO = Decimal("0")


def _sum(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), ZERO)


def account_balance(account: Account, transactions: Iterable[Transaction]) -> Decimal:
    """
    Current balance of one account.

    initial_balance + income - expense, counting only income/expense
    transactions on this account. A NaN result (corrupt initial balance)
    is reported as zero.
    """
    income = ZERO
    expense = ZERO
    for t in transactions:
        if t.account_id != account.id:
            continue
        if t.type is TransactionType.INCOME:
            income += t.amount
        elif t.type is TransactionType.EXPENSE:
            expense += t.amount

    balance = Decimal(account.initial_balance) + income - expense
    if balance.is_nan():
        return ZERO
    return balance


def total_active_balance(
    accounts: Iterable[Account],
    transactions: Sequence[Transaction],
) -> Decimal:
    """Sum of current balances of active accounts only."""
    return sum(
        (account_balance(account, transactions) for account in accounts if account.active),
        ZERO,
    )


def open_invoice_total(card: CreditCard, transactions: Iterable[Transaction]) -> Decimal:
    """Total of this card's charges not yet settled by a payment."""
    return _sum(
        t for t in transactions
        if t.credit_card_id == card.id and t.is_unpaid_charge
    )


def open_invoices(
    cards: Iterable[CreditCard],
    transactions: Sequence[Transaction],
) -> list[OpenInvoice]:
    """
    Active cards with something to pay.

    Cards with nothing open are left out here; management views list
    all cards regardless.
    """
    invoices = []
    for card in cards:
        if card.inactive:
            continue
        total_due = open_invoice_total(card, transactions)
        if total_due > 0:
            invoices.append(OpenInvoice(card=card, total_due=total_due))
    return invoices


def account_has_transactions(account_id: str, transactions: Iterable[Transaction]) -> bool:
    return any(t.account_id == account_id for t in transactions)


def credit_card_has_transactions(card_id: str, transactions: Iterable[Transaction]) -> bool:
    return any(t.credit_card_id == card_id for t in transactions)


def find_category(
    transaction: Transaction,
    categories: Iterable[Category],
) -> Optional[Category]:
    """The category a transaction is filed under, matched by name and type."""
    wanted = (
        CategoryType.INCOME
        if transaction.type is TransactionType.INCOME
        else CategoryType.EXPENSE
    )
    for category in categories:
        if category.name == transaction.category and category.type is wanted:
            return category
    return None


def category_label(
    transaction: Transaction,
    categories: Iterable[Category],
    catalog: Optional[CategoryCatalog] = None,
) -> str:
    """
    Display name for a transaction's category.

    Orphaned names (no matching category) still display as stored;
    only an empty name falls back to the catalog's placeholder.
    """
    category = find_category(transaction, categories)
    if category is not None:
        return category.name
    if transaction.category:
        return transaction.category
    return catalog.uncategorized if catalog else "Uncategorized"
