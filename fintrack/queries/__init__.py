"""Derived-value calculators over accounts, cards and transactions."""

from fintrack.queries.balances import (
    account_balance,
    account_has_transactions,
    category_label,
    credit_card_has_transactions,
    find_category,
    open_invoice_total,
    open_invoices,
    total_active_balance,
)
from fintrack.queries.reports import (
    aggregate_by_category,
    available_years,
    cash_flow,
    compare_periods,
    credit_card_invoice,
    expenses_by_category,
    for_card_period,
    in_month,
    in_year,
    percentage_change,
    previous_month,
    summarize,
)

__all__ = [
    # Balances
    "account_balance",
    "account_has_transactions",
    "category_label",
    "credit_card_has_transactions",
    "find_category",
    "open_invoice_total",
    "open_invoices",
    "total_active_balance",
    # Reports
    "aggregate_by_category",
    "available_years",
    "cash_flow",
    "compare_periods",
    "credit_card_invoice",
    "expenses_by_category",
    "for_card_period",
    "in_month",
    "in_year",
    "percentage_change",
    "previous_month",
    "summarize",
]
