"""
Report Calculators

Aggregations behind the reports screen: expenses by category, monthly
cash flow, month-over-month comparison and per-card invoices.

Months are 1-12 throughout.
"""

import datetime as dt
from collections import defaultdict
from decimal import Decimal
from typing import Callable, Iterable, Optional, Sequence

from fintrack.models.entities import CreditCard, Transaction, TransactionType
from fintrack.models.reports import (
    CategoryTotal,
    InvoiceReport,
    MetricComparison,
    PeriodComparison,
    PeriodSummary,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

TransactionFilter = Callable[[Transaction], bool]


# =============================================================================
# FILTERS
# =============================================================================

def in_month(year: int, month: int) -> TransactionFilter:
    return lambda t: t.date.year == year and t.date.month == month


def in_year(year: int) -> TransactionFilter:
    return lambda t: t.date.year == year


def for_card_period(card_id: str, year: int, month: int) -> TransactionFilter:
    """Charges of one card dated in the given month."""
    return lambda t: (
        t.credit_card_id == card_id
        and t.type is TransactionType.CREDIT_CARD_EXPENSE
        and t.date.year == year
        and t.date.month == month
    )


def expenses_only(t: Transaction) -> bool:
    return t.type is TransactionType.EXPENSE


def _all(*predicates: TransactionFilter) -> TransactionFilter:
    return lambda t: all(p(t) for p in predicates)


# =============================================================================
# AGGREGATIONS
# =============================================================================

def aggregate_by_category(
    transactions: Iterable[Transaction],
    predicate: Optional[TransactionFilter] = None,
) -> list[CategoryTotal]:
    """
    Group by category name and sum amounts.

    Returns (label, value) pairs, largest first. Ties keep the order in
    which the categories were first seen.
    """
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for t in transactions:
        if predicate is None or predicate(t):
            totals[t.category] += t.amount

    return sorted(
        (CategoryTotal(label=label, value=value) for label, value in totals.items()),
        key=lambda item: item.value,
        reverse=True,
    )


def expenses_by_category(
    transactions: Iterable[Transaction],
    year: int,
    month: Optional[int] = None,
) -> list[CategoryTotal]:
    """Expense breakdown for a month, or for the whole year when month is None."""
    period = in_year(year) if month is None else in_month(year, month)
    return aggregate_by_category(transactions, _all(expenses_only, period))


def summarize(transactions: Iterable[Transaction]) -> PeriodSummary:
    """Income, expense and net flow. Card charges are not cash flow."""
    income = ZERO
    expense = ZERO
    for t in transactions:
        if t.type is TransactionType.INCOME:
            income += t.amount
        elif t.type is TransactionType.EXPENSE:
            expense += t.amount
    return PeriodSummary(income=income, expense=expense, net_flow=income - expense)


def cash_flow(transactions: Iterable[Transaction], year: int, month: int) -> PeriodSummary:
    period = in_month(year, month)
    return summarize(t for t in transactions if period(t))


# =============================================================================
# PERIOD COMPARISON
# =============================================================================

def previous_month(year: int, month: int) -> tuple[int, int]:
    """The month before (year, month), rolling January back to December."""
    if month == 1:
        return year - 1, 12
    return year, month - 1


def percentage_change(current: Decimal, previous: Decimal) -> Decimal:
    """
    Change from previous to current, in percent of |previous|.

    With previous == 0 there is no base: any move counts as +/-100%,
    and no move as 0%.
    """
    current = Decimal(current)
    previous = Decimal(previous)
    delta = current - previous

    if previous != 0:
        return delta / abs(previous) * HUNDRED
    if current == 0:
        return ZERO
    if delta > 0:
        return HUNDRED
    if delta < 0:
        return -HUNDRED
    return ZERO


def _compare(current: Decimal, previous: Decimal) -> MetricComparison:
    return MetricComparison(
        current=current,
        previous=previous,
        delta=current - previous,
        percentage_change=percentage_change(current, previous),
    )


def compare_periods(
    transactions: Sequence[Transaction],
    year: int,
    month: int,
) -> PeriodComparison:
    """Compare a month's income, expense and net flow with the month before."""
    prev_year, prev_month = previous_month(year, month)

    current = cash_flow(transactions, year, month)
    previous = cash_flow(transactions, prev_year, prev_month)

    return PeriodComparison(
        year=year,
        month=month,
        previous_year=prev_year,
        previous_month=prev_month,
        current=current,
        previous=previous,
        income=_compare(current.income, previous.income),
        expense=_compare(current.expense, previous.expense),
        net_flow=_compare(current.net_flow, previous.net_flow),
    )


# =============================================================================
# CREDIT CARD INVOICE
# =============================================================================

def credit_card_invoice(
    card: CreditCard,
    transactions: Iterable[Transaction],
    year: int,
    month: int,
) -> InvoiceReport:
    """Charges of a card in one month, with paid/unpaid totals and categories."""
    period = for_card_period(card.id, year, month)
    charges = tuple(t for t in transactions if period(t))

    total_paid = sum((t.amount for t in charges if t.paid), ZERO)
    total_unpaid = sum((t.amount for t in charges if not t.paid), ZERO)

    return InvoiceReport(
        card=card,
        year=year,
        month=month,
        transactions=charges,
        total=total_paid + total_unpaid,
        total_paid=total_paid,
        total_unpaid=total_unpaid,
        by_category=tuple(aggregate_by_category(charges)),
    )


def available_years(
    transactions: Iterable[Transaction],
    today: Optional[dt.date] = None,
) -> list[int]:
    """Years that have transactions, newest first; the current year if none."""
    years = sorted({t.date.year for t in transactions}, reverse=True)
    if years:
        return years
    return [(today or dt.date.today()).year]
