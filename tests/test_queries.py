"""Tests for balance and report calculators."""

from datetime import date
from decimal import Decimal

import pytest

from conftest import make_account, make_card, make_category, make_tx
from fintrack.models import ENGLISH_CATALOG, TransactionType
from fintrack.queries import (
    account_balance,
    aggregate_by_category,
    available_years,
    category_label,
    compare_periods,
    credit_card_invoice,
    expenses_by_category,
    for_card_period,
    in_month,
    open_invoice_total,
    open_invoices,
    percentage_change,
    previous_month,
    total_active_balance,
)

INCOME = TransactionType.INCOME
EXPENSE = TransactionType.EXPENSE
CHARGE = TransactionType.CREDIT_CARD_EXPENSE


class TestBalances:
    """Tests for account balances."""

    def test_initial_plus_income_minus_expense(self):
        """Test balance arithmetic on one account."""
        account = make_account("acc-1", "100")
        txs = [
            make_tx("t1", "50", tx_type=INCOME),
            make_tx("t2", "30", tx_type=EXPENSE),
        ]
        assert account_balance(account, txs) == Decimal("120")

    def test_adding_income_increases_by_amount(self):
        """Test an income of X raises the balance by exactly X."""
        account = make_account("acc-1", "100")
        txs = [make_tx("t1", "30")]
        before = account_balance(account, txs)
        after = account_balance(account, txs + [make_tx("t2", "12.34", tx_type=INCOME)])
        assert after - before == Decimal("12.34")

    def test_other_accounts_and_charges_ignored(self):
        """Test unrelated-account transactions and card charges never count."""
        account = make_account("acc-1", "100")
        txs = [
            make_tx("t1", "999", account_id="acc-2"),
            make_tx("t2", "999", tx_type=CHARGE),
        ]
        assert account_balance(account, txs) == Decimal("100")

    def test_nan_balance_clamps_to_zero(self):
        """Test a corrupt initial balance reports zero instead of NaN."""
        account = make_account("acc-1").model_copy(
            update={"initial_balance": Decimal("NaN")}
        )
        assert account_balance(account, []) == Decimal("0")

    def test_total_skips_inactive(self):
        """Test only active accounts count toward the total."""
        accounts = [
            make_account("acc-1", "100"),
            make_account("acc-2", "500", active=False),
        ]
        txs = [make_tx("t1", "20", account_id="acc-2", tx_type=INCOME)]
        assert total_active_balance(accounts, txs) == Decimal("100")


class TestInvoices:
    """Tests for open invoice totals."""

    def test_open_total_counts_unpaid_only(self):
        """Test paid charges drop out of the open total."""
        card = make_card()
        txs = [
            make_tx("k1", "10", tx_type=CHARGE, paid=False),
            make_tx("k2", "20", tx_type=CHARGE),
            make_tx("k3", "40", tx_type=CHARGE, paid=True),
        ]
        assert open_invoice_total(card, txs) == Decimal("30")

    def test_open_invoices_skip_zero_and_inactive(self):
        """Test cards with nothing open and inactive cards are excluded."""
        cards = [
            make_card("card-1"),
            make_card("card-2"),
            make_card("card-3", inactive=True),
        ]
        txs = [
            make_tx("k1", "10", tx_type=CHARGE, card_id="card-1"),
            make_tx("k2", "10", tx_type=CHARGE, card_id="card-3"),
        ]
        invoices = open_invoices(cards, txs)
        assert [i.card.id for i in invoices] == ["card-1"]
        assert invoices[0].total_due == Decimal("10")

    def test_credit_card_invoice_for_month(self):
        """Test a monthly invoice splits paid and unpaid charges."""
        card = make_card()
        txs = [
            make_tx("k1", "10", on=date(2024, 5, 2), tx_type=CHARGE, paid=True, category="Food"),
            make_tx("k2", "25", on=date(2024, 5, 9), tx_type=CHARGE, category="Fuel"),
            make_tx("k3", "99", on=date(2024, 6, 1), tx_type=CHARGE),
        ]
        report = credit_card_invoice(card, txs, 2024, 5)
        assert [t.id for t in report.transactions] == ["k1", "k2"]
        assert report.total == Decimal("35")
        assert report.total_paid == Decimal("10")
        assert report.total_unpaid == Decimal("25")
        assert report.by_category[0].label == "Fuel"


class TestAggregation:
    """Tests for category aggregation."""

    def test_groups_and_sorts_descending(self):
        """Test totals per category, largest first."""
        txs = [
            make_tx("t1", "10", category="Food"),
            make_tx("t2", "50", category="Rent"),
            make_tx("t3", "15", category="Food"),
        ]
        totals = aggregate_by_category(txs)
        assert [(t.label, t.value) for t in totals] == [
            ("Rent", Decimal("50")),
            ("Food", Decimal("25")),
        ]

    def test_predicate_filters(self):
        """Test a month filter limits what is aggregated."""
        txs = [
            make_tx("t1", "10", on=date(2024, 5, 1), category="Food"),
            make_tx("t2", "50", on=date(2024, 6, 1), category="Food"),
        ]
        totals = aggregate_by_category(txs, in_month(2024, 5))
        assert totals[0].value == Decimal("10")

    def test_card_period_filter(self):
        """Test the card+period filter only matches that card's charges."""
        predicate = for_card_period("card-1", 2024, 5)
        assert predicate(make_tx("k1", tx_type=CHARGE)) is True
        assert predicate(make_tx("k2", tx_type=CHARGE, card_id="card-2")) is False
        assert predicate(make_tx("t1")) is False

    def test_expenses_by_category_year(self):
        """Test the yearly breakdown counts expenses only."""
        txs = [
            make_tx("t1", "10", on=date(2024, 1, 1), category="Food"),
            make_tx("t2", "20", on=date(2024, 9, 1), category="Food"),
            make_tx("t3", "70", on=date(2024, 9, 1), tx_type=INCOME, category="Salary"),
            make_tx("t4", "5", on=date(2023, 9, 1), category="Food"),
        ]
        totals = expenses_by_category(txs, 2024)
        assert [(t.label, t.value) for t in totals] == [("Food", Decimal("30"))]


class TestPeriodComparison:
    """Tests for month-over-month comparison."""

    @pytest.mark.parametrize(
        "current, previous, expected",
        [
            ("50", "0", "100"),
            ("0", "0", "0"),
            ("80", "100", "-20"),
            ("-30", "0", "-100"),
            ("50", "-100", "150"),
        ],
    )
    def test_percentage_change(self, current, previous, expected):
        """Test percentage change including the previous = 0 rule."""
        assert percentage_change(Decimal(current), Decimal(previous)) == Decimal(expected)

    def test_previous_month_rolls_over(self):
        """Test January compares against December of the year before."""
        assert previous_month(2024, 1) == (2023, 12)
        assert previous_month(2024, 7) == (2024, 6)

    def test_compare_periods(self):
        """Test income, expense and net flow deltas across a year boundary."""
        txs = [
            make_tx("t1", "100", on=date(2023, 12, 5), tx_type=INCOME),
            make_tx("t2", "40", on=date(2023, 12, 6)),
            make_tx("t3", "80", on=date(2024, 1, 5), tx_type=INCOME),
            make_tx("t4", "40", on=date(2024, 1, 6)),
        ]
        comparison = compare_periods(txs, 2024, 1)
        assert (comparison.previous_year, comparison.previous_month) == (2023, 12)
        assert comparison.income.delta == Decimal("-20")
        assert comparison.income.percentage_change == Decimal("-20")
        assert comparison.expense.has_changed is False
        assert comparison.net_flow.current == Decimal("40")
        assert comparison.net_flow.previous == Decimal("60")


class TestLabelsAndYears:
    """Tests for display helpers."""

    def test_orphan_category_keeps_stored_name(self):
        """Test a name with no matching category still displays."""
        tx = make_tx("t1", category="Gone")
        assert category_label(tx, [make_category()], ENGLISH_CATALOG) == "Gone"

    def test_empty_category_uses_placeholder(self):
        """Test an empty category name shows the catalog placeholder."""
        tx = make_tx("t1", category="")
        assert category_label(tx, [], ENGLISH_CATALOG) == "Uncategorized"

    def test_available_years(self):
        """Test distinct years newest first, current year when empty."""
        txs = [
            make_tx("t1", on=date(2022, 1, 1)),
            make_tx("t2", on=date(2024, 1, 1)),
            make_tx("t3", on=date(2024, 5, 1)),
        ]
        assert available_years(txs) == [2024, 2022]
        assert available_years([], today=date(2030, 1, 1)) == [2030]
