"""Tests for the state reducer and its cascades."""

import random
from datetime import date, timedelta
from decimal import Decimal

import pytest

from conftest import USER, make_account, make_category, make_tx
from fintrack.models import CategoryType, Theme, TransactionType
from fintrack.models.catalog import PORTUGUESE_CATALOG
from fintrack.queries import account_balance
from fintrack.state import (
    Action,
    AddAccount,
    AddCategory,
    AddTransaction,
    AppState,
    DeleteAccount,
    DeleteCategory,
    DeleteTransaction,
    Hydrate,
    Login,
    Logout,
    PayInvoice,
    Reducer,
    ToggleTheme,
    TransferBetweenAccounts,
    UpdateAccount,
    UpdateCategory,
    UpdateTransaction,
    initial_state,
)


def _is_sorted_newest_first(state: AppState) -> bool:
    dates = [t.date for t in state.transactions]
    return all(a >= b for a, b in zip(dates, dates[1:]))


class TestSession:
    """Tests for hydrate, login, logout and theme."""

    def test_unknown_action_is_noop(self, reducer, seeded_state):
        """Test an action without a handler returns the same state."""
        class Unknown(Action):
            pass

        assert reducer(seeded_state, Unknown()) is seeded_state

    def test_hydrate_replaces_without_merge(self, reducer, seeded_state):
        """Test Hydrate with zero accounts erases existing accounts."""
        snapshot = AppState(categories=(make_category("c9", "Rent"),))
        new_state = reducer(seeded_state, Hydrate(state=snapshot))
        assert new_state.accounts == ()
        assert new_state.credit_cards == ()
        assert [c.id for c in new_state.categories] == ["c9"]
        assert new_state.auth.is_authenticated is False

    def test_hydrate_sorts_transactions(self, reducer):
        """Test hydrated transactions come out newest-first."""
        snapshot = AppState(transactions=(
            make_tx("old", on=date(2024, 1, 1)),
            make_tx("new", on=date(2024, 3, 1)),
        ))
        new_state = reducer(initial_state(), Hydrate(state=snapshot))
        assert [t.id for t in new_state.transactions] == ["new", "old"]

    def test_login_sets_auth(self, reducer):
        """Test Login marks the state authenticated."""
        new_state = reducer(initial_state(), Login(user=USER))
        assert new_state.auth.is_authenticated is True
        assert new_state.user_id == "user-1"

    def test_logout_preserves_theme(self, reducer, seeded_state):
        """Test toggling to dark then logging out keeps dark and clears data."""
        state = reducer(seeded_state, ToggleTheme())
        assert state.theme is Theme.DARK

        state = reducer(state, Logout())
        assert state.theme is Theme.DARK
        assert state.accounts == ()
        assert state.credit_cards == ()
        assert state.transactions == ()
        assert state.categories == ()
        assert state.auth.is_authenticated is False

    def test_toggle_theme_leaves_data(self, reducer, seeded_state):
        """Test ToggleTheme does not touch domain collections."""
        state = reducer(seeded_state, ToggleTheme())
        assert state.accounts == seeded_state.accounts
        assert not state.domain_changed(seeded_state)


class TestEntityCrud:
    """Tests for plain add/update/delete of accounts and categories."""

    def test_add_account_appends(self, reducer, seeded_state):
        """Test a new account goes to the end of the list."""
        state = reducer(seeded_state, AddAccount(account=make_account("acc-3")))
        assert [a.id for a in state.accounts] == ["acc-1", "acc-2", "acc-3"]

    def test_update_account_replaces_by_id(self, reducer, seeded_state):
        """Test update swaps the record in place."""
        renamed = make_account("acc-1", "1000", bank_name="Renamed")
        state = reducer(seeded_state, UpdateAccount(account=renamed))
        assert state.accounts[0].bank_name == "Renamed"
        assert len(state.accounts) == 2

    def test_delete_account(self, reducer, seeded_state):
        """Test delete removes by id."""
        state = reducer(seeded_state, DeleteAccount(account_id="acc-2"))
        assert [a.id for a in state.accounts] == ["acc-1"]

    def test_previous_state_untouched(self, reducer, seeded_state):
        """Test the reducer never mutates its input."""
        reducer(seeded_state, DeleteAccount(account_id="acc-1"))
        assert len(seeded_state.accounts) == 2


class TestTransactionOrdering:
    """Tests for the newest-first ordering of the transaction list."""

    def test_sorted_after_every_mutation(self, reducer, seeded_state):
        """Test random add/update/delete sequences keep the list sorted."""
        rng = random.Random(7)
        state = seeded_state
        base = date(2024, 1, 1)
        ids = []

        for step in range(60):
            choice = rng.random()
            if choice < 0.5 or not ids:
                tx_id = f"t{step}"
                ids.append(tx_id)
                tx = make_tx(tx_id, on=base + timedelta(days=rng.randint(0, 90)))
                state = reducer(state, AddTransaction(transaction=tx))
            elif choice < 0.8:
                tx_id = rng.choice(ids)
                tx = make_tx(tx_id, on=base + timedelta(days=rng.randint(0, 90)))
                state = reducer(state, UpdateTransaction(transaction=tx))
            else:
                tx_id = ids.pop(rng.randrange(len(ids)))
                state = reducer(state, DeleteTransaction(transaction_id=tx_id))

            assert _is_sorted_newest_first(state)

        assert {t.id for t in state.transactions} == set(ids)

    def test_new_transaction_first_among_equal_dates(self, reducer, seeded_state):
        """Test an added transaction precedes older ones of the same date."""
        state = reducer(seeded_state, AddTransaction(transaction=make_tx("first")))
        state = reducer(state, AddTransaction(transaction=make_tx("second")))
        assert [t.id for t in state.transactions] == ["second", "first"]

    def test_update_keeps_single_copy(self, reducer, seeded_state):
        """Test UpdateTransaction replaces rather than duplicates."""
        state = reducer(seeded_state, AddTransaction(transaction=make_tx("t1", "10")))
        state = reducer(state, UpdateTransaction(transaction=make_tx("t1", "99")))
        assert len(state.transactions) == 1
        assert state.transactions[0].amount == Decimal("99")


class TestCategoryCascades:
    """Tests for category rename and delete cascades."""

    def _with_transactions(self, reducer, state):
        for tx in (
            make_tx("t1", category="Groceries"),
            make_tx("t2", category="Groceries"),
            make_tx("t3", category="Rent"),
        ):
            state = reducer(state, AddTransaction(transaction=tx))
        return state

    def test_rename_rewrites_exactly_matching(self, reducer, seeded_state):
        """Test renaming A to B moves every A transaction and nothing else."""
        state = self._with_transactions(reducer, seeded_state)
        renamed = make_category("cat-1", "Supermarket")

        new_state = reducer(state, UpdateCategory(category=renamed))

        by_id = {t.id: t.category for t in new_state.transactions}
        assert by_id == {"t1": "Supermarket", "t2": "Supermarket", "t3": "Rent"}
        assert new_state.categories[0].name == "Supermarket"

    def test_update_without_rename_leaves_transactions(self, reducer, seeded_state):
        """Test a retype with the same name does not touch transactions."""
        state = self._with_transactions(reducer, seeded_state)
        same_name = make_category("cat-1", "Groceries", CategoryType.INCOME)

        new_state = reducer(state, UpdateCategory(category=same_name))

        assert new_state.transactions == state.transactions
        assert new_state.categories[0].type is CategoryType.INCOME

    def test_delete_moves_to_fallback(self, reducer, seeded_state):
        """Test deleting an expense category files its transactions under Other Expenses."""
        state = self._with_transactions(reducer, seeded_state)

        new_state = reducer(state, DeleteCategory(category=make_category()))

        by_id = {t.id: t.category for t in new_state.transactions}
        assert by_id == {"t1": "Other Expenses", "t2": "Other Expenses", "t3": "Rent"}
        assert new_state.categories == ()

    def test_delete_income_category_fallback(self, reducer, seeded_state):
        """Test an income category falls back to Other Income."""
        salary = make_category("cat-2", "Salary", CategoryType.INCOME)
        state = reducer(seeded_state, AddCategory(category=salary))
        state = reducer(state, AddTransaction(transaction=make_tx(
            "t1", tx_type=TransactionType.INCOME, category="Salary"
        )))

        new_state = reducer(state, DeleteCategory(category=salary))

        assert new_state.transactions[0].category == "Other Income"

    def test_delete_with_portuguese_catalog(self, seeded_state):
        """Test the Portuguese catalog falls back to Outras Despesas."""
        reducer = Reducer(PORTUGUESE_CATALOG)
        state = reducer(seeded_state, AddTransaction(transaction=make_tx("t1")))

        new_state = reducer(state, DeleteCategory(category=make_category()))

        assert new_state.transactions[0].category == "Outras Despesas"
        assert all(c.id != "cat-1" for c in new_state.categories)


class TestPayInvoice:
    """Tests for the compound pay-invoice transition."""

    def _with_charges(self, reducer, state):
        for tx_id, amount in (("k1", "10"), ("k2", "20"), ("k3", "30")):
            state = reducer(state, AddTransaction(transaction=make_tx(
                tx_id, amount, tx_type=TransactionType.CREDIT_CARD_EXPENSE, paid=False
            )))
        return state

    def test_marks_all_charges_regardless_of_amount(self, reducer, seeded_state):
        """Test a payment of 15 settles charges totalling 60."""
        state = self._with_charges(reducer, seeded_state)
        account = state.accounts[0]
        before = account_balance(account, state.transactions)

        new_state = reducer(state, PayInvoice(
            credit_card_id="card-1",
            account_id="acc-1",
            amount=Decimal("15"),
            date=date(2024, 6, 1),
            payment_id="pay-1",
        ))

        charges = [t for t in new_state.transactions if t.credit_card_id == "card-1"]
        assert len(charges) == 3
        assert all(t.paid is True for t in charges)
        assert {t.paid_in_invoice_id for t in charges} == {"pay-1"}

        payments = [t for t in new_state.transactions if t.account_id == "acc-1"]
        assert len(payments) == 1
        assert payments[0].amount == Decimal("15")
        assert payments[0].type is TransactionType.EXPENSE
        assert payments[0].category == "Invoice Payment"
        assert "Gold" in payments[0].description

        after = account_balance(account, new_state.transactions)
        assert before - after == Decimal("15")
        assert _is_sorted_newest_first(new_state)

    def test_already_paid_charges_keep_their_payment(self, reducer, seeded_state):
        """Test charges settled by an earlier payment are not re-pointed."""
        state = reducer(seeded_state, AddTransaction(transaction=make_tx(
            "k0", tx_type=TransactionType.CREDIT_CARD_EXPENSE, paid=True
        ).model_copy(update={"paid_in_invoice_id": "old-pay"})))

        new_state = reducer(state, PayInvoice(
            credit_card_id="card-1",
            account_id="acc-1",
            amount=Decimal("5"),
            date=date(2024, 6, 1),
        ))

        charge = next(t for t in new_state.transactions if t.id == "k0")
        assert charge.paid_in_invoice_id == "old-pay"

    def test_unknown_card_is_noop(self, reducer, seeded_state):
        """Test paying an unknown card changes nothing."""
        state = self._with_charges(reducer, seeded_state)
        new_state = reducer(state, PayInvoice(
            credit_card_id="missing",
            account_id="acc-1",
            amount=Decimal("15"),
            date=date(2024, 6, 1),
        ))
        assert new_state is state

    def test_other_cards_untouched(self, reducer, seeded_state):
        """Test only the paid card's charges are settled."""
        state = reducer(seeded_state, AddTransaction(transaction=make_tx(
            "other", tx_type=TransactionType.CREDIT_CARD_EXPENSE, card_id="card-2", paid=False
        )))
        new_state = reducer(state, PayInvoice(
            credit_card_id="card-1",
            account_id="acc-1",
            amount=Decimal("1"),
            date=date(2024, 6, 1),
        ))
        other = next(t for t in new_state.transactions if t.id == "other")
        assert other.paid is False

    def test_deleting_payment_leaves_pointer(self, reducer, seeded_state):
        """Test deleting the payment keeps paid_in_invoice_id on charges."""
        state = self._with_charges(reducer, seeded_state)
        state = reducer(state, PayInvoice(
            credit_card_id="card-1",
            account_id="acc-1",
            amount=Decimal("15"),
            date=date(2024, 6, 1),
            payment_id="pay-1",
        ))
        state = reducer(state, DeleteTransaction(transaction_id="pay-1"))
        assert all(t.paid_in_invoice_id == "pay-1" for t in state.transactions)


class TestTransfer:
    """Tests for transfers between accounts."""

    def test_transfer_conserves_total(self, reducer, seeded_state):
        """Test a transfer of 100 moves money without changing the total."""
        a, b = seeded_state.accounts
        before_a = account_balance(a, seeded_state.transactions)
        before_b = account_balance(b, seeded_state.transactions)

        state = reducer(seeded_state, TransferBetweenAccounts(
            from_account_id="acc-1",
            to_account_id="acc-2",
            amount=Decimal("100"),
            date=date(2024, 6, 1),
            description="Savings",
        ))

        assert len(state.transactions) == 2
        expense = next(t for t in state.transactions if t.type is TransactionType.EXPENSE)
        income = next(t for t in state.transactions if t.type is TransactionType.INCOME)
        assert expense.account_id == "acc-1"
        assert income.account_id == "acc-2"
        assert expense.amount == income.amount == Decimal("100")
        assert expense.date == income.date
        assert expense.description == income.description == "Savings"
        assert expense.category == income.category == "Transfer"

        after_a = account_balance(a, state.transactions)
        after_b = account_balance(b, state.transactions)
        assert before_a - after_a == Decimal("100")
        assert after_b - before_b == Decimal("100")
        assert after_a + after_b == before_a + before_b

    def test_empty_description_defaults(self, reducer, seeded_state):
        """Test an empty description is replaced by the catalog default."""
        state = reducer(seeded_state, TransferBetweenAccounts(
            from_account_id="acc-1",
            to_account_id="acc-2",
            amount=Decimal("1"),
            date=date(2024, 6, 1),
        ))
        assert {t.description for t in state.transactions} == {"Transfer between accounts"}

    @pytest.mark.parametrize("older", [date(2024, 1, 1), date(2025, 1, 1)])
    def test_transfer_resorts(self, reducer, seeded_state, older):
        """Test the list is re-sorted after a transfer."""
        state = reducer(seeded_state, AddTransaction(transaction=make_tx("x", on=older)))
        state = reducer(state, TransferBetweenAccounts(
            from_account_id="acc-1",
            to_account_id="acc-2",
            amount=Decimal("1"),
            date=date(2024, 6, 1),
        ))
        assert _is_sorted_newest_first(state)
