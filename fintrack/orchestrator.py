"""
Main Orchestrator for FinTrack

This module ties together all the components and exposes the user
intents a front end calls:
1. Entity management (accounts, cards, categories, transactions)
2. Compound operations (pay an invoice, transfer between accounts)
3. Session (register, log in, log out, theme)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Every intent is validated BEFORE an action is dispatched
- The reducer never sees an intent that failed a guard
- Every rejection is audited

Outbound sync is a side effect of state changes handled by the
SyncController; this module never talks to the remote store directly.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from fintrack.audit import AuditLogger, configure_logging
from fintrack.config import Settings, get_settings
from fintrack.models.catalog import CategoryCatalog, get_catalog
from fintrack.models.entities import (
    Account,
    Category,
    CategoryType,
    CreditCard,
    Theme,
    Transaction,
    TransactionType,
    new_id,
)
from fintrack.models.reports import CategoryTotal, OpenInvoice, PeriodComparison
from fintrack.queries import (
    account_balance,
    compare_periods,
    expenses_by_category,
    open_invoices,
    total_active_balance,
)
from fintrack.recovery import FaultBoundary
from fintrack.services.auth import (
    AuthResult,
    AuthService,
    GoogleSheetsUserStore,
    InMemoryUserStore,
    PasswordAuthService,
)
from fintrack.services.cache import STATE_KEY, THEME_KEY, LocalCache
from fintrack.services.storage import (
    GoogleSheetsClient,
    create_google_sheets_store,
    create_memory_store,
)
from fintrack.state import actions as a
from fintrack.state.app_state import AppState, initial_state
from fintrack.state.reducer import Reducer
from fintrack.state.store import StateStore
from fintrack.sync import SyncController, SyncReport
from fintrack.validation import (
    IntentValidator,
    ValidationIssue,
    ValidationResult,
    dump_snapshot,
    load_snapshot,
)


def _not_found(field: str, message: str) -> ValidationResult:
    return ValidationResult.of([
        ValidationIssue(field=field, issue_type="not_found", message=message)
    ])


class FinanceApp:
    """
    Application facade.

    Holds the state store and routes every user intent through the
    validator before dispatching it.
    """

    def __init__(
        self,
        store: StateStore,
        sync: SyncController,
        auth: AuthService,
        cache: LocalCache,
        validator: Optional[IntentValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._sync = sync
        self._auth = auth
        self._cache = cache
        self._validator = validator or IntentValidator()
        self._audit_logger = audit_logger or AuditLogger()
        self._boundary = FaultBoundary(cache, self._reload, self._audit_logger)
        self._unsubscribe_persist = None
        self._started = False

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def state(self) -> AppState:
        return self._store.state

    @property
    def store(self) -> StateStore:
        return self._store

    @property
    def sync(self) -> SyncController:
        return self._sync

    @property
    def boundary(self) -> FaultBoundary:
        return self._boundary

    @property
    def catalog(self) -> CategoryCatalog:
        return self._store.reducer.catalog

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def _persist(self, previous: AppState, current: AppState, action: a.Action) -> None:
        self._cache.set_json(STATE_KEY, dump_snapshot(current))

    async def start(self) -> AppState:
        """Start persisting local snapshots and hydrate from the remote store."""
        if self._unsubscribe_persist is None:
            self._unsubscribe_persist = self._store.subscribe(self._persist)
        self._started = True
        return await self._sync.start()

    async def stop(self) -> None:
        self._sync.stop()
        if self._unsubscribe_persist is not None:
            self._unsubscribe_persist()
            self._unsubscribe_persist = None

    async def sync_now(self) -> SyncReport:
        return await self._sync.sync_now()

    async def _reload(self) -> AppState:
        self._store.dispatch(a.Hydrate(state=initial_state(theme=self.state.theme)))
        return await self._sync.initialize()

    async def reset_and_reload(self) -> AppState:
        """Destructive recovery: clear the local cache and start over."""
        return await self._boundary.reset_and_reload()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _reject(
        self,
        intent: str,
        entity_id: Optional[str],
        result: ValidationResult,
    ) -> ValidationResult:
        self._audit_logger.log_intent_rejected(intent, entity_id, result.message)
        return result

    def _apply(
        self,
        intent: str,
        entity_id: Optional[str],
        result: ValidationResult,
        action: a.Action,
    ) -> ValidationResult:
        """Dispatch action if the guard passed, otherwise audit the rejection."""
        if not result.is_valid:
            return self._reject(intent, entity_id, result)
        self._store.dispatch(action)
        return result

    def _find_account(self, account_id: str) -> Optional[Account]:
        return next((x for x in self.state.accounts if x.id == account_id), None)

    def _find_credit_card(self, card_id: str) -> Optional[CreditCard]:
        return next((x for x in self.state.credit_cards if x.id == card_id), None)

    def _find_category(self, category_id: str) -> Optional[Category]:
        return next((x for x in self.state.categories if x.id == category_id), None)

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def add_account(
        self,
        bank_name: str,
        account_number: str,
        initial_balance: Decimal = Decimal("0"),
    ) -> ValidationResult:
        result = self._validator.validate_account_form(bank_name, account_number)
        if not result.is_valid:
            return self._reject("add_account", None, result)

        account = Account(
            id=new_id(),
            bank_name=bank_name,
            account_number=account_number,
            initial_balance=initial_balance,
        )
        self._store.dispatch(a.AddAccount(account=account))
        return result

    def update_account(self, account: Account) -> ValidationResult:
        if self._find_account(account.id) is None:
            return self._reject(
                "update_account", account.id,
                _not_found("account", "Account does not exist"),
            )
        result = self._validator.validate_account_form(account.bank_name, account.account_number)
        return self._apply("update_account", account.id, result, a.UpdateAccount(account=account))

    def toggle_account_active(self, account_id: str) -> ValidationResult:
        account = self._find_account(account_id)
        if account is None:
            return self._reject(
                "toggle_account_active", account_id,
                _not_found("account", "Account does not exist"),
            )
        updated = account.model_copy(update={"active": not account.active})
        self._store.dispatch(a.UpdateAccount(account=updated))
        return ValidationResult()

    def delete_account(self, account_id: str) -> ValidationResult:
        result = self._validator.validate_account_deletion(self.state, account_id)
        return self._apply("delete_account", account_id, result, a.DeleteAccount(account_id=account_id))

    # -------------------------------------------------------------------------
    # Credit cards
    # -------------------------------------------------------------------------

    def add_credit_card(
        self,
        name: str,
        flag: str,
        last_four_digits: Optional[str] = None,
        invoice_closing_day: Optional[int] = None,
        invoice_due_day: Optional[int] = None,
    ) -> ValidationResult:
        result = self._validator.validate_credit_card_form(
            name, flag, last_four_digits, invoice_closing_day, invoice_due_day
        )
        if not result.is_valid:
            return self._reject("add_credit_card", None, result)

        card = CreditCard(
            id=new_id(),
            name=name,
            flag=flag,
            last_four_digits=last_four_digits or None,
            invoice_closing_day=invoice_closing_day,
            invoice_due_day=invoice_due_day,
        )
        self._store.dispatch(a.AddCreditCard(credit_card=card))
        return result

    def update_credit_card(self, card: CreditCard) -> ValidationResult:
        if self._find_credit_card(card.id) is None:
            return self._reject(
                "update_credit_card", card.id,
                _not_found("credit_card", "Credit card does not exist"),
            )
        result = self._validator.validate_credit_card_form(
            card.name,
            card.flag,
            card.last_four_digits,
            card.invoice_closing_day,
            card.invoice_due_day,
        )
        return self._apply("update_credit_card", card.id, result, a.UpdateCreditCard(credit_card=card))

    def toggle_credit_card_active(self, card_id: str) -> ValidationResult:
        card = self._find_credit_card(card_id)
        if card is None:
            return self._reject(
                "toggle_credit_card_active", card_id,
                _not_found("credit_card", "Credit card does not exist"),
            )
        updated = card.model_copy(update={"inactive": not card.inactive})
        self._store.dispatch(a.UpdateCreditCard(credit_card=updated))
        return ValidationResult()

    def delete_credit_card(self, card_id: str) -> ValidationResult:
        result = self._validator.validate_credit_card_deletion(self.state, card_id)
        return self._apply(
            "delete_credit_card", card_id, result, a.DeleteCreditCard(credit_card_id=card_id)
        )

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def add_category(self, name: str, category_type: CategoryType) -> ValidationResult:
        result = self._validator.validate_category_form(name)
        if not result.is_valid:
            return self._reject("add_category", None, result)

        category = Category(id=new_id(), name=name, type=category_type)
        self._store.dispatch(a.AddCategory(category=category))
        return result

    def update_category(self, category: Category) -> ValidationResult:
        """Rename or retype a custom category. Renames cascade to transactions."""
        existing = self._find_category(category.id)
        if existing is None:
            return self._reject(
                "update_category", category.id,
                _not_found("category", "Category does not exist"),
            )

        result = self._validator.validate_category_update(existing)
        if result.is_valid:
            result = self._validator.validate_category_form(category.name)
        # is_default is not user-editable
        category = category.model_copy(update={"is_default": existing.is_default})
        return self._apply("update_category", category.id, result, a.UpdateCategory(category=category))

    def delete_category(self, category_id: str) -> ValidationResult:
        """Delete a custom category, moving its transactions to the fallback."""
        category = self._find_category(category_id)
        if category is None:
            return self._reject(
                "delete_category", category_id,
                _not_found("category", "Category does not exist"),
            )
        result = self._validator.validate_category_deletion(category)
        return self._apply("delete_category", category_id, result, a.DeleteCategory(category=category))

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def add_transaction(
        self,
        transaction_type: TransactionType,
        owner_id: str,
        amount: Decimal,
        date: dt.date,
        description: str,
        category: str = "",
    ) -> ValidationResult:
        """
        Record income, an expense or a credit card charge.

        owner_id is the account for income/expense, the card for a
        charge. An empty category files it under the fallback.
        """
        result = self._validator.validate_transaction_form(
            self.state, transaction_type, owner_id, description, amount, date
        )
        if not result.is_valid:
            return self._reject("add_transaction", None, result)

        category_type = (
            CategoryType.INCOME
            if transaction_type is TransactionType.INCOME
            else CategoryType.EXPENSE
        )
        owner = (
            {"account_id": owner_id}
            if transaction_type.uses_account
            else {"credit_card_id": owner_id, "paid": False}
        )
        transaction = Transaction(
            id=new_id(),
            category=category.strip() or self.catalog.fallback_for(category_type),
            description=description,
            date=date,
            amount=amount,
            type=transaction_type,
            **owner,
        )
        self._store.dispatch(a.AddTransaction(transaction=transaction))
        return result

    def update_transaction(self, transaction: Transaction) -> ValidationResult:
        if not any(t.id == transaction.id for t in self.state.transactions):
            return self._reject(
                "update_transaction", transaction.id,
                _not_found("transaction", "Transaction does not exist"),
            )
        owner_id = (
            transaction.account_id
            if transaction.type.uses_account
            else transaction.credit_card_id
        )
        result = self._validator.validate_transaction_form(
            self.state,
            transaction.type,
            owner_id,
            transaction.description,
            transaction.amount,
            transaction.date,
            is_new=False,
        )
        return self._apply(
            "update_transaction", transaction.id, result,
            a.UpdateTransaction(transaction=transaction),
        )

    def delete_transaction(self, transaction_id: str) -> ValidationResult:
        self._store.dispatch(a.DeleteTransaction(transaction_id=transaction_id))
        return ValidationResult()

    def pay_invoice(
        self,
        credit_card_id: str,
        account_id: str,
        amount: Decimal,
        date: dt.date,
    ) -> ValidationResult:
        result = self._validator.validate_pay_invoice(
            self.state, credit_card_id, account_id, amount, date
        )
        if not result.is_valid:
            return self._reject("pay_invoice", credit_card_id, result)

        self._store.dispatch(a.PayInvoice(
            credit_card_id=credit_card_id,
            account_id=account_id,
            amount=amount,
            date=date,
        ))
        return result

    def transfer(
        self,
        from_account_id: str,
        to_account_id: str,
        amount: Decimal,
        date: dt.date,
        description: str = "",
    ) -> ValidationResult:
        result = self._validator.validate_transfer(
            self.state, from_account_id, to_account_id, amount, date
        )
        if not result.is_valid:
            return self._reject("transfer", from_account_id, result)

        self._store.dispatch(a.TransferBetweenAccounts(
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            amount=amount,
            date=date,
            description=description,
        ))
        return result

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def balance_of(self, account_id: str) -> Decimal:
        account = self._find_account(account_id)
        if account is None:
            return Decimal("0")
        return account_balance(account, self.state.transactions)

    def total_balance(self) -> Decimal:
        return total_active_balance(self.state.accounts, self.state.transactions)

    def open_invoices(self) -> list[OpenInvoice]:
        return open_invoices(self.state.credit_cards, self.state.transactions)

    def expenses_by_category(self, year: int, month: Optional[int] = None) -> list[CategoryTotal]:
        return expenses_by_category(self.state.transactions, year, month)

    def compare_periods(self, year: int, month: int) -> PeriodComparison:
        return compare_periods(self.state.transactions, year, month)

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    def toggle_theme(self) -> Theme:
        state = self._store.dispatch(a.ToggleTheme())
        self._cache.set(THEME_KEY, state.theme.value)
        return state.theme

    async def login(self, email: str, password: str) -> AuthResult:
        """
        Authenticate, then hydrate the signed-in user's data.

        Logging in while another user is signed in ends that session
        first, so none of its local records carry over.
        """
        result = self._validator.validate_login(email, password)
        if not result.is_valid:
            self._reject("login", None, result)
            return AuthResult.failure(result.message)

        if self.state.user_id is not None:
            await self._sync.logout()

        auth_result = await self._auth.login(email, password)
        if not auth_result.ok:
            self._audit_logger.log_intent_rejected("login", None, auth_result.error or "")
            return auth_result

        self._store.dispatch(a.Login(user=auth_result.user))
        if self._started:
            await self._sync.ready()
        else:
            await self.start()
        return auth_result

    async def register(
        self,
        email: str,
        password: str,
        confirm_password: str,
    ) -> AuthResult:
        """Create an account and sign straight into it."""
        result = self._validator.validate_registration(email, password, confirm_password)
        if not result.is_valid:
            self._reject("register", None, result)
            return AuthResult.failure(result.message)

        auth_result = await self._auth.register(email, password)
        if not auth_result.ok:
            self._audit_logger.log_intent_rejected("register", None, auth_result.error or "")
            return auth_result

        return await self.login(email, password)

    async def logout(self) -> AppState:
        return await self._sync.logout()


def create_app(settings: Optional[Settings] = None) -> FinanceApp:
    """
    Factory function to create all application components.

    Uses the configured storage backend. If Google Sheets is selected
    but not configured, falls back to the in-memory store and logs why.
    """
    settings = settings or get_settings()
    app_settings = settings.app
    sync_settings = settings.sync

    configure_logging(app_settings.log_level)
    audit_logger = AuditLogger()
    catalog = get_catalog(app_settings.category_locale)
    cache = LocalCache(app_settings.resolved_cache_path, audit_logger)

    remote = None
    users = None
    if app_settings.storage_backend == "google_sheets":
        try:
            client = GoogleSheetsClient(settings.google_sheets, sync_settings.retry_attempts)
            remote = create_google_sheets_store(client, audit_logger)
            users = GoogleSheetsUserStore(client, audit_logger=audit_logger)
        except Exception as e:
            # Storage not configured - continue without it
            audit_logger.log_external_service_error(
                service="google_sheets",
                operation="configure",
                error_message=str(e),
            )

    if remote is None or users is None:
        remote = create_memory_store(audit_logger)
        users = InMemoryUserStore()

    auth = PasswordAuthService(users, cache, audit_logger)

    try:
        cached_theme = Theme(cache.get(THEME_KEY))
    except ValueError:
        cached_theme = Theme.LIGHT

    store = StateStore(
        Reducer(catalog),
        load_snapshot(cache.get(STATE_KEY), cached_theme, audit_logger),
        audit_logger,
    )
    sync = SyncController(
        store,
        remote,
        auth,
        cache,
        catalog=catalog,
        settings=sync_settings,
        audit_logger=audit_logger,
    )
    return FinanceApp(store, sync, auth, cache, audit_logger=audit_logger)
