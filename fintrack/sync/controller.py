"""
Synchronization Controller

Keeps the remote store eventually consistent with local state.

INBOUND (initialize):
1. Resolve the signed-in user from the auth service
2. Fetch all four collections in parallel
3. Seed default categories if the user has none, then refetch them
4. Hydrate once with the fetched data, the user and the cached theme

OUTBOUND (sync_now, debounced):
1. Skip if not hydrated, signed out, already syncing or logging out
2. For each collection: fetch remote ids, update-or-insert every local
   record, delete remote records missing locally
3. A failing collection is abandoned for this pass; the others proceed.
   The next pass starts from scratch.

DESIGN DECISION: Full diff-based reconciliation, not a change log.
O(local + remote) calls per pass is fine for one person's finances,
and there is no bookkeeping to go stale after a partial failure.

TRADEOFFS:
- No timeouts on remote calls: a hung call blocks that pass
- Last write wins; there is no multi-device conflict handling
"""

import asyncio
from typing import Optional, Sequence
from uuid import UUID

from fintrack.audit import AuditLogger, create_correlation_id
from fintrack.config import SyncSettings
from fintrack.models.catalog import ENGLISH_CATALOG, CategoryCatalog
from fintrack.models.entities import Theme
from fintrack.services.auth import AuthService
from fintrack.services.cache import THEME_KEY, LocalCache
from fintrack.services.storage import CollectionStore, RemoteStore
from fintrack.state.actions import Action, Hydrate, Logout
from fintrack.state.app_state import AppState, AuthState, initial_state
from fintrack.state.reducer import sort_transactions
from fintrack.state.store import StateStore
from fintrack.sync.debounce import Debouncer
from fintrack.sync.report import KindSyncReport, SyncReport


class SyncController:
    """
    Bridges the state store and the remote store.

    Owns no state of its own beyond the session flags; everything it
    pushes is read from the store's current snapshot.
    """

    def __init__(
        self,
        store: StateStore,
        remote: RemoteStore,
        auth: AuthService,
        cache: LocalCache,
        catalog: CategoryCatalog = ENGLISH_CATALOG,
        settings: Optional[SyncSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._remote = remote
        self._auth = auth
        self._cache = cache
        self._catalog = catalog
        self._settings = settings or SyncSettings()
        self._audit_logger = audit_logger or AuditLogger()
        self._debouncer = Debouncer(
            self._settings.debounce_seconds,
            self.sync_now,
            self._audit_logger,
        )

        self._hydrated = False
        self._syncing = False
        self._logging_out = False
        self._initializing = False
        self._started = False
        self._init_task: Optional[asyncio.Task] = None
        self._unsubscribe = None

    # -------------------------------------------------------------------------
    # Flags
    # -------------------------------------------------------------------------

    @property
    def is_hydrated(self) -> bool:
        return self._hydrated

    @property
    def is_syncing(self) -> bool:
        return self._syncing

    @property
    def is_logging_out(self) -> bool:
        return self._logging_out

    @property
    def debouncer(self) -> Debouncer:
        return self._debouncer

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> AppState:
        """Subscribe to the store and run the initial hydration once."""
        if self._unsubscribe is None:
            self._unsubscribe = self._store.subscribe(self._on_change)
        if not self._started:
            self._started = True
            await self.initialize()
        return self._store.state

    def stop(self) -> None:
        """Cancel any waiting sync and stop listening. A running pass finishes."""
        self._debouncer.cancel()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def ready(self) -> AppState:
        """Wait for a re-initialization scheduled by a login, if any."""
        if self._init_task is not None:
            await self._init_task
        return self._store.state

    async def wait_idle(self) -> None:
        """Wait for a scheduled re-initialization and any debounced pass."""
        await self.ready()
        await self._debouncer.drain()

    def _on_change(self, previous: AppState, current: AppState, action: Action) -> None:
        # New session outside of our own hydration: local data is not this user's yet
        if (
            current.user_id is not None
            and current.user_id != previous.user_id
            and not self._initializing
        ):
            self._hydrated = False
            self._debouncer.cancel()
            self._init_task = asyncio.get_running_loop().create_task(self.initialize())
            return

        # Hydrate and Logout replace state wholesale; they are not local edits
        if isinstance(action, (Hydrate, Logout)):
            return

        if current.domain_changed(previous):
            self._debouncer.trigger()

    # -------------------------------------------------------------------------
    # Inbound
    # -------------------------------------------------------------------------

    def _cached_theme(self) -> Theme:
        raw = self._cache.get(THEME_KEY)
        try:
            return Theme(raw)
        except ValueError:
            return self._store.state.theme

    async def initialize(self) -> AppState:
        """
        Pull remote state for the current user and hydrate the store.

        Never raises on remote failure: the store is hydrated with an
        empty, signed-in state instead, and outbound sync stays off
        until a later initialize succeeds.
        """
        self._initializing = True
        correlation_id = create_correlation_id()
        theme = self._cached_theme()

        try:
            user = self._auth.get_current_user()
            if user is None:
                self._store.dispatch(Hydrate(state=initial_state(theme=theme)))
                self._hydrated = True
                self._audit_logger.log_hydration_completed(
                    None, self._store.state.counts(), correlation_id
                )
                return self._store.state

            auth = AuthState(is_authenticated=True, user=user)

            try:
                accounts, credit_cards, transactions, categories = await asyncio.gather(
                    self._remote.accounts.fetch_all(user.id),
                    self._remote.credit_cards.fetch_all(user.id),
                    self._remote.transactions.fetch_all(user.id),
                    self._remote.categories.fetch_all(user.id),
                )

                if not categories:
                    inserted = await self._remote.initialize_default_categories(
                        user.id, self._catalog.defaults
                    )
                    self._audit_logger.log_default_categories_initialized(
                        user.id, inserted, correlation_id
                    )
                    categories = await self._remote.categories.fetch_all(user.id)
            except Exception as e:
                self._audit_logger.log_hydration_failed(user.id, str(e), correlation_id)
                self._hydrated = False
                self._store.dispatch(Hydrate(state=AppState(auth=auth, theme=theme)))
                return self._store.state

            snapshot = AppState(
                accounts=tuple(accounts),
                credit_cards=tuple(credit_cards),
                transactions=sort_transactions(transactions),
                categories=tuple(categories),
                auth=auth,
                theme=theme,
            )
            self._store.dispatch(Hydrate(state=snapshot))
            self._hydrated = True
            self._audit_logger.log_hydration_completed(
                user.id, snapshot.counts(), correlation_id
            )
            return self._store.state
        finally:
            self._initializing = False

    # -------------------------------------------------------------------------
    # Outbound
    # -------------------------------------------------------------------------

    def _skip_reason(self, state: AppState) -> Optional[str]:
        if not self._hydrated:
            return "not_hydrated"
        if state.user_id is None:
            return "not_authenticated"
        if self._syncing:
            return "sync_in_flight"
        if self._logging_out:
            return "logging_out"
        return None

    async def sync_now(self) -> SyncReport:
        """
        Run one reconciliation pass against the current snapshot.

        At most one pass runs at a time; a pass that finds another in
        flight is skipped, not queued.
        """
        state = self._store.state
        reason = self._skip_reason(state)
        if reason is not None:
            self._audit_logger.log_sync_skipped(reason)
            return SyncReport.skip(reason)

        self._syncing = True
        user_id = state.user_id
        correlation_id = create_correlation_id()
        self._audit_logger.log_sync_started(user_id, correlation_id)

        try:
            kinds = list(self._remote.collections().items())
            reports = await asyncio.gather(*(
                self._reconcile(kind, collection, getattr(state, kind), user_id, correlation_id)
                for kind, collection in kinds
            ))
        finally:
            self._syncing = False

        report = SyncReport(
            correlation_id=correlation_id,
            user_id=user_id,
            kinds={r.kind: r for r in reports},
        )
        self._audit_logger.log_sync_completed(user_id, report.summary(), correlation_id)
        return report

    async def _reconcile(
        self,
        kind: str,
        collection: CollectionStore,
        local_records: Sequence,
        user_id: str,
        correlation_id: UUID,
    ) -> KindSyncReport:
        inserted = updated = deleted = 0
        try:
            remote_records = await collection.fetch_all(user_id)
            remote_ids = {r.id for r in remote_records}

            local_ids = set()
            for record in local_records:
                local_ids.add(record.id)
                if record.id in remote_ids:
                    await collection.update(user_id, record.id, record)
                    updated += 1
                else:
                    await collection.insert(user_id, record)
                    inserted += 1

            for record in remote_records:
                if record.id not in local_ids:
                    await collection.delete(user_id, record.id)
                    deleted += 1
        except Exception as e:
            self._audit_logger.log_sync_kind_failed(kind, str(e), correlation_id)
            return KindSyncReport(
                kind=kind,
                inserted=inserted,
                updated=updated,
                deleted=deleted,
                error=str(e),
            )

        return KindSyncReport(kind=kind, inserted=inserted, updated=updated, deleted=deleted)

    # -------------------------------------------------------------------------
    # Logout
    # -------------------------------------------------------------------------

    async def logout(self) -> AppState:
        """Sign out and clear local data. No sync starts while this runs."""
        self._logging_out = True
        try:
            self._debouncer.cancel()
            await self._auth.logout()
            self._hydrated = False
            return self._store.dispatch(Logout())
        finally:
            self._logging_out = False
