"""
Local Snapshot Loading

The local cache can hold anything: an older format, a hand-edited file,
half a write. Loading is defensive at the record level:

- Unparseable JSON or a non-object root: start from the initial state
- A record that fails validation: drop that record, keep the rest
- Unknown or malformed theme/auth: fall back to defaults

The written shape uses the camelCase field names (bankName,
initialBalance, paidInInvoiceId, ...) so every entity field round-trips.
"""

import json
from typing import Any, Optional, Union

from pydantic import ValidationError

from fintrack.audit import AuditLogger
from fintrack.models.entities import (
    Account,
    Category,
    CreditCard,
    EntityModel,
    Theme,
    Transaction,
    User,
)
from fintrack.state.app_state import AppState, AuthState, initial_state
from fintrack.state.reducer import sort_transactions


# Snapshot key -> (AppState field, entity model)
COLLECTIONS: dict[str, tuple[str, type[EntityModel]]] = {
    "accounts": ("accounts", Account),
    "creditCards": ("credit_cards", CreditCard),
    "transactions": ("transactions", Transaction),
    "categories": ("categories", Category),
}


def dump_snapshot(state: AppState) -> dict[str, Any]:
    """Serialize state to the JSON-ready camelCase snapshot shape."""
    snapshot: dict[str, Any] = {
        key: [
            record.model_dump(mode="json", by_alias=True)
            for record in getattr(state, field)
        ]
        for key, (field, _) in COLLECTIONS.items()
    }
    snapshot["auth"] = {
        "isAuthenticated": state.auth.is_authenticated,
        "user": state.auth.user.model_dump(mode="json") if state.auth.user else None,
    }
    snapshot["theme"] = state.theme.value
    return snapshot


def _load_records(
    key: str,
    model_type: type[EntityModel],
    raw: Any,
    audit_logger: AuditLogger,
) -> tuple:
    if not isinstance(raw, list):
        if raw is not None:
            audit_logger.log_snapshot_record_dropped(key, -1, "Collection is not a list")
        return ()

    records = []
    for index, item in enumerate(raw):
        try:
            records.append(model_type.model_validate(item))
        except ValidationError as e:
            audit_logger.log_snapshot_record_dropped(key, index, str(e))
    return tuple(records)


def _load_theme(raw: Any, default_theme: Theme) -> Theme:
    try:
        return Theme(raw)
    except (TypeError, ValueError):
        return default_theme


def _load_auth(raw: Any) -> AuthState:
    if not isinstance(raw, dict) or not raw.get("isAuthenticated"):
        return AuthState()
    try:
        user = User.model_validate(raw.get("user"))
    except ValidationError:
        return AuthState()
    return AuthState(is_authenticated=True, user=user)


def load_snapshot(
    raw: Union[str, dict, None],
    default_theme: Theme = Theme.LIGHT,
    audit_logger: Optional[AuditLogger] = None,
) -> AppState:
    """
    Build an AppState from a cached snapshot, dropping invalid records.

    Accepts either the raw JSON text or an already-decoded object.
    """
    audit_logger = audit_logger or AuditLogger()

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            audit_logger.log_cache_corrupted("snapshot", str(e))
            return initial_state(theme=default_theme)

    if not isinstance(raw, dict):
        if raw is not None:
            audit_logger.log_cache_corrupted("snapshot", "Snapshot is not a JSON object")
        return initial_state(theme=default_theme)

    collections = {
        field: _load_records(key, model_type, raw.get(key), audit_logger)
        for key, (field, model_type) in COLLECTIONS.items()
    }
    collections["transactions"] = sort_transactions(collections["transactions"])

    return AppState(
        **collections,
        auth=_load_auth(raw.get("auth")),
        theme=_load_theme(raw.get("theme"), default_theme),
    )
