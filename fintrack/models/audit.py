"""
Audit Models for FinTrack

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability of every sync cycle and hydration
2. Debugging information when the remote store misbehaves
3. A record of rejected intents and dropped local records

DESIGN DECISION: Audit events are structured, not free text, so a sync
cycle can be reconstructed from its correlation id alone.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Intents
    INTENT_REJECTED = "intent_rejected"

    # Hydration
    HYDRATION_COMPLETED = "hydration_completed"
    HYDRATION_FAILED = "hydration_failed"
    DEFAULT_CATEGORIES_INITIALIZED = "default_categories_initialized"

    # Outbound sync
    SYNC_STARTED = "sync_started"
    SYNC_COMPLETED = "sync_completed"
    SYNC_SKIPPED = "sync_skipped"
    SYNC_KIND_FAILED = "sync_kind_failed"

    # Authentication
    USER_REGISTERED = "user_registered"
    USER_LOGGED_IN = "user_logged_in"
    USER_LOGGED_OUT = "user_logged_out"

    # Local cache
    SNAPSHOT_RECORD_DROPPED = "snapshot_record_dropped"
    CACHE_CORRUPTED = "cache_corrupted"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"
    APPLICATION_RESET = "application_reset"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'account', 'transaction', 'sync')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all calls of one sync cycle)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.sync_started(user_id, correlation_id)
        event = AuditEventBuilder.intent_rejected("delete_account", account_id, message)
    """

    @staticmethod
    def intent_rejected(
        intent: str,
        entity_id: Optional[str],
        message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INTENT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="intent",
            entity_id=entity_id,
            description=f"Intent rejected: {intent}",
            details={"intent": intent, "message": message},
            is_user_action=True,
        )

    @staticmethod
    def hydration_completed(
        user_id: Optional[str],
        counts: dict[str, int],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.HYDRATION_COMPLETED,
            entity_type="user",
            entity_id=user_id,
            correlation_id=correlation_id,
            description="State hydrated" if user_id else "State hydrated without a user",
            details=counts,
        )

    @staticmethod
    def hydration_failed(
        user_id: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.HYDRATION_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="user",
            entity_id=user_id,
            correlation_id=correlation_id,
            description="Remote fetch failed, hydrating empty authenticated state",
            error_message=error_message,
        )

    @staticmethod
    def default_categories_initialized(
        user_id: str,
        inserted: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEFAULT_CATEGORIES_INITIALIZED,
            entity_type="user",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"Initialized {inserted} default categories",
            details={"inserted": inserted},
        )

    @staticmethod
    def sync_started(
        user_id: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_STARTED,
            severity=AuditSeverity.DEBUG,
            entity_type="sync",
            entity_id=user_id,
            correlation_id=correlation_id,
            description="Outbound sync started",
        )

    @staticmethod
    def sync_completed(
        user_id: str,
        summary: dict[str, Any],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_COMPLETED,
            entity_type="sync",
            entity_id=user_id,
            correlation_id=correlation_id,
            description="Outbound sync completed",
            details=summary,
        )

    @staticmethod
    def sync_skipped(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_SKIPPED,
            severity=AuditSeverity.DEBUG,
            entity_type="sync",
            description=f"Outbound sync skipped: {reason}",
            details={"reason": reason},
        )

    @staticmethod
    def sync_kind_failed(
        kind: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_KIND_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="sync",
            correlation_id=correlation_id,
            description=f"Reconciliation of {kind} abandoned for this cycle",
            error_message=error_message,
            details={"kind": kind},
        )

    @staticmethod
    def user_registered(user_id: str, email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REGISTERED,
            entity_type="user",
            entity_id=user_id,
            description="User registered",
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def user_logged_in(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_LOGGED_IN,
            entity_type="user",
            entity_id=user_id,
            description="User logged in",
            is_user_action=True,
        )

    @staticmethod
    def user_logged_out(user_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_LOGGED_OUT,
            entity_type="user",
            entity_id=user_id,
            description="User logged out",
            is_user_action=True,
        )

    @staticmethod
    def snapshot_record_dropped(
        collection: str,
        index: int,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_RECORD_DROPPED,
            severity=AuditSeverity.WARNING,
            entity_type=collection,
            description=f"Dropped invalid {collection} record #{index} from snapshot",
            error_message=error_message,
            details={"collection": collection, "index": index},
        )

    @staticmethod
    def cache_corrupted(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CACHE_CORRUPTED,
            severity=AuditSeverity.WARNING,
            entity_type="cache",
            entity_id=key,
            description=f"Local cache entry '{key}' unreadable, using defaults",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
                "operation": operation,
            },
            correlation_id=correlation_id,
        )

    @staticmethod
    def application_reset() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.APPLICATION_RESET,
            severity=AuditSeverity.WARNING,
            description="Local cache cleared and application reloaded",
            is_user_action=True,
        )
