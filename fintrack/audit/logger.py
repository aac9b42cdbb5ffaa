"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of sync cycles and hydrations
2. Debugging capability when the remote store fails
3. A record of rejected intents and dropped local data

The audit logger:
- Is synchronous, so the reducer-side store and the async sync
  controller can both call it
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from fintrack.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route the stdlib loggers structlog writes through to stderr."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events to the structured local log.
    """

    def __init__(self, name: str = "fintrack.audit"):
        self._logger = structlog.get_logger(name)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the log write itself failed.
        """
        log_dict = event.to_log_dict()

        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            return False

        return True

    def log_intent_rejected(
        self,
        intent: str,
        entity_id: Optional[str],
        message: str,
    ) -> None:
        """Log a pre-dispatch guard rejecting a user intent."""
        self.log(AuditEventBuilder.intent_rejected(intent, entity_id, message))

    def log_hydration_completed(
        self,
        user_id: Optional[str],
        counts: dict[str, int],
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.hydration_completed(user_id, counts, correlation_id))

    def log_hydration_failed(
        self,
        user_id: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.hydration_failed(user_id, error_message, correlation_id))

    def log_default_categories_initialized(
        self,
        user_id: str,
        inserted: int,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.default_categories_initialized(user_id, inserted, correlation_id))

    def log_sync_started(self, user_id: str, correlation_id: UUID) -> None:
        self.log(AuditEventBuilder.sync_started(user_id, correlation_id))

    def log_sync_completed(
        self,
        user_id: str,
        summary: dict,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.sync_completed(user_id, summary, correlation_id))

    def log_sync_skipped(self, reason: str) -> None:
        self.log(AuditEventBuilder.sync_skipped(reason))

    def log_sync_kind_failed(
        self,
        kind: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.sync_kind_failed(kind, error_message, correlation_id))

    def log_user_registered(self, user_id: str, email: str) -> None:
        self.log(AuditEventBuilder.user_registered(user_id, email))

    def log_user_logged_in(self, user_id: str) -> None:
        self.log(AuditEventBuilder.user_logged_in(user_id))

    def log_user_logged_out(self, user_id: Optional[str]) -> None:
        self.log(AuditEventBuilder.user_logged_out(user_id))

    def log_snapshot_record_dropped(
        self,
        collection: str,
        index: int,
        error_message: str,
    ) -> None:
        self.log(AuditEventBuilder.snapshot_record_dropped(collection, index, error_message))

    def log_cache_corrupted(self, key: str, error_message: str) -> None:
        self.log(AuditEventBuilder.cache_corrupted(key, error_message))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    def log_external_service_error(
        self,
        service: str,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed call to the remote store or auth backend."""
        self.log(AuditEventBuilder.external_service_error(
            service=service,
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_application_reset(self) -> None:
        self.log(AuditEventBuilder.application_reset())


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a sync cycle or hydration.
    Pass it through all subsequent operations.
    """
    return uuid4()
