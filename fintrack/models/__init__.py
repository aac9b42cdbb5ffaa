"""
Data Models Package

This package contains all Pydantic models used in FinTrack.
All data flowing through the system must conform to these schemas.
"""

from fintrack.models.entities import (
    Account,
    Category,
    CategoryType,
    CreditCard,
    Theme,
    Transaction,
    TransactionType,
    User,
    new_id,
)
from fintrack.models.catalog import (
    ENGLISH_CATALOG,
    PORTUGUESE_CATALOG,
    CategoryCatalog,
    get_catalog,
)
from fintrack.models.reports import (
    CategoryTotal,
    InvoiceReport,
    MetricComparison,
    OpenInvoice,
    PeriodComparison,
    PeriodSummary,
)
from fintrack.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Entities
    "Account",
    "Category",
    "CategoryType",
    "CreditCard",
    "Theme",
    "Transaction",
    "TransactionType",
    "User",
    "new_id",
    # Catalog
    "ENGLISH_CATALOG",
    "PORTUGUESE_CATALOG",
    "CategoryCatalog",
    "get_catalog",
    # Report models
    "CategoryTotal",
    "InvoiceReport",
    "MetricComparison",
    "OpenInvoice",
    "PeriodComparison",
    "PeriodSummary",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
