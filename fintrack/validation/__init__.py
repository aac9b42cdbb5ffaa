"""
Validation Package

Pre-dispatch intent guards and defensive loading of cached snapshots.
"""

from fintrack.validation.snapshot import dump_snapshot, load_snapshot
from fintrack.validation.validator import (
    IntentValidator,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    "IntentValidator",
    "ValidationIssue",
    "ValidationResult",
    "dump_snapshot",
    "load_snapshot",
]
