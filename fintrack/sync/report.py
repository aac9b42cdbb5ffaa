"""Results of one outbound sync pass."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class KindSyncReport(BaseModel):
    """What happened to one entity collection during a pass."""
    model_config = ConfigDict(frozen=True)

    kind: str
    inserted: int = 0
    updated: int = 0
    deleted: int = 0
    error: Optional[str] = Field(
        default=None,
        description="Set when this collection was abandoned for the pass"
    )

    @property
    def ok(self) -> bool:
        return self.error is None


class SyncReport(BaseModel):
    """
    Outcome of sync_now().

    A skipped pass carries the reason and no per-kind reports.
    """
    model_config = ConfigDict(frozen=True)

    correlation_id: Optional[UUID] = None
    user_id: Optional[str] = None
    skipped_reason: Optional[str] = None
    kinds: dict[str, KindSyncReport] = Field(default_factory=dict)

    @property
    def skipped(self) -> bool:
        return self.skipped_reason is not None

    @property
    def failed_kinds(self) -> list[str]:
        return [name for name, report in self.kinds.items() if not report.ok]

    @property
    def ok(self) -> bool:
        return not self.skipped and not self.failed_kinds

    def summary(self) -> dict:
        """Flat counts for logging."""
        return {
            name: {
                "inserted": report.inserted,
                "updated": report.updated,
                "deleted": report.deleted,
                "error": report.error,
            }
            for name, report in self.kinds.items()
        }

    @classmethod
    def skip(cls, reason: str) -> "SyncReport":
        return cls(skipped_reason=reason)
