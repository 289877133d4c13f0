"""
Result models for reconciliation, garbage collection and diagnostics.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class ReconcileResult(BaseModel):
    """Outcome of a Reconciler protocol run."""

    content: str = ""
    asset_ids: list[str] = Field(default_factory=list)
    promoted: list[str] = Field(default_factory=list)
    already_settled: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict)


class SweepResult(BaseModel):
    """Outcome of one garbage collection sweep."""

    sweep: str
    scanned: int = 0
    affected: list[str] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict)
    error: str | None = None
    started_at: datetime = Field(default_factory=datetime.now)
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None and not self.failed


class StorageStats(BaseModel):
    """Diagnostic snapshot of GC health."""

    staging_count: int
    durable_count: int
    orphaned_count: int
    document_count: int
    live_asset_count: int
