"""
Asset models: uploaded binary files and their storage location.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class AssetLocation(str, Enum):
    """Physical area an asset currently lives in."""

    STAGING = "staging"  # Volatile, awaiting a document that references it
    DURABLE = "durable"  # Owned by a persisted document


class PromotionStatus(str, Enum):
    """Outcome of moving an asset from staging to durable storage."""

    PROMOTED = "promoted"
    ALREADY_SETTLED = "already_settled"  # Not staged, but already durable
    NOT_FOUND = "not_found"  # In neither area (never existed, reaped, or deleted)


class Asset(BaseModel):
    """
    Uploaded image addressed by an opaque, never-reused identifier.

    Assets have no owner field. Ownership is inferred from which document's
    content mentions the identifier.
    """

    id: str = Field(..., description="Unique asset ID (<uuid4>-<millis><ext>)")
    location: AssetLocation = Field(..., description="Current storage area")
    original_name: str = Field(default="", description="Client-supplied filename")
    size_bytes: int = Field(default=0, ge=0, description="Payload size")
    uploaded_at: datetime = Field(default_factory=datetime.now, description="Arrival time")
    url: str = Field(default="", description="Reference form embedded in document content")


class StagedEntry(BaseModel):
    """Staging registry record, used to detect abandoned uploads."""

    asset_id: str
    original_name: str = ""
    path: str
    size_bytes: int = 0
    uploaded_at: datetime

    def is_expired(self, now: datetime, ttl_seconds: float) -> bool:
        """
        Check whether the entry has outlived the staging TTL.

        Args:
            now: Current time
            ttl_seconds: Staging time-to-live

        Returns:
            True if the upload is strictly older than the TTL
        """
        return (now - self.uploaded_at).total_seconds() > ttl_seconds


class PromotionResult(BaseModel):
    """Result of AssetStore.promote."""

    asset_id: str
    status: PromotionStatus
    asset: Asset | None = None

    @property
    def promoted(self) -> bool:
        return self.status == PromotionStatus.PROMOTED
