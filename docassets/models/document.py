"""
Document model: rich-text content with a materialized asset reference list.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class Document(BaseModel):
    """
    Rich-text document that embeds assets by reference.

    `asset_ids` caches the identifiers the content mentions so cleanup
    decisions never need to re-parse content. It must equal the extracted
    reference set except while a reconciliation is in flight; the resync
    sweep repairs drift.
    """

    id: str = Field(..., description="Unique document ID (doc_xxx)")
    title: str = Field(..., description="Document title")
    content: str = Field(..., description="Rich-text body with embedded asset references")
    asset_ids: list[str] = Field(default_factory=list, description="Referenced asset IDs")
    created_at: datetime = Field(default_factory=datetime.now, description="Creation timestamp")
    updated_at: datetime | None = Field(default=None, description="Last modification timestamp")
    updated_by: str | None = Field(default=None, description="'user' or 'system'")

    def references(self) -> set[str]:
        """Return the stored reference list as a set."""
        return set(self.asset_ids)
