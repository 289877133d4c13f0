"""
Data models for docassets.

Core models:
- Asset, StagedEntry: Uploaded images and staging registry records
- AssetLocation, PromotionStatus: Storage area and promotion outcome enums
- PromotionResult: Result of promoting one asset
- Document: Rich-text document with its materialized reference list
- ReconcileResult, SweepResult, StorageStats: Service results
"""

from docassets.models.asset import (
    Asset,
    AssetLocation,
    PromotionResult,
    PromotionStatus,
    StagedEntry,
)
from docassets.models.document import Document
from docassets.models.maintenance import ReconcileResult, StorageStats, SweepResult

__all__ = [
    # Asset models
    "Asset",
    "AssetLocation",
    "PromotionStatus",
    "PromotionResult",
    "StagedEntry",
    # Document model
    "Document",
    # Results
    "ReconcileResult",
    "SweepResult",
    "StorageStats",
]
