"""
Asset store implementations for docassets.

Provides abstract base and concrete implementations for asset storage.

Available backends:
- FilesystemAssetStore: Staging and durable directories on local disk
"""

from docassets.core.asset_store.base import AssetStore
from docassets.core.asset_store.filesystem import FilesystemAssetStore, is_safe_asset_id

__all__ = [
    "AssetStore",
    "FilesystemAssetStore",
    "is_safe_asset_id",
]
