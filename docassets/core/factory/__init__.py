"""
Factory modules for creating docassets components.

Provides modular factories for the Asset Store and the Document Store.
"""

from docassets.core.factory.asset_factory import AssetStoreFactory
from docassets.core.factory.document_factory import DocumentStoreFactory

__all__ = [
    "AssetStoreFactory",
    "DocumentStoreFactory",
]
