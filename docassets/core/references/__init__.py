"""Asset reference parsing for document content."""

from docassets.core.references.extractor import (
    DEFAULT_DURABLE_PREFIX,
    DEFAULT_STAGING_PREFIX,
    ReferenceExtractor,
    extract_asset_ids,
)

__all__ = [
    "ReferenceExtractor",
    "extract_asset_ids",
    "DEFAULT_STAGING_PREFIX",
    "DEFAULT_DURABLE_PREFIX",
]
