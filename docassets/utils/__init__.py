"""Utility modules for docassets."""

from docassets.utils.exceptions import (
    ConfigurationError,
    DocAssetsError,
    DocumentStoreError,
    NotFoundError,
    StorageError,
    UploadTooLargeError,
    ValidationError,
)
from docassets.utils.id_generator import asset_extension, generate_asset_id, generate_document_id
from docassets.utils.logger import configure_logging, get_logger, setup_logging

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    "configure_logging",
    # ID Generators
    "asset_extension",
    "generate_asset_id",
    "generate_document_id",
    # Exceptions
    "DocAssetsError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
    "DocumentStoreError",
    "UploadTooLargeError",
    "ConfigurationError",
]
