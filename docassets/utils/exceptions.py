"""
Custom exception hierarchy for docassets.

Provides structured error types for better error handling and debugging.
All exceptions inherit from DocAssetsError for easy catching.
"""


class DocAssetsError(Exception):
    """
    Base exception for all docassets errors.
    All custom exceptions should inherit from this class.
    """

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize docassets error.
        Args:
            message: Error message
            context: Optional context dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ValidationError(DocAssetsError):
    """
    Validation errors.
    Raised when caller input is malformed (missing title, bad MIME type, oversized upload).
    """

    pass


class UploadTooLargeError(ValidationError):
    """
    Upload size errors.
    Raised when an upload exceeds the configured maximum size.
    """

    pass


class NotFoundError(DocAssetsError):
    """
    Resource not found errors.
    Raised when a targeted document doesn't exist.
    """

    pass


class StorageError(DocAssetsError):
    """
    Storage operation errors.
    Raised when an asset write, rename or delete fails at the OS level.
    """

    pass


class DocumentStoreError(StorageError):
    """
    Document persistence errors.
    Raised when the document corpus cannot be read or written.
    """

    pass


class ConfigurationError(DocAssetsError):
    """
    Configuration errors.
    Raised when configuration is invalid or names an unknown backend.
    """

    pass
