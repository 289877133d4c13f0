"""
Factory for creating document store backends.
"""

from docassets.config import Config
from docassets.core.document_store.base import DocumentStore
from docassets.core.document_store.memory import InMemoryDocumentStore
from docassets.core.document_store.sqlite_store import SQLiteDocumentStore
from docassets.utils.exceptions import ConfigurationError


class DocumentStoreFactory:
    """Factory for creating document store backends from configuration."""

    @staticmethod
    def create(config: Config) -> DocumentStore:
        """
        Create document store from configuration.

        Args:
            config: Main configuration object

        Returns:
            Document store instance

        Raises:
            ConfigurationError: If backend is not supported
        """
        if config.document_backend == "memory":
            return InMemoryDocumentStore()
        elif config.document_backend == "sqlite":
            return SQLiteDocumentStore(db_path=config.sqlite.db_path)
        else:
            raise ConfigurationError(
                f"Unsupported document backend: {config.document_backend}",
                context={"document_backend": config.document_backend},
            )
