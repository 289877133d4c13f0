"""
Base interface for the document corpus.

The corpus is the source of truth for which assets are referenced. Listing
order is insertion (creation) order; lookup by ID is O(1) amortized.
"""

from abc import ABC, abstractmethod

from docassets.models.document import Document


class DocumentStore(ABC):
    """Abstract base class for document storage implementations."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the store (create tables/schema)."""
        pass

    @abstractmethod
    async def add(self, document: Document) -> None:
        """
        Insert a new document at the end of the corpus.

        Args:
            document: Document to store

        Raises:
            DocumentStoreError: If the write fails or the ID already exists
        """
        pass

    @abstractmethod
    async def get(self, document_id: str) -> Document | None:
        """
        Retrieve a document by ID.

        Args:
            document_id: Document identifier

        Returns:
            Document or None if not found
        """
        pass

    @abstractmethod
    async def update(self, document: Document) -> None:
        """
        Replace an existing document, keeping its position in the corpus.

        Content and reference list are written together in this one call.

        Args:
            document: Updated document

        Raises:
            NotFoundError: If the document no longer exists
            DocumentStoreError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, document_id: str) -> bool:
        """
        Remove a document.

        Args:
            document_id: Document identifier

        Returns:
            True if a document was removed
        """
        pass

    @abstractmethod
    async def list_documents(self) -> list[Document]:
        """
        All documents in creation order.

        Returns:
            List of documents
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        """Number of stored documents."""
        pass

    async def close(self) -> None:
        """Release resources."""
        pass
