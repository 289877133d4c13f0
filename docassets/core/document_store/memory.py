"""
In-memory document store.

Documents live only as long as the process; this is the default backend.
"""

from docassets.core.document_store.base import DocumentStore
from docassets.models.document import Document
from docassets.utils.exceptions import DocumentStoreError, NotFoundError


class InMemoryDocumentStore(DocumentStore):
    """Dict-backed corpus (dicts keep insertion order)."""

    def __init__(self):
        self._documents: dict[str, Document] = {}

    async def initialize(self) -> None:
        pass

    async def add(self, document: Document) -> None:
        if document.id in self._documents:
            raise DocumentStoreError(
                f"Document already exists: {document.id}", context={"document_id": document.id}
            )
        self._documents[document.id] = document.model_copy(deep=True)

    async def get(self, document_id: str) -> Document | None:
        document = self._documents.get(document_id)
        return document.model_copy(deep=True) if document else None

    async def update(self, document: Document) -> None:
        if document.id not in self._documents:
            raise NotFoundError(
                f"Document not found: {document.id}", context={"document_id": document.id}
            )
        self._documents[document.id] = document.model_copy(deep=True)

    async def delete(self, document_id: str) -> bool:
        return self._documents.pop(document_id, None) is not None

    async def list_documents(self) -> list[Document]:
        return [document.model_copy(deep=True) for document in self._documents.values()]

    async def count(self) -> int:
        return len(self._documents)
