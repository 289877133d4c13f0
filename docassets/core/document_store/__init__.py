"""
Document store implementations for docassets.

Provides abstract base and concrete implementations for the document corpus.

Available backends:
- InMemoryDocumentStore: Process-local corpus (default)
- SQLiteDocumentStore: Persistent corpus backed by aiosqlite
"""

from docassets.core.document_store.base import DocumentStore
from docassets.core.document_store.memory import InMemoryDocumentStore
from docassets.core.document_store.sqlite_store import SQLiteDocumentStore

__all__ = [
    "DocumentStore",
    "InMemoryDocumentStore",
    "SQLiteDocumentStore",
]
