"""
Services for docassets.

High-level business logic services:
- DocumentService: Unified interface for uploads and document operations
- Reconciler: Create/update/delete protocols over asset storage
- GarbageCollector: Staging reaper, orphan sweep and reference resync
"""

from docassets.services.document_service import DocumentService
from docassets.services.garbage_collector import GarbageCollector
from docassets.services.reconciler import Reconciler

__all__ = [
    "DocumentService",
    "Reconciler",
    "GarbageCollector",
]
