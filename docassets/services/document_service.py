"""
Document Service - Unified entry point for uploads and document mutations.

Brings together:
- Asset Store & Staging Registry
- Document Store
- Reconciler (create/update/delete protocols)
- Garbage Collector (background sweeps)
"""

from collections.abc import Callable
from datetime import datetime

from docassets.config import Config
from docassets.core.asset_store.base import AssetStore
from docassets.core.document_store.base import DocumentStore
from docassets.core.factory import AssetStoreFactory, DocumentStoreFactory
from docassets.core.references.extractor import ReferenceExtractor
from docassets.core.staging_registry.base import StagingRegistry
from docassets.models.asset import Asset
from docassets.models.document import Document
from docassets.models.maintenance import ReconcileResult, StorageStats
from docassets.services.garbage_collector import GarbageCollector
from docassets.services.reconciler import Reconciler
from docassets.utils.exceptions import NotFoundError, UploadTooLargeError, ValidationError
from docassets.utils.id_generator import generate_document_id
from docassets.utils.logger import get_logger

logger = get_logger(__name__)


class DocumentService:
    """
    Document and upload operations over the asset lifecycle core.

    Features:
    - Upload boundary checks (MIME type, size) before staging
    - Create/update/delete documents with asset reconciliation
    - Diagnostic statistics for GC health
    - Owns the garbage collector and its background workers
    """

    def __init__(
        self,
        asset_store: AssetStore,
        staging_registry: StagingRegistry,
        document_store: DocumentStore,
        extractor: ReferenceExtractor,
        config: Config,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize Document Service.

        Args:
            asset_store: Staging/durable asset storage
            staging_registry: Registry of staged uploads
            document_store: Document corpus
            extractor: Reference parser for the configured URL layout
            config: Configuration object
            clock: Time source
        """
        self.asset_store = asset_store
        self.staging_registry = staging_registry
        self.document_store = document_store
        self.extractor = extractor
        self.config = config
        self.clock = clock

        self.reconciler = Reconciler(asset_store=asset_store, extractor=extractor)

        self.gc = GarbageCollector(
            asset_store=asset_store,
            staging_registry=staging_registry,
            document_store=document_store,
            extractor=extractor,
            config=config.gc,
            reconciler=self.reconciler,
            clock=clock,
        )

    @classmethod
    def from_config(
        cls, config: Config, clock: Callable[[], datetime] = datetime.now
    ) -> "DocumentService":
        """
        Build the service and its stores from configuration.

        Args:
            config: Configuration object
            clock: Time source

        Returns:
            DocumentService (not yet initialized)
        """
        extractor = AssetStoreFactory.create_extractor(config.storage)
        registry = AssetStoreFactory.create_registry()
        asset_store = AssetStoreFactory.create(config, registry, extractor=extractor, clock=clock)
        document_store = DocumentStoreFactory.create(config)

        return cls(
            asset_store=asset_store,
            staging_registry=registry,
            document_store=document_store,
            extractor=extractor,
            config=config,
            clock=clock,
        )

    async def initialize(self, start_workers: bool | None = None) -> None:
        """
        Initialize stores and optionally start background sweeps.

        Args:
            start_workers: Override config.gc.enable_background_workers
        """
        logger.info("Initializing Document Service")

        await self.asset_store.initialize()
        logger.info("Asset store initialized")

        await self.document_store.initialize()
        logger.info("Document store initialized")

        if start_workers is None:
            start_workers = self.config.gc.enable_background_workers
        if start_workers:
            self.gc.start_background_workers()

        logger.info("Document Service ready")

    # ═══════════════════════════════════════════════════════════
    # UPLOADS
    # ═══════════════════════════════════════════════════════════

    async def stage_upload(self, data: bytes, filename: str, mime_type: str | None) -> Asset:
        """
        Validate and stage an uploaded image.

        Args:
            data: Raw file bytes
            filename: Client-supplied filename
            mime_type: Client-declared content type

        Returns:
            Staged Asset (its `url` is what the editor embeds)

        Raises:
            ValidationError: If the type is not accepted or the payload is empty
            UploadTooLargeError: If the payload exceeds the configured maximum
            StorageError: If the file cannot be written
        """
        allowed = self.config.upload.allowed_mime_prefix
        if not mime_type or not mime_type.lower().startswith(allowed):
            raise ValidationError(
                f"Only {allowed}* uploads are accepted",
                context={"mime_type": mime_type, "filename": filename},
            )
        if not data:
            raise ValidationError("Uploaded file is empty", context={"filename": filename})

        max_bytes = self.config.upload.max_upload_bytes
        if len(data) > max_bytes:
            raise UploadTooLargeError(
                f"Upload exceeds the {max_bytes} byte limit",
                context={"size": len(data), "max_upload_bytes": max_bytes},
            )

        asset = await self.asset_store.stage(data, filename)
        logger.bind(asset_id=asset.id, original_name=filename, size=len(data)).info(
            f"Staged upload {asset.id}"
        )
        return asset

    # ═══════════════════════════════════════════════════════════
    # DOCUMENTS
    # ═══════════════════════════════════════════════════════════

    def _validate(self, title: str | None, content: str | None) -> None:
        if not title or not title.strip():
            raise ValidationError("Title is required")
        if not content or not content.strip():
            raise ValidationError("Content is required")

    async def create_document(self, title: str, content: str) -> Document:
        """
        Create a document, promoting the assets its content references.

        Args:
            title: Document title
            content: Rich-text body, may reference staged assets

        Returns:
            Stored Document with durable references only

        Raises:
            ValidationError: If title or content is missing
            DocumentStoreError: If the document cannot be persisted
        """
        self._validate(title, content)

        with self.reconciler.holding(self.extractor.extract(content)):
            result = await self.reconciler.reconcile_create(content)

            document = Document(
                id=generate_document_id(),
                title=title,
                content=result.content,
                asset_ids=result.asset_ids,
                created_at=self.clock(),
            )
            await self.document_store.add(document)

        logger.bind(document_id=document.id, missing=result.missing).info(
            f"Created document {document.id} with {len(result.promoted)} new assets"
        )
        return document

    async def update_document(self, document_id: str, title: str, content: str) -> Document:
        """
        Update a document, promoting new assets and deleting dropped ones.

        The document is written before any dropped asset is deleted.

        Args:
            document_id: Document to update
            title: New title
            content: New rich-text body

        Returns:
            Updated Document

        Raises:
            ValidationError: If title or content is missing
            NotFoundError: If the document does not exist
            DocumentStoreError: If the document cannot be persisted
        """
        self._validate(title, content)
        document = await self.get_document(document_id)

        async def persist(result: ReconcileResult) -> None:
            document.title = title
            document.content = result.content
            document.asset_ids = result.asset_ids
            document.updated_at = self.clock()
            document.updated_by = "user"
            await self.document_store.update(document)

        with self.reconciler.holding(self.extractor.extract(content)):
            result = await self.reconciler.reconcile_update(
                document.asset_ids, content, persist=persist
            )

        logger.bind(document_id=document_id, failed=result.failed).info(
            f"Updated document {document_id} - added: {len(result.promoted)}, "
            f"removed: {len(result.deleted)}"
        )
        return document

    async def delete_document(self, document_id: str) -> ReconcileResult:
        """
        Delete a document and every durable asset it owns.

        Asset deletion failures are reported in the result and never keep
        the document from being removed.

        Args:
            document_id: Document to delete

        Returns:
            ReconcileResult describing the asset deletions

        Raises:
            NotFoundError: If the document does not exist
            DocumentStoreError: If the document cannot be removed
        """
        document = await self.get_document(document_id)

        result = await self.reconciler.reconcile_delete(document.asset_ids)
        await self.document_store.delete(document_id)

        logger.bind(document_id=document_id, failed=result.failed).info(
            f"Deleted document {document_id} and {len(result.deleted)} assets"
        )
        return result

    async def get_document(self, document_id: str) -> Document:
        """
        Retrieve a document by ID.

        Raises:
            NotFoundError: If the document does not exist
        """
        document = await self.document_store.get(document_id)
        if document is None:
            raise NotFoundError(
                f"Document not found: {document_id}", context={"document_id": document_id}
            )
        return document

    async def list_documents(self) -> list[Document]:
        """All documents in creation order."""
        return await self.document_store.list_documents()

    # ═══════════════════════════════════════════════════════════
    # DIAGNOSTICS
    # ═══════════════════════════════════════════════════════════

    async def get_stats(self) -> StorageStats:
        """
        Snapshot of storage and GC health.

        Returns:
            StorageStats; `orphaned_count` counts durable assets absent from
            every stored reference list
        """
        staged = await self.asset_store.list_staged()
        durable = await self.asset_store.list_durable()
        live = await self.gc.live_asset_ids()

        return StorageStats(
            staging_count=len(staged),
            durable_count=len(durable),
            orphaned_count=sum(1 for asset_id in durable if asset_id not in live),
            document_count=await self.document_store.count(),
            live_asset_count=len(live),
        )

    # LIFECYCLE MANAGEMENT

    async def close(self) -> None:
        """Stop workers and close stores."""
        logger.info("Shutting down Document Service")

        await self.gc.stop_background_workers()

        await self.document_store.close()
        await self.asset_store.close()

        logger.info("Document Service shutdown complete")
