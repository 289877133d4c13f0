"""
Reconciler - Keeps asset storage in line with document references.

Three protocols:
1. Create: promote every referenced staged asset, rewrite references to durable form
2. Update: create protocol on the new content, then delete assets the edit dropped
3. Delete: delete every durable asset the document owned

Asset bookkeeping never fails a document operation: a promote or delete that
goes wrong is logged and reported in the result, and the document is saved
or removed anyway.
"""

from collections import Counter
from collections.abc import Awaitable, Callable, Iterable, Iterator
from contextlib import contextmanager

from docassets.core.asset_store.base import AssetStore
from docassets.core.references.extractor import ReferenceExtractor
from docassets.models.asset import PromotionStatus
from docassets.models.maintenance import ReconcileResult
from docassets.utils.exceptions import StorageError
from docassets.utils.logger import get_logger

logger = get_logger(__name__)


class Reconciler:
    """
    Applies document mutations to asset storage.

    Assets are owned by exactly one document, so dropping a reference
    (edit or delete) deletes the asset.
    """

    def __init__(self, asset_store: AssetStore, extractor: ReferenceExtractor):
        """
        Initialize reconciler.

        Args:
            asset_store: Staging/durable asset storage
            extractor: Reference parser for the configured URL layout
        """
        self.asset_store = asset_store
        self.extractor = extractor
        self._in_flight: Counter[str] = Counter()

    @contextmanager
    def holding(self, asset_ids: Iterable[str]) -> Iterator[None]:
        """
        Mark assets as referenced by a document that is not persisted yet.

        Held from before promotion until the document write completes, so
        the orphan sweep never reclaims an asset in that window.

        Args:
            asset_ids: Identifiers referenced by the in-flight content
        """
        held = list(set(asset_ids))
        self._in_flight.update(held)
        try:
            yield
        finally:
            self._in_flight.subtract(held)
            for asset_id in held:
                if self._in_flight[asset_id] <= 0:
                    del self._in_flight[asset_id]

    def in_flight(self) -> set[str]:
        """Assets currently held by in-progress reconciliations."""
        return set(self._in_flight)

    async def reconcile_create(self, content: str) -> ReconcileResult:
        """
        Promote everything new content references and rewrite its links.

        Args:
            content: Document body as submitted

        Returns:
            ReconcileResult whose `content` only uses durable references and
            whose `asset_ids` is recomputed from that final content
        """
        result = ReconcileResult()

        for asset_id in sorted(self.extractor.extract(content)):
            try:
                promotion = await self.asset_store.promote(asset_id)
            except StorageError as e:
                logger.bind(asset_id=asset_id, operation="promote").error(
                    f"Failed to promote {asset_id}: {e}"
                )
                result.failed[asset_id] = str(e)
                continue

            if promotion.status == PromotionStatus.PROMOTED:
                result.promoted.append(asset_id)
            elif promotion.status == PromotionStatus.ALREADY_SETTLED:
                result.already_settled.append(asset_id)
            else:
                logger.bind(asset_id=asset_id, operation="promote").warning(
                    f"Referenced asset {asset_id} does not exist; keeping dangling reference"
                )
                result.missing.append(asset_id)

        # Rewrite even for failed promotions: the asset may already be durable
        result.content = self.extractor.to_durable(content)
        result.asset_ids = sorted(self.extractor.extract(result.content))

        if result.promoted:
            logger.info(f"Promoted {len(result.promoted)} assets to durable storage")

        return result

    async def reconcile_update(
        self,
        old_asset_ids: list[str] | set[str],
        new_content: str,
        persist: Callable[[ReconcileResult], Awaitable[None]] | None = None,
    ) -> ReconcileResult:
        """
        Reconcile an edited document.

        Args:
            old_asset_ids: Reference list stored before the edit
            new_content: Document body as submitted
            persist: Optional document write run after promotion and before
                any deletion; if it raises, nothing is deleted

        Returns:
            ReconcileResult for the new content, with `deleted` listing the
            dropped assets that were removed from durable storage
        """
        result = await self.reconcile_create(new_content)

        if persist is not None:
            await persist(result)

        removed = set(old_asset_ids) - set(result.asset_ids)
        await self._delete_all(sorted(removed), result)

        logger.info(
            f"Reconciled update - added: {len(result.promoted)}, removed: {len(result.deleted)}"
        )
        return result

    async def reconcile_delete(self, asset_ids: list[str] | set[str]) -> ReconcileResult:
        """
        Delete every durable asset owned by a document being removed.

        Each deletion is attempted independently; failures are collected,
        never raised.

        Args:
            asset_ids: The document's reference list

        Returns:
            ReconcileResult with `deleted` and `failed` filled in
        """
        result = ReconcileResult()
        await self._delete_all(sorted(set(asset_ids)), result)

        if result.failed:
            logger.bind(failed=list(result.failed)).warning(
                f"Document delete left {len(result.failed)} assets behind for the orphan sweep"
            )
        return result

    async def _delete_all(self, asset_ids: list[str], result: ReconcileResult) -> None:
        for asset_id in asset_ids:
            try:
                if await self.asset_store.delete_durable(asset_id):
                    result.deleted.append(asset_id)
                    logger.info(f"Deleted unreferenced asset: {asset_id}")
                else:
                    logger.debug(f"Asset {asset_id} already gone")
            except StorageError as e:
                logger.bind(asset_id=asset_id, operation="delete_durable").error(
                    f"Failed to delete asset {asset_id}: {e}"
                )
                result.failed[asset_id] = str(e)
