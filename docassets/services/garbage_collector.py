"""
Garbage Collector - Reclaims storage leaked by abandoned uploads or drifted state.

Three independent sweeps:
1. Staging reaper (frequent): delete staged uploads older than the TTL
2. Orphan sweep (daily): delete durable assets no document references
3. Reference resync (weekly): repair stored reference lists that drifted from content

Every sweep is idempotent, processes items one by one, records per-item
failures and never raises. A sweep that cannot complete is retried at its
next scheduled tick.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from datetime import datetime

from docassets.config import GCConfig
from docassets.core.asset_store.base import AssetStore
from docassets.core.document_store.base import DocumentStore
from docassets.core.references.extractor import ReferenceExtractor
from docassets.core.staging_registry.base import StagingRegistry
from docassets.models.maintenance import SweepResult
from docassets.services.reconciler import Reconciler
from docassets.utils.exceptions import NotFoundError
from docassets.utils.logger import get_logger

logger = get_logger(__name__)

STAGING_REAPER = "staging_reaper"
ORPHAN_SWEEP = "orphan_sweep"
REFERENCE_RESYNC = "reference_resync"


class GarbageCollector:
    """
    Runs the cleanup sweeps on demand or on background timers.

    The run-once coroutines (`reap_staging`, `sweep_orphans`,
    `resync_references`) are what the timers call; tests and the
    maintenance API call them directly.
    """

    def __init__(
        self,
        asset_store: AssetStore,
        staging_registry: StagingRegistry,
        document_store: DocumentStore,
        extractor: ReferenceExtractor,
        config: GCConfig | None = None,
        reconciler: Reconciler | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize garbage collector.

        Args:
            asset_store: Staging/durable asset storage
            staging_registry: Registry of staged uploads
            document_store: Document corpus (source of live references)
            extractor: Reference parser for the configured URL layout
            config: Sweep TTL and intervals
            reconciler: Reconciler whose in-flight assets count as live
            clock: Time source
        """
        self.asset_store = asset_store
        self.staging_registry = staging_registry
        self.document_store = document_store
        self.extractor = extractor
        self.config = config or GCConfig()
        self.reconciler = reconciler
        self.clock = clock

        self._worker_tasks: dict[str, asyncio.Task] = {}

    # ═══════════════════════════════════════════════════════════
    # SWEEPS
    # ═══════════════════════════════════════════════════════════

    async def reap_staging(self) -> SweepResult:
        """
        Delete staged uploads that were never attached to a saved document.

        Returns:
            SweepResult listing reaped asset IDs
        """
        result = SweepResult(sweep=STAGING_REAPER, started_at=self.clock())
        started = time.perf_counter()
        logger.info("Reaping abandoned staged uploads")

        try:
            entries = await self.staging_registry.list_entries()
        except Exception as e:
            return self._abort(result, started, e)

        now = self.clock()
        result.scanned = len(entries)

        for entry in entries:
            if not entry.is_expired(now, self.config.staging_ttl_seconds):
                continue
            try:
                if await self.asset_store.delete_staged(entry.asset_id):
                    result.affected.append(entry.asset_id)
                    logger.debug(f"Reaped staged upload: {entry.asset_id}")
                else:
                    logger.debug(f"Staged upload {entry.asset_id} already gone")
            except Exception as e:
                logger.error(f"Failed to reap staged upload {entry.asset_id}: {e}")
                result.failed[entry.asset_id] = str(e)

        return self._finish(result, started)

    async def sweep_orphans(self, dry_run: bool = False) -> SweepResult:
        """
        Delete durable assets that no document references.

        The live set is the union of every document's stored reference list
        and the references re-extracted from its content, plus assets held
        by in-flight reconciliations.

        Args:
            dry_run: If True, only report what would be deleted

        Returns:
            SweepResult listing orphaned (and, unless dry_run, deleted) IDs
        """
        result = SweepResult(sweep=ORPHAN_SWEEP, started_at=self.clock())
        started = time.perf_counter()
        logger.info("Sweeping orphaned durable assets")

        # Listing before reading live references keeps freshly promoted assets safe
        try:
            durable = await self.asset_store.list_durable()
            live = self.reconciler.in_flight() if self.reconciler else set()
            live |= await self.live_asset_ids(include_content=True)
        except Exception as e:
            return self._abort(result, started, e)

        result.scanned = len(durable)

        for asset_id in durable:
            if asset_id in live:
                continue
            if dry_run:
                result.affected.append(asset_id)
                continue
            try:
                await self.asset_store.delete_durable(asset_id)
                result.affected.append(asset_id)
                logger.debug(f"Deleted orphaned asset: {asset_id}")
            except Exception as e:
                logger.error(f"Failed to delete orphaned asset {asset_id}: {e}")
                result.failed[asset_id] = str(e)

        return self._finish(result, started)

    async def resync_references(self) -> SweepResult:
        """
        Rewrite stored reference lists that no longer match document content.

        Returns:
            SweepResult listing repaired document IDs
        """
        result = SweepResult(sweep=REFERENCE_RESYNC, started_at=self.clock())
        started = time.perf_counter()
        logger.info("Resyncing document reference lists")

        try:
            documents = await self.document_store.list_documents()
        except Exception as e:
            return self._abort(result, started, e)

        result.scanned = len(documents)

        for snapshot in documents:
            if snapshot.references() == self.extractor.extract(snapshot.content):
                continue
            try:
                # Re-read so a concurrent user edit is not overwritten with stale content
                document = await self.document_store.get(snapshot.id)
                if document is None:
                    continue
                actual = self.extractor.extract(document.content)
                if document.references() == actual:
                    continue

                document.asset_ids = sorted(actual)
                document.updated_at = self.clock()
                document.updated_by = "system"
                await self.document_store.update(document)

                result.affected.append(document.id)
                logger.info(f"Resynced asset references for document: {document.title}")
            except NotFoundError:
                continue
            except Exception as e:
                logger.error(f"Failed to resync document {snapshot.id}: {e}")
                result.failed[snapshot.id] = str(e)

        return self._finish(result, started)

    async def run_all(self) -> list[SweepResult]:
        """
        Run every sweep once, resync first so the orphan sweep sees repaired lists.

        Returns:
            One SweepResult per sweep
        """
        return [
            await self.reap_staging(),
            await self.resync_references(),
            await self.sweep_orphans(),
        ]

    async def live_asset_ids(self, include_content: bool = False) -> set[str]:
        """
        Union of asset references across the corpus.

        Args:
            include_content: Also re-extract from content in case lists drifted

        Returns:
            Set of referenced asset IDs
        """
        live: set[str] = set()
        for document in await self.document_store.list_documents():
            live.update(document.asset_ids)
            if include_content:
                live.update(self.extractor.extract(document.content))
        return live

    def _finish(self, result: SweepResult, started: float) -> SweepResult:
        result.duration_ms = (time.perf_counter() - started) * 1000
        logger.bind(sweep=result.sweep, duration_ms=result.duration_ms).info(
            f"Sweep {result.sweep} complete - scanned: {result.scanned}, "
            f"affected: {len(result.affected)}, failed: {len(result.failed)}"
        )
        return result

    def _abort(self, result: SweepResult, started: float, error: Exception) -> SweepResult:
        result.error = str(error)
        result.duration_ms = (time.perf_counter() - started) * 1000
        logger.bind(sweep=result.sweep, error_type=type(error).__name__).error(
            f"Sweep {result.sweep} could not run: {error}"
        )
        return result

    # ═══════════════════════════════════════════════════════════
    # BACKGROUND WORKERS
    # ═══════════════════════════════════════════════════════════

    def start_background_workers(self) -> None:
        """Start one timer task per sweep using the configured intervals."""
        schedule: dict[str, tuple[float, Callable[[], Awaitable[SweepResult]]]] = {
            STAGING_REAPER: (self.config.reaper_interval_seconds, self.reap_staging),
            ORPHAN_SWEEP: (self.config.orphan_sweep_interval_seconds, self.sweep_orphans),
            REFERENCE_RESYNC: (self.config.resync_interval_seconds, self.resync_references),
        }
        for name, (interval, sweep) in schedule.items():
            task = self._worker_tasks.get(name)
            if task is None or task.done():
                self._worker_tasks[name] = asyncio.create_task(
                    self._sweep_worker(name, interval, sweep)
                )
        logger.info("Garbage collection workers started")

    async def stop_background_workers(self) -> None:
        """Cancel all timer tasks and wait for them to finish."""
        tasks = [task for task in self._worker_tasks.values() if not task.done()]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._worker_tasks.clear()
        logger.info("Garbage collection workers stopped")

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._worker_tasks.values())

    async def _sweep_worker(
        self,
        name: str,
        interval_seconds: float,
        sweep: Callable[[], Awaitable[SweepResult]],
    ) -> None:
        """
        Background loop: wait one interval, run the sweep, repeat.

        Args:
            name: Sweep name for logging
            interval_seconds: Seconds between runs
            sweep: Run-once coroutine
        """
        while True:
            try:
                await asyncio.sleep(interval_seconds)
                await sweep()
            except asyncio.CancelledError:
                logger.info(f"Background {name} worker stopped")
                raise
            except Exception as e:
                logger.error(f"Error in {name} worker: {e}")
