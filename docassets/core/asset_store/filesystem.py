"""
Filesystem asset store.

Staging and durable areas are two directories on the same filesystem so
promotion is a single atomic rename. Filenames equal asset identifiers.
Blocking calls run in worker threads to keep the event loop free.
"""

import asyncio
import os
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from docassets.core.asset_store.base import AssetStore
from docassets.core.references.extractor import ReferenceExtractor
from docassets.core.staging_registry.base import StagingRegistry
from docassets.models.asset import (
    Asset,
    AssetLocation,
    PromotionResult,
    PromotionStatus,
    StagedEntry,
)
from docassets.utils.exceptions import StorageError
from docassets.utils.id_generator import generate_asset_id
from docassets.utils.logger import get_logger

logger = get_logger(__name__)

# Hidden names are never listed and never addressable as assets
PARTIAL_PREFIX = "."
# In-progress writes live beside the staging area, outside every served directory
PARTIAL_DIR_NAME = ".incoming"


def is_safe_asset_id(asset_id: str) -> bool:
    """
    Check that an identifier names a plain file inside a storage area.

    Args:
        asset_id: Identifier as found in content or in a request

    Returns:
        False for empty, hidden, or path-like identifiers
    """
    if not asset_id or asset_id.startswith(PARTIAL_PREFIX):
        return False
    return not any(sep in asset_id for sep in ("/", "\\", "\x00"))


class FilesystemAssetStore(AssetStore):
    """
    Asset store over a staging directory and a durable directory.

    Features:
    - Writes land in a temp file outside the served areas, then are renamed into place
    - Promotion is one os.rename (never copy+delete)
    - Missing files on delete/promote are reported, not raised
    - Staged files left by a previous process are re-registered on startup
    """

    def __init__(
        self,
        staging_dir: str | Path,
        durable_dir: str | Path,
        registry: StagingRegistry,
        extractor: ReferenceExtractor | None = None,
        clock: Callable[[], datetime] = datetime.now,
        partial_dir: str | Path | None = None,
    ):
        """
        Initialize filesystem asset store.

        Args:
            staging_dir: Directory holding staged uploads
            durable_dir: Directory holding durable assets
            registry: Staging registry shared with the staging reaper
            extractor: URL layout used to build asset references
            clock: Time source for arrival timestamps
            partial_dir: Directory for in-progress writes; must be on the same
                filesystem as staging_dir (default: sibling `.incoming`)
        """
        self.staging_dir = Path(staging_dir)
        self.durable_dir = Path(durable_dir)
        self.partial_dir = (
            Path(partial_dir) if partial_dir else self.staging_dir.parent / PARTIAL_DIR_NAME
        )
        self.registry = registry
        self.extractor = extractor or ReferenceExtractor()
        self.clock = clock

    def _dir_for(self, location: AssetLocation) -> Path:
        return self.staging_dir if location == AssetLocation.STAGING else self.durable_dir

    def path_for(self, asset_id: str, location: AssetLocation) -> Path:
        """Physical path of an asset in the given area."""
        return self._dir_for(location) / asset_id

    async def initialize(self) -> None:
        """Create both areas, drop interrupted writes and register unknown staged files."""
        try:
            await asyncio.to_thread(self.partial_dir.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(self.staging_dir.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(self.durable_dir.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Failed to create storage directories: {e}",
                context={"staging_dir": str(self.staging_dir), "durable_dir": str(self.durable_dir)},
            ) from e

        discarded = await self.discard_partial_writes()
        if discarded:
            logger.info(f"Discarded {discarded} interrupted uploads")

        recovered = await self.recover_staged()
        logger.info(
            f"Asset store ready (staging={self.staging_dir}, durable={self.durable_dir}, "
            f"recovered={recovered})"
        )

    async def discard_partial_writes(self) -> int:
        """
        Delete temp files left by writes that never completed.

        Returns:
            Number of files removed
        """

        def _discard() -> int:
            removed = 0
            with os.scandir(self.partial_dir) as it:
                for entry in it:
                    if entry.is_file():
                        os.remove(entry.path)
                        removed += 1
            return removed

        try:
            return await asyncio.to_thread(_discard)
        except OSError as e:
            logger.warning(f"Cannot clean interrupted uploads in {self.partial_dir}: {e}")
            return 0

    async def recover_staged(self) -> int:
        """
        Register staged files that the registry does not know about.

        The file's modification time stands in for its arrival time, so
        uploads abandoned before a restart still age out.

        Returns:
            Number of recovered entries
        """
        recovered = 0
        for asset_id in await self.list_staged():
            if await self.registry.get(asset_id) is not None:
                continue
            path = self.path_for(asset_id, AssetLocation.STAGING)
            try:
                stat = await asyncio.to_thread(path.stat)
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning(f"Cannot stat staged file {asset_id}: {e}")
                continue

            await self.registry.add(
                StagedEntry(
                    asset_id=asset_id,
                    path=str(path),
                    size_bytes=stat.st_size,
                    uploaded_at=datetime.fromtimestamp(stat.st_mtime),
                )
            )
            recovered += 1

        if recovered:
            logger.info(f"Recovered {recovered} staged uploads into the registry")
        return recovered

    async def stage(self, data: bytes, original_name: str) -> Asset:
        asset_id = generate_asset_id(original_name)
        final_path = self.path_for(asset_id, AssetLocation.STAGING)
        partial_path = self.partial_dir / f"{asset_id}.part"

        def _write() -> None:
            try:
                with open(partial_path, "wb") as f:
                    f.write(data)
                os.replace(partial_path, final_path)
            except OSError:
                partial_path.unlink(missing_ok=True)
                raise

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            logger.error(f"Failed to stage upload {original_name!r}: {e}")
            raise StorageError(
                f"Failed to store upload: {e}",
                context={"asset_id": asset_id, "original_name": original_name},
            ) from e

        uploaded_at = self.clock()
        await self.registry.add(
            StagedEntry(
                asset_id=asset_id,
                original_name=original_name,
                path=str(final_path),
                size_bytes=len(data),
                uploaded_at=uploaded_at,
            )
        )
        logger.debug(f"Staged {asset_id} ({len(data)} bytes)")

        return Asset(
            id=asset_id,
            location=AssetLocation.STAGING,
            original_name=original_name,
            size_bytes=len(data),
            uploaded_at=uploaded_at,
            url=self.extractor.staging_url(asset_id),
        )

    async def promote(self, asset_id: str) -> PromotionResult:
        if not is_safe_asset_id(asset_id):
            return PromotionResult(asset_id=asset_id, status=PromotionStatus.NOT_FOUND)

        source = self.path_for(asset_id, AssetLocation.STAGING)
        target = self.path_for(asset_id, AssetLocation.DURABLE)

        try:
            await asyncio.to_thread(os.rename, source, target)
        except FileNotFoundError:
            # Lost a race with another promote or the reaper; drop any stale entry
            await self.registry.remove(asset_id)
            if await self.exists(asset_id, AssetLocation.DURABLE):
                return PromotionResult(asset_id=asset_id, status=PromotionStatus.ALREADY_SETTLED)
            return PromotionResult(asset_id=asset_id, status=PromotionStatus.NOT_FOUND)
        except OSError as e:
            raise StorageError(
                f"Failed to promote asset {asset_id}: {e}",
                context={"asset_id": asset_id},
            ) from e

        entry = await self.registry.get(asset_id)
        await self.registry.remove(asset_id)
        logger.debug(f"Promoted {asset_id} to durable storage")

        asset = Asset(
            id=asset_id,
            location=AssetLocation.DURABLE,
            original_name=entry.original_name if entry else "",
            size_bytes=entry.size_bytes if entry else 0,
            uploaded_at=entry.uploaded_at if entry else self.clock(),
            url=self.extractor.durable_url(asset_id),
        )
        return PromotionResult(asset_id=asset_id, status=PromotionStatus.PROMOTED, asset=asset)

    async def _unlink(self, asset_id: str, location: AssetLocation) -> bool:
        if not is_safe_asset_id(asset_id):
            return False
        path = self.path_for(asset_id, location)
        try:
            await asyncio.to_thread(os.remove, path)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(
                f"Failed to delete {location.value} asset {asset_id}: {e}",
                context={"asset_id": asset_id, "location": location.value},
            ) from e
        return True

    async def delete_durable(self, asset_id: str) -> bool:
        removed = await self._unlink(asset_id, AssetLocation.DURABLE)
        if removed:
            logger.debug(f"Deleted durable asset {asset_id}")
        return removed

    async def delete_staged(self, asset_id: str) -> bool:
        # On failure the entry stays so the next reaper run retries
        removed = await self._unlink(asset_id, AssetLocation.STAGING)
        await self.registry.remove(asset_id)
        if removed:
            logger.debug(f"Deleted staged asset {asset_id}")
        return removed

    async def _list(self, location: AssetLocation) -> list[str]:
        directory = self._dir_for(location)

        def _scan() -> list[str]:
            if not directory.exists():
                return []
            with os.scandir(directory) as it:
                return sorted(
                    entry.name
                    for entry in it
                    if entry.is_file() and not entry.name.startswith(PARTIAL_PREFIX)
                )

        try:
            return await asyncio.to_thread(_scan)
        except OSError as e:
            raise StorageError(
                f"Failed to list {location.value} assets: {e}",
                context={"directory": str(directory)},
            ) from e

    async def list_durable(self) -> list[str]:
        return await self._list(AssetLocation.DURABLE)

    async def list_staged(self) -> list[str]:
        return await self._list(AssetLocation.STAGING)

    async def exists(self, asset_id: str, location: AssetLocation) -> bool:
        if not is_safe_asset_id(asset_id):
            return False
        return await asyncio.to_thread(self.path_for(asset_id, location).is_file)
