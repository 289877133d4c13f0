"""
Tests for the filesystem asset store.
"""

import asyncio
import os
from datetime import datetime
from unittest.mock import patch

import pytest

from docassets.core.asset_store import AssetStore, FilesystemAssetStore, is_safe_asset_id
from docassets.core.staging_registry import InMemoryStagingRegistry
from docassets.models.asset import AssetLocation, PromotionStatus
from docassets.utils.exceptions import StorageError


@pytest.mark.unit
@pytest.mark.asyncio
class TestStage:
    """Tests for staging uploads."""

    async def test_abstract_instantiation(self):
        """Test that abstract class cannot be instantiated."""
        with pytest.raises(TypeError, match="Can't instantiate abstract class"):
            AssetStore()

    async def test_stage_writes_file_and_registers(self, asset_store, registry, png_bytes, clock):
        """Test stage persists bytes under staging and records arrival time."""
        asset = await asset_store.stage(png_bytes, "photo.PNG")

        assert asset.location == AssetLocation.STAGING
        assert asset.id.endswith(".png")
        assert asset.url == f"/uploads/temp/{asset.id}"
        assert asset.size_bytes == len(png_bytes)
        assert asset_store.path_for(asset.id, AssetLocation.STAGING).read_bytes() == png_bytes

        entry = await registry.get(asset.id)
        assert entry is not None
        assert entry.uploaded_at == clock.now
        assert entry.original_name == "photo.PNG"

    async def test_stage_generates_unique_ids(self, asset_store, png_bytes):
        """Test identifiers are never reused for identical uploads."""
        ids = {(await asset_store.stage(png_bytes, "same.png")).id for _ in range(20)}

        assert len(ids) == 20
        assert sorted(ids) == await asset_store.list_staged()

    async def test_stage_failure_raises_storage_error_and_leaves_nothing(
        self, asset_store, registry, png_bytes
    ):
        """Test a failed write is surfaced and no partial file stays visible."""
        with patch("docassets.core.asset_store.filesystem.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StorageError, match="disk full"):
                await asset_store.stage(png_bytes, "photo.png")

        assert await asset_store.list_staged() == []
        assert os.listdir(asset_store.staging_dir) == []
        assert os.listdir(asset_store.partial_dir) == []
        assert await registry.count() == 0

    async def test_in_progress_write_stays_outside_staging(self, asset_store, png_bytes):
        """Test bytes being written never appear in the staging directory."""
        seen: list[list[str]] = []
        real_replace = os.replace

        def spy_replace(src, dst):
            seen.append(sorted(os.listdir(asset_store.staging_dir)))
            assert os.path.dirname(src) == str(asset_store.partial_dir)
            real_replace(src, dst)

        with patch("docassets.core.asset_store.filesystem.os.replace", side_effect=spy_replace):
            asset = await asset_store.stage(png_bytes, "photo.png")

        assert seen == [[]]
        assert os.listdir(asset_store.staging_dir) == [asset.id]
        assert os.listdir(asset_store.partial_dir) == []
        assert not asset_store.partial_dir.is_relative_to(asset_store.staging_dir)
        assert not asset_store.partial_dir.is_relative_to(asset_store.durable_dir)


@pytest.mark.unit
@pytest.mark.asyncio
class TestPromote:
    """Tests for staging-to-durable promotion."""

    async def test_promote_moves_file(self, asset_store, registry, png_bytes):
        """Test promotion relocates the file and clears the registry entry."""
        asset = await asset_store.stage(png_bytes, "a.png")

        result = await asset_store.promote(asset.id)

        assert result.status == PromotionStatus.PROMOTED
        assert result.promoted
        assert result.asset.location == AssetLocation.DURABLE
        assert result.asset.url == f"/uploads/permanent/{asset.id}"
        assert await asset_store.exists(asset.id, AssetLocation.DURABLE)
        assert not await asset_store.exists(asset.id, AssetLocation.STAGING)
        assert await registry.get(asset.id) is None

    async def test_promote_twice_reports_already_settled(self, asset_store, png_bytes):
        """Test promotion idempotence: one physical file, second call settles."""
        asset = await asset_store.stage(png_bytes, "a.png")

        first = await asset_store.promote(asset.id)
        second = await asset_store.promote(asset.id)

        assert first.status == PromotionStatus.PROMOTED
        assert second.status == PromotionStatus.ALREADY_SETTLED
        assert await asset_store.list_durable() == [asset.id]
        assert await asset_store.list_staged() == []

    async def test_concurrent_promotes_single_winner(self, asset_store, png_bytes):
        """Test concurrent promotes of one asset are safe."""
        asset = await asset_store.stage(png_bytes, "a.png")

        results = await asyncio.gather(*(asset_store.promote(asset.id) for _ in range(5)))

        statuses = [r.status for r in results]
        assert statuses.count(PromotionStatus.PROMOTED) == 1
        assert statuses.count(PromotionStatus.ALREADY_SETTLED) == 4
        assert await asset_store.list_durable() == [asset.id]

    async def test_promote_unknown_reports_not_found(self, asset_store):
        """Test promoting a never-staged asset is not an error."""
        result = await asset_store.promote("ghost.png")

        assert result.status == PromotionStatus.NOT_FOUND
        assert result.asset is None

    async def test_promote_after_reap_reports_not_found(self, asset_store, png_bytes):
        """Test the reaper/promote race resolves to NOT_FOUND."""
        asset = await asset_store.stage(png_bytes, "a.png")
        await asset_store.delete_staged(asset.id)

        result = await asset_store.promote(asset.id)

        assert result.status == PromotionStatus.NOT_FOUND

    @pytest.mark.parametrize("asset_id", ["", "../secret", "a/b.png", ".hidden.part", "..\\x"])
    async def test_promote_rejects_unsafe_ids(self, asset_store, asset_id):
        """Test path-like identifiers are never resolved."""
        result = await asset_store.promote(asset_id)

        assert result.status == PromotionStatus.NOT_FOUND

    async def test_promote_os_failure_raises_storage_error(self, asset_store, png_bytes):
        """Test non-absence OS errors surface as StorageError."""
        asset = await asset_store.stage(png_bytes, "a.png")

        with patch(
            "docassets.core.asset_store.filesystem.os.rename",
            side_effect=PermissionError("denied"),
        ):
            with pytest.raises(StorageError):
                await asset_store.promote(asset.id)

        assert await asset_store.exists(asset.id, AssetLocation.STAGING)


@pytest.mark.unit
@pytest.mark.asyncio
class TestDelete:
    """Tests for best-effort deletion."""

    async def test_delete_durable(self, asset_store, png_bytes):
        """Test durable deletion removes the file."""
        asset = await asset_store.stage(png_bytes, "a.png")
        await asset_store.promote(asset.id)

        assert await asset_store.delete_durable(asset.id) is True
        assert await asset_store.list_durable() == []

    async def test_delete_durable_missing_is_not_error(self, asset_store):
        """Test double delete is tolerated."""
        assert await asset_store.delete_durable("never-existed.png") is False

    async def test_delete_staged_removes_registry_entry(self, asset_store, registry, png_bytes):
        """Test staged deletion clears file and registry entry."""
        asset = await asset_store.stage(png_bytes, "a.png")

        assert await asset_store.delete_staged(asset.id) is True
        assert await asset_store.list_staged() == []
        assert await registry.get(asset.id) is None

        assert await asset_store.delete_staged(asset.id) is False

    async def test_delete_staged_failure_keeps_entry_for_retry(
        self, asset_store, registry, png_bytes
    ):
        """Test a failed staged delete leaves the entry for the next reaper run."""
        asset = await asset_store.stage(png_bytes, "a.png")

        with patch(
            "docassets.core.asset_store.filesystem.os.remove",
            side_effect=PermissionError("busy"),
        ):
            with pytest.raises(StorageError):
                await asset_store.delete_staged(asset.id)

        assert await registry.get(asset.id) is not None

    async def test_listing_ignores_partial_writes(self, asset_store, png_bytes):
        """Test hidden files in staging are not listed."""
        (asset_store.staging_dir / ".inflight.png.part").write_bytes(png_bytes)

        assert await asset_store.list_staged() == []


@pytest.mark.unit
@pytest.mark.asyncio
class TestRecovery:
    """Tests for staging recovery on startup."""

    async def test_initialize_recovers_unregistered_staged_files(self, config, png_bytes):
        """Test uploads left by a previous process are registered for reaping."""
        staging_dir = config.storage.staging_dir
        staging_dir.mkdir(parents=True)
        leftover = staging_dir / "leftover.png"
        leftover.write_bytes(png_bytes)
        os.utime(leftover, (1_700_000_000, 1_700_000_000))

        registry = InMemoryStagingRegistry()
        store = FilesystemAssetStore(
            staging_dir=staging_dir,
            durable_dir=config.storage.durable_dir,
            registry=registry,
        )
        await store.initialize()

        entry = await registry.get("leftover.png")
        assert entry is not None
        assert entry.uploaded_at == datetime.fromtimestamp(1_700_000_000)
        assert entry.size_bytes == len(png_bytes)
        assert config.storage.durable_dir.is_dir()

    async def test_initialize_discards_interrupted_writes(self, config, png_bytes):
        """Test temp files of writes cut short by a crash are removed."""
        store = FilesystemAssetStore(
            staging_dir=config.storage.staging_dir,
            durable_dir=config.storage.durable_dir,
            registry=InMemoryStagingRegistry(),
        )
        store.partial_dir.mkdir(parents=True)
        (store.partial_dir / "cut-short.png.part").write_bytes(png_bytes)

        await store.initialize()

        assert os.listdir(store.partial_dir) == []
        assert await store.list_staged() == []

    async def test_recovery_keeps_existing_entries(self, asset_store, registry, png_bytes, clock):
        """Test recovery does not overwrite known arrival times."""
        asset = await asset_store.stage(png_bytes, "a.png")

        assert await asset_store.recover_staged() == 0
        assert (await registry.get(asset.id)).uploaded_at == clock.now


@pytest.mark.unit
class TestSafeIds:
    """Tests for identifier safety checks."""

    def test_generated_ids_are_safe(self):
        """Test normal identifiers pass."""
        assert is_safe_asset_id("0b4e2a1c-1718000000000.png")

    @pytest.mark.parametrize("asset_id", ["", ".", "..", "../x", "a/b", "a\\b", ".part", "a\x00b"])
    def test_unsafe_ids(self, asset_id):
        """Test hidden and path-like identifiers fail."""
        assert not is_safe_asset_id(asset_id)
