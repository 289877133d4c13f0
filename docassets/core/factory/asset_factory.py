"""
Factory for creating the asset store and its collaborators.
"""

from collections.abc import Callable
from datetime import datetime

from docassets.config import Config, StorageConfig
from docassets.core.asset_store.filesystem import FilesystemAssetStore
from docassets.core.references.extractor import ReferenceExtractor
from docassets.core.staging_registry.base import StagingRegistry
from docassets.core.staging_registry.memory import InMemoryStagingRegistry


class AssetStoreFactory:
    """Factory for creating asset storage components from configuration."""

    @staticmethod
    def create_extractor(storage: StorageConfig) -> ReferenceExtractor:
        """
        Create the reference extractor for the configured URL layout.

        Args:
            storage: Storage configuration

        Returns:
            ReferenceExtractor instance
        """
        return ReferenceExtractor(
            staging_prefix=storage.staging_url_prefix,
            durable_prefix=storage.durable_url_prefix,
        )

    @staticmethod
    def create_registry() -> StagingRegistry:
        """Create the staging registry."""
        return InMemoryStagingRegistry()

    @staticmethod
    def create(
        config: Config,
        registry: StagingRegistry,
        extractor: ReferenceExtractor | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> FilesystemAssetStore:
        """
        Create asset store from configuration.

        Args:
            config: Main configuration object
            registry: Staging registry shared with the garbage collector
            extractor: URL layout (built from config when omitted)
            clock: Time source for arrival timestamps

        Returns:
            Asset store instance
        """
        return FilesystemAssetStore(
            staging_dir=config.storage.staging_dir,
            durable_dir=config.storage.durable_dir,
            registry=registry,
            extractor=extractor or AssetStoreFactory.create_extractor(config.storage),
            clock=clock,
        )
