"""
Base interface for asset storage.

Two disjoint areas: staging (volatile uploads awaiting a document) and
durable (assets owned by persisted documents).
"""

from abc import ABC, abstractmethod

from docassets.models.asset import Asset, AssetLocation, PromotionResult


class AssetStore(ABC):
    """Abstract base class for asset storage implementations."""

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare storage areas and recover any state left by a previous run."""
        pass

    @abstractmethod
    async def stage(self, data: bytes, original_name: str) -> Asset:
        """
        Persist an upload in the staging area under a fresh identifier.

        Args:
            data: Raw file bytes
            original_name: Client-supplied filename (extension is kept)

        Returns:
            Staged Asset

        Raises:
            StorageError: If the write cannot complete; nothing is left visible
        """
        pass

    @abstractmethod
    async def promote(self, asset_id: str) -> PromotionResult:
        """
        Atomically relocate an asset from staging to durable storage.

        An asset that is not staged is not an error: the result reports
        ALREADY_SETTLED when it is durable, NOT_FOUND otherwise.

        Args:
            asset_id: Asset identifier

        Returns:
            PromotionResult

        Raises:
            StorageError: If the relocation fails for any other reason
        """
        pass

    @abstractmethod
    async def delete_durable(self, asset_id: str) -> bool:
        """
        Best-effort delete from durable storage.

        Args:
            asset_id: Asset identifier

        Returns:
            True if a file was removed, False if it was already gone

        Raises:
            StorageError: If the file exists but cannot be removed
        """
        pass

    @abstractmethod
    async def delete_staged(self, asset_id: str) -> bool:
        """
        Best-effort delete from staging, dropping the registry entry.

        Args:
            asset_id: Asset identifier

        Returns:
            True if a file was removed, False if it was already gone

        Raises:
            StorageError: If the file exists but cannot be removed
        """
        pass

    @abstractmethod
    async def list_durable(self) -> list[str]:
        """
        List identifiers currently in durable storage.

        Returns:
            Asset identifiers
        """
        pass

    @abstractmethod
    async def list_staged(self) -> list[str]:
        """
        List identifiers currently in staging.

        Returns:
            Asset identifiers
        """
        pass

    @abstractmethod
    async def exists(self, asset_id: str, location: AssetLocation) -> bool:
        """
        Check whether an asset is present in the given area.

        Args:
            asset_id: Asset identifier
            location: Storage area

        Returns:
            True if present
        """
        pass

    async def close(self) -> None:
        """Release resources."""
        pass
