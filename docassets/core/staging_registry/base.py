"""
Base interface for the staging registry.

The registry tracks every asset currently sitting in the staging area so
that abandoned uploads can be found and reaped.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from docassets.models.asset import StagedEntry


class StagingRegistry(ABC):
    """Abstract base class for staging registry implementations."""

    @abstractmethod
    async def add(self, entry: StagedEntry) -> None:
        """
        Register a freshly staged asset.

        Args:
            entry: Staging record
        """
        pass

    @abstractmethod
    async def remove(self, asset_id: str) -> bool:
        """
        Drop an entry. Removing an absent entry is a no-op.

        Args:
            asset_id: Asset identifier

        Returns:
            True if an entry was removed
        """
        pass

    @abstractmethod
    async def get(self, asset_id: str) -> StagedEntry | None:
        """
        Look up an entry.

        Args:
            asset_id: Asset identifier

        Returns:
            StagedEntry or None if not registered
        """
        pass

    @abstractmethod
    async def list_entries(self) -> list[StagedEntry]:
        """
        Snapshot of all entries, oldest first.

        Returns:
            List of staging records
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        """Number of registered entries."""
        pass

    async def list_expired(self, now: datetime, ttl_seconds: float) -> list[StagedEntry]:
        """
        Entries strictly older than the TTL.

        Args:
            now: Current time
            ttl_seconds: Staging time-to-live

        Returns:
            Expired staging records
        """
        entries = await self.list_entries()
        return [entry for entry in entries if entry.is_expired(now, ttl_seconds)]
