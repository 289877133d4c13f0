"""
In-memory staging registry.
"""

import asyncio

from docassets.core.staging_registry.base import StagingRegistry
from docassets.models.asset import StagedEntry


class InMemoryStagingRegistry(StagingRegistry):
    """
    Process-local registry backed by a dict.

    Shared by request handlers (add/remove) and the staging reaper
    (list/remove); mutations are serialized by an asyncio lock.
    """

    def __init__(self):
        self._entries: dict[str, StagedEntry] = {}
        self._lock = asyncio.Lock()

    async def add(self, entry: StagedEntry) -> None:
        async with self._lock:
            self._entries[entry.asset_id] = entry

    async def remove(self, asset_id: str) -> bool:
        async with self._lock:
            return self._entries.pop(asset_id, None) is not None

    async def get(self, asset_id: str) -> StagedEntry | None:
        return self._entries.get(asset_id)

    async def list_entries(self) -> list[StagedEntry]:
        async with self._lock:
            entries = list(self._entries.values())
        return sorted(entries, key=lambda e: e.uploaded_at)

    async def count(self) -> int:
        return len(self._entries)
