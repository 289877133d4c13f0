"""Shared fixtures for docassets tests.

Fixtures use function scope so every test gets fresh stores rooted in its
own tmp_path. Time-dependent behaviour is driven by FakeClock.
"""

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta

import pytest

from docassets.config import Config, GCConfig, LoggingConfig, StorageConfig
from docassets.core.asset_store.filesystem import FilesystemAssetStore
from docassets.core.document_store.memory import InMemoryDocumentStore
from docassets.core.references.extractor import ReferenceExtractor
from docassets.core.staging_registry.memory import InMemoryStagingRegistry
from docassets.services.document_service import DocumentService

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def png_bytes() -> bytes:
    """Small payload that looks like a PNG."""
    return PNG_BYTES


@pytest.fixture
def clock() -> FakeClock:
    """Simulated clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def config(tmp_path) -> Config:
    """Configuration rooted in a temporary upload directory."""
    return Config(
        storage=StorageConfig(upload_root=str(tmp_path / "uploads")),
        gc=GCConfig(staging_ttl_seconds=7200, enable_background_workers=False),
        logging=LoggingConfig(log_to_file=False),
    )


@pytest.fixture
def extractor() -> ReferenceExtractor:
    """Extractor with the default URL layout."""
    return ReferenceExtractor()


@pytest.fixture
def registry() -> InMemoryStagingRegistry:
    """Empty staging registry."""
    return InMemoryStagingRegistry()


@pytest.fixture
async def asset_store(config, registry, extractor, clock) -> FilesystemAssetStore:
    """Initialized filesystem asset store."""
    store = FilesystemAssetStore(
        staging_dir=config.storage.staging_dir,
        durable_dir=config.storage.durable_dir,
        registry=registry,
        extractor=extractor,
        clock=clock,
    )
    await store.initialize()
    return store


@pytest.fixture
def document_store() -> InMemoryDocumentStore:
    """Empty in-memory corpus."""
    return InMemoryDocumentStore()


@pytest.fixture
async def service(
    asset_store, registry, document_store, extractor, config, clock
) -> AsyncGenerator[DocumentService, None]:
    """Initialized document service without background workers."""
    svc = DocumentService(
        asset_store=asset_store,
        staging_registry=registry,
        document_store=document_store,
        extractor=extractor,
        config=config,
        clock=clock,
    )
    await svc.initialize(start_workers=False)
    yield svc
    await svc.close()
