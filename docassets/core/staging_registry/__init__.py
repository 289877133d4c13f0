"""
Staging registry implementations for docassets.

Available backends:
- InMemoryStagingRegistry: Process-local registry, rebuilt from disk on startup
"""

from docassets.core.staging_registry.base import StagingRegistry
from docassets.core.staging_registry.memory import InMemoryStagingRegistry

__all__ = [
    "StagingRegistry",
    "InMemoryStagingRegistry",
]
