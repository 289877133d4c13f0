"""
ID generation utilities for docassets.

Provides consistent ID generation for all entity types:
- Assets: <uuid4>-<epoch millis><original extension>
- Documents: doc_xxx
"""

import time
from pathlib import PurePosixPath
from uuid import uuid4


def asset_extension(original_name: str) -> str:
    """
    Extract a safe file extension from an uploaded filename.

    Args:
        original_name: Client-supplied filename (may contain a path)

    Returns:
        Lowercased extension including the dot, or "" when there is none
    """
    name = PurePosixPath((original_name or "").replace("\\", "/")).name
    suffix = PurePosixPath(name).suffix.lower()
    if not suffix or not suffix[1:].isalnum():
        return ""
    return suffix


def generate_asset_id(original_name: str = "") -> str:
    """
    Generate unique Asset ID.

    Args:
        original_name: Original upload filename, used only for its extension

    Returns:
        ID in format "<uuid4>-<epoch millis><ext>", e.g. "4f1c...-1718000000000.png"
    """
    return f"{uuid4()}-{int(time.time() * 1000)}{asset_extension(original_name)}"


def generate_document_id() -> str:
    """
    Generate unique Document ID.

    Returns:
        ID in format "doc_xxx" where xxx is 12 hex characters
    """
    return f"doc_{uuid4().hex[:12]}"
