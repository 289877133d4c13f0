"""
Reference extraction for asset links embedded in document content.

An asset reference is a URL path made of a location prefix (staging or
durable) followed by the asset identifier, e.g. `/uploads/temp/<id>` or
`/uploads/permanent/<id>`. The identifier runs until a quote, whitespace or
`>`, so references are found regardless of the surrounding markup.
"""

import re

DEFAULT_STAGING_PREFIX = "/uploads/temp"
DEFAULT_DURABLE_PREFIX = "/uploads/permanent"


class ReferenceExtractor:
    """
    Parses and rewrites asset references for one staging/durable URL layout.

    The location prefix is not part of an asset's identity: the same
    identifier under either prefix names the same asset.
    """

    def __init__(
        self,
        staging_prefix: str = DEFAULT_STAGING_PREFIX,
        durable_prefix: str = DEFAULT_DURABLE_PREFIX,
    ):
        """
        Initialize extractor.

        Args:
            staging_prefix: URL path prefix of staged assets
            durable_prefix: URL path prefix of durable assets
        """
        self.staging_prefix = staging_prefix.rstrip("/")
        self.durable_prefix = durable_prefix.rstrip("/")

        # Longest prefix first so a prefix nested in the other still matches fully
        prefixes = sorted([self.staging_prefix, self.durable_prefix], key=len, reverse=True)
        alternation = "|".join(re.escape(p) for p in prefixes)
        self._pattern = re.compile(rf"(?:{alternation})/([^\"'\s>]+)")
        self._staging_marker = f"{self.staging_prefix}/"
        self._durable_marker = f"{self.durable_prefix}/"

    def extract(self, content: str | None) -> set[str]:
        """
        Collect every asset identifier referenced by content.

        Args:
            content: Document body (any markup, possibly malformed)

        Returns:
            Deduplicated set of identifiers; empty when nothing matches
        """
        if not content or not isinstance(content, str):
            return set()
        return set(self._pattern.findall(content))

    def to_durable(self, content: str) -> str:
        """
        Rewrite every staging reference to its durable form.

        Args:
            content: Document body

        Returns:
            Content whose asset references all use the durable prefix
        """
        if not content:
            return content
        return content.replace(self._staging_marker, self._durable_marker)

    def staging_url(self, asset_id: str) -> str:
        """Reference form of a staged asset."""
        return f"{self._staging_marker}{asset_id}"

    def durable_url(self, asset_id: str) -> str:
        """Reference form of a durable asset."""
        return f"{self._durable_marker}{asset_id}"


_default_extractor = ReferenceExtractor()


def extract_asset_ids(content: str | None) -> set[str]:
    """Extract asset identifiers using the default URL layout."""
    return _default_extractor.extract(content)
