"""Interfaces to the collaborators this service consumes but does not own.

The bundle builder and the support registry belong to the polyfill library
itself.  They are injected at startup (see ``configure_collaborators`` in
``polyfill_docs.main``); ``FileSupportRegistry`` is the one concrete
registry shipped here, reading the data the library exports as JSON.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from polyfill_docs.models.docs.registry import PolyfillMetadata

logger = logging.getLogger(__name__)

#: feature -> browser family -> version -> support status
SupportTable = dict[str, dict[str, dict[str, str]]]


class BundleBuilder(Protocol):
    def build(self, features: list[str], ua_string: str, minify: bool) -> str:
        """Return the polyfill bundle source for *features* as served to *ua_string*."""
        ...


class SupportRegistry(Protocol):
    def support_table(self) -> SupportTable: ...

    def polyfill_metadata(self, feature: str) -> PolyfillMetadata: ...

    def polyfill_exists(self, feature: str) -> bool: ...


class FileSupportRegistry:
    """Support registry backed by two JSON exports.

    - *compat_path*: the raw support table (``feature -> browser -> version
      -> status``).
    - *metadata_path*: ``feature -> metadata`` in the registry's camelCase
      shape.

    Both files are read once, on construction.
    """

    def __init__(self, compat_path: str | Path, metadata_path: str | Path) -> None:
        self._table: SupportTable = json.loads(Path(compat_path).read_text("utf-8"))
        raw_meta = json.loads(Path(metadata_path).read_text("utf-8"))
        self._metadata = {
            name: PolyfillMetadata.model_validate(meta) for name, meta in raw_meta.items()
        }
        logger.info(
            "Loaded support registry: %d features in table, %d polyfills.",
            len(self._table),
            len(self._metadata),
        )

    def support_table(self) -> SupportTable:
        return self._table

    def polyfill_metadata(self, feature: str) -> PolyfillMetadata:
        return self._metadata[feature]

    def polyfill_exists(self, feature: str) -> bool:
        return feature in self._metadata
