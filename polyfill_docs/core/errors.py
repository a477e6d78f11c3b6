"""Exception hierarchy for the docs service.

Provider failures are never raised straight at a caller: the cache records
them on the shared future and every waiter sees the same exception until
the entry expires.
"""

from __future__ import annotations


class DocsError(Exception):
    """Base class for all docs service errors."""


class UpstreamError(DocsError):
    """Raised when an upstream provider cannot produce its data."""


class ConfigurationMissing(UpstreamError):
    """Raised when a credential, identifier or collaborator is not configured."""
