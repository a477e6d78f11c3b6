from __future__ import annotations

import asyncio
import logging
from typing import Any

from polyfill_docs.cache.memo import Provider, ProviderKey, TTLMemoCache
from polyfill_docs.core.collaborators import BundleBuilder, SupportRegistry
from polyfill_docs.core.errors import ConfigurationMissing, DocsError
from polyfill_docs.models.docs.schemas import FeaturesPage, SupportRecord, UsagePage
from polyfill_docs.services.docs.compat import build_compat_matrix
from polyfill_docs.workers.fetcher import (
    fetch_outages,
    fetch_response_times,
    fetch_traffic_stats,
)
from polyfill_docs.workers.sizes import build_size_matrix

logger = logging.getLogger(__name__)


def default_providers(
    registry: SupportRegistry | None, builder: BundleBuilder | None
) -> dict[ProviderKey, Provider]:
    """Wire every provider key to the function that fetches its data."""

    async def sizes() -> list:
        if registry is None or builder is None:
            raise ConfigurationMissing("Support registry or bundle builder not configured")
        return await build_size_matrix(registry.support_table(), builder)

    return {
        ProviderKey.FASTLY: fetch_traffic_stats,
        ProviderKey.RESP_TIMES: fetch_response_times,
        ProviderKey.OUTAGES: fetch_outages,
        ProviderKey.SIZES: sizes,
    }


class DocsService:
    """Assembles the data behind the docs pages."""

    def __init__(self, cache: TTLMemoCache, registry: SupportRegistry | None) -> None:
        self._cache = cache
        self._registry = registry

    async def get_cached_data(self, key: ProviderKey | str) -> Any:
        """Return the memoised result for *key*, raising its cached failure."""
        return await self._cache.fetch(key)

    def build_compat_matrix(self) -> list[SupportRecord]:
        """Build the compatibility table from the registry.

        Raises:
            ConfigurationMissing: no support registry is configured.
        """
        if self._registry is None:
            raise ConfigurationMissing("Support registry not configured")
        return build_compat_matrix(self._registry.support_table(), self._registry)

    async def get_usage(self) -> UsagePage:
        """Traffic, outage and response-time data for the usage page.

        The three providers are fetched in parallel.  If any of them fails
        the page is returned with only ``msg`` set, so it can still render.
        """
        try:
            traffic, outages, resp_times = await asyncio.gather(
                self.get_cached_data(ProviderKey.FASTLY),
                self.get_cached_data(ProviderKey.OUTAGES),
                self.get_cached_data(ProviderKey.RESP_TIMES),
            )
        except DocsError as exc:
            logger.warning("Usage data unavailable: %s", exc)
            return UsagePage(msg=str(exc))
        except Exception as exc:
            logger.exception("Unexpected error assembling usage data: %s", exc)
            return UsagePage(msg=str(exc))

        return UsagePage(
            requests_data=traffic.byhour,
            outages=outages,
            resp_times=resp_times,
            hit_count=traffic.rollup.hits,
            miss_count=traffic.rollup.miss,
        )

    async def get_features(self) -> FeaturesPage:
        """Compatibility table and bundle sizes for the features page.

        Raises:
            DocsError: propagated from the size provider or a missing registry.
        """
        sizes = await self.get_cached_data(ProviderKey.SIZES)
        return FeaturesPage(compat=self.build_compat_matrix(), sizes=sizes)
