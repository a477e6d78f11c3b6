"""Bundle size matrix.

Measures the default polyfill bundle, as served to every browser version in
the support table, in raw, minified and gzipped form.
"""

from __future__ import annotations

import asyncio
import gzip
import logging
from typing import Awaitable, Callable

from polyfill_docs.core.collaborators import BundleBuilder, SupportTable
from polyfill_docs.core.errors import UpstreamError
from polyfill_docs.models.docs.schemas import SizeSample

logger = logging.getLogger(__name__)

DEFAULT_FEATURE_SET = ["default"]

Compressor = Callable[[bytes], Awaitable[bytes]]


async def gzip_compress(data: bytes) -> bytes:
    """Gzip *data* in a worker thread so the event loop keeps running."""
    return await asyncio.to_thread(gzip.compress, data)


def size_matrix_pairs(support_table: SupportTable) -> list[tuple[str, str]]:
    """Return the ``(family, version)`` pairs to measure.

    Pairs come from the first feature in the table only; every feature is
    expected to list the same browsers and versions.  Pairs that appear
    only under other features are not measured and are logged.
    """
    if not support_table:
        return []

    first = next(iter(support_table.values()))
    pairs = [(family, version) for family, versions in first.items() for version in versions]

    known = set(pairs)
    omitted = {
        (family, version)
        for browsers in support_table.values()
        for family, versions in browsers.items()
        for version in versions
    } - known
    if omitted:
        logger.warning(
            "Support table is not uniform; %d browser versions are missing from the size matrix: %s",
            len(omitted),
            ", ".join(f"{family}/{version}" for family, version in sorted(omitted)),
        )
    return pairs


async def _measure_gzip(sample: SizeSample, minified: bytes, compress: Compressor) -> SizeSample:
    try:
        sample.gzip_bytes = len(await compress(minified))
    except Exception as exc:
        logger.warning(
            "Could not gzip bundle for %s/%s: %s", sample.family, sample.version, exc
        )
    return sample


async def build_size_matrix(
    support_table: SupportTable,
    builder: BundleBuilder,
    compress: Compressor = gzip_compress,
) -> list[SizeSample]:
    """Measure the default bundle for every browser version.

    Bundles are built synchronously, one pair at a time; the gzip step for
    all of them then runs concurrently.  A failed compression leaves that
    sample's ``gzip_bytes`` as ``None`` and does not fail the batch.
    """
    samples: list[SizeSample] = []
    minified_sources: list[bytes] = []
    for family, version in size_matrix_pairs(support_table):
        ua_string = f"{family}/{version}"
        try:
            minified = builder.build(DEFAULT_FEATURE_SET, ua_string, True).encode("utf-8")
            raw = builder.build(DEFAULT_FEATURE_SET, ua_string, False).encode("utf-8")
        except Exception as exc:
            raise UpstreamError(f"Bundle build failed for {ua_string}: {exc}") from exc
        samples.append(
            SizeSample(
                family=family,
                version=version,
                raw_bytes=len(raw),
                minified_bytes=len(minified),
            )
        )
        minified_sources.append(minified)

    logger.info("Built %d bundles for the size matrix.", len(samples))
    return list(
        await asyncio.gather(
            *(
                _measure_gzip(sample, minified, compress)
                for sample, minified in zip(samples, minified_sources)
            )
        )
    )
