"""Async upstream telemetry providers.

Each provider performs exactly one request and maps the response into page
models.  There is no retry logic here: results, including failures, are
memoised by ``TTLMemoCache`` and a fresh attempt happens only once the
cached entry expires.

Uses httpx.AsyncClient which is meant to be long-lived and reused.
A single shared client is managed by the module; see ``get_http_client``
and ``close_http_client`` for lifecycle hooks.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

import httpx

from polyfill_docs.core.config import settings
from polyfill_docs.core.errors import ConfigurationMissing, UpstreamError
from polyfill_docs.models.docs.schemas import (
    HourlyTraffic,
    Outage,
    ResponseTimeSample,
    TrafficRollup,
    TrafficStats,
)

logger = logging.getLogger(__name__)

HOUR = 60 * 60
WEEK = HOUR * 24 * 7
FIVE_YEARS = HOUR * 24 * 365 * 5

MAX_OUTAGES = 5

# Module-level shared client
_http_client: Optional[httpx.AsyncClient] = None


def get_http_client() -> httpx.AsyncClient:
    """Return the shared AsyncClient.  Creates one if missing."""
    global _http_client  # noqa: PLW0603
    if _http_client is None or _http_client.is_closed:
        _http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.http_timeout),
            verify=settings.http_verify_ssl,
            headers={"User-Agent": "PolyfillDocs/1.0"},
        )
    return _http_client


async def close_http_client() -> None:
    """Close the shared AsyncClient gracefully."""
    global _http_client  # noqa: PLW0603
    if _http_client is not None and not _http_client.is_closed:
        await _http_client.aclose()
        _http_client = None
        logger.info("HTTP client closed.")


async def _get_json(url: str, **kwargs: Any) -> Any:
    """GET *url* and decode the JSON body.

    An empty body decodes to ``None``.  Every transport, status or decode
    error is raised as :class:`UpstreamError`.
    """
    client = get_http_client()
    try:
        response = await client.get(url, **kwargs)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise UpstreamError(
            f"{exc.request.url.host} returned HTTP {exc.response.status_code}"
        ) from exc
    except httpx.RequestError as exc:
        raise UpstreamError(f"Request error for '{url}': {exc}") from exc

    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamError(f"Invalid JSON from '{url}': {exc}") from exc


# ---------------------------------------------------------------------------
# Fastly
# ---------------------------------------------------------------------------


async def fetch_traffic_stats() -> TrafficStats:
    """Hourly request and cache-hit counts for the last seven days."""
    if not settings.fastly_service_id:
        raise ConfigurationMissing("Fastly environment vars not set")

    data = await _get_json(
        f"{settings.fastly_api_url}/stats/service/{settings.fastly_service_id}",
        params={"from": "7 days ago", "to": "2 hours ago", "by": "hour"},
        headers={"fastly-key": settings.fastly_api_key or ""},
    )
    rows = (data or {}).get("data") or []

    rollup = TrafficRollup()
    byhour: list[HourlyTraffic] = []
    for row in rows:
        rollup.requests += row.get("requests", 0)
        rollup.hits += row.get("hits", 0)
        rollup.miss += row.get("miss", 0)
        rollup.bandwidth += row.get("bandwidth", 0)
        byhour.append(
            HourlyTraffic(
                date=row["start_time"],
                requests=row.get("requests", 0),
                hits=row.get("hits", 0),
                miss=row.get("miss", 0),
            )
        )
    return TrafficStats(byhour=byhour, rollup=rollup)


# ---------------------------------------------------------------------------
# Pingdom
# ---------------------------------------------------------------------------


def _pingdom_request_kwargs() -> dict[str, Any]:
    if not settings.pingdom_check_id:
        raise ConfigurationMissing("Pingdom environment vars not set")
    kwargs: dict[str, Any] = {
        "headers": {
            "app-key": settings.pingdom_api_key or "",
            "Account-Email": settings.pingdom_account or "",
        },
    }
    if settings.pingdom_username:
        kwargs["auth"] = (settings.pingdom_username, settings.pingdom_password or "")
    return kwargs


async def fetch_response_times(now: Callable[[], float] = time.time) -> list[ResponseTimeSample]:
    """Hourly average response times over the seven days ending an hour ago."""
    kwargs = _pingdom_request_kwargs()
    to = int(now()) - HOUR
    data = await _get_json(
        f"{settings.pingdom_api_url}/summary.performance/{settings.pingdom_check_id}",
        params={"from": to - WEEK, "to": to, "resolution": "hour"},
        **kwargs,
    )
    summary = (data or {}).get("summary") or {}
    return [
        ResponseTimeSample(date=hour["starttime"], resp_time=hour.get("avgresponse"))
        for hour in summary.get("hours", [])
    ]


async def fetch_outages(now: Callable[[], float] = time.time) -> list[Outage]:
    """The most recent outages of the last five years, newest first.

    Pingdom reports ``unknown`` states for gaps in monitoring; those are not
    outages and are dropped before the list is cut to ``MAX_OUTAGES``.
    """
    kwargs = _pingdom_request_kwargs()
    to = int(now()) - HOUR
    data = await _get_json(
        f"{settings.pingdom_api_url}/summary.outage/{settings.pingdom_check_id}",
        params={"from": to - FIVE_YEARS, "to": to, "order": "desc"},
        **kwargs,
    )
    states = ((data or {}).get("summary") or {}).get("states", [])
    outages = [
        Outage(
            date=state["timefrom"],
            status=state["status"].upper(),
            duration=state["timeto"] - state["timefrom"],
        )
        for state in states
        if state["status"] != "unknown"
    ]
    return outages[:MAX_OUTAGES]
