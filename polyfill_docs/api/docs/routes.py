from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from polyfill_docs.core.errors import ConfigurationMissing, DocsError
from polyfill_docs.models.common import ErrorResponse
from polyfill_docs.models.docs.schemas import FeaturesPage, UsagePage
from polyfill_docs.services.docs.service import DocsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/docs", tags=["docs"])

ONE_HOUR = 60 * 60
ONE_WEEK = ONE_HOUR * 24 * 7

# The usage graphs refresh hourly, more often than the rest of the docs.
USAGE_CACHE_CONTROL = (
    f"public, max-age={ONE_HOUR}, "
    f"stale-while-revalidate={ONE_WEEK}, stale-if-error={ONE_WEEK}"
)


# ---------------------------------------------------------------------------
# Dependency
# ---------------------------------------------------------------------------


def _get_service(request: Request) -> DocsService:
    """FastAPI dependency returning the ``DocsService`` built at startup."""
    return request.app.state.docs_service


# ---------------------------------------------------------------------------
# GET /v1/docs/usage
# ---------------------------------------------------------------------------


@router.get(
    "/usage",
    response_model=UsagePage,
    summary="Traffic, outage and response-time data for the usage page",
)
async def get_usage(
    response: Response,
    service: DocsService = Depends(_get_service),
) -> UsagePage:
    """Return usage statistics.

    Always **200**: when an upstream provider is unavailable the payload
    carries only ``msg`` describing the failure.
    """
    response.headers["Cache-Control"] = USAGE_CACHE_CONTROL
    return await service.get_usage()


# ---------------------------------------------------------------------------
# GET /v1/docs/features
# ---------------------------------------------------------------------------


@router.get(
    "/features",
    response_model=FeaturesPage,
    responses={502: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Feature compatibility table and bundle sizes",
)
async def get_features(
    service: DocsService = Depends(_get_service),
) -> FeaturesPage:
    """Return the compatibility matrix with the bundle size matrix.

    - **200** — both parts available
    - **502** — the size matrix could not be built
    - **503** — the support registry or bundle builder is not configured
    """
    try:
        return await service.get_features()
    except ConfigurationMissing as exc:
        logger.warning("GET /v1/docs/features not configured: %s", exc)
        raise HTTPException(status_code=503, detail=str(exc))
    except DocsError as exc:
        logger.error("GET /v1/docs/features upstream error: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc))
