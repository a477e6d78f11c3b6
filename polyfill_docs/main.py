from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from polyfill_docs.api.router import router
from polyfill_docs.cache.memo import TTLMemoCache
from polyfill_docs.core.collaborators import BundleBuilder, FileSupportRegistry, SupportRegistry
from polyfill_docs.core.config import settings
from polyfill_docs.services.docs.service import DocsService, default_providers
from polyfill_docs.workers.fetcher import close_http_client

logger = logging.getLogger(__name__)

_registry: SupportRegistry | None = None
_builder: BundleBuilder | None = None


def _configure_logging() -> None:
    """Configure the ``polyfill_docs`` logger namespace.

    ``logging.basicConfig`` is a no-op when the root logger already has
    handlers (e.g. when uvicorn sets up its own handlers before our lifespan
    runs), so the namespace gets its own handler with ``propagate = False``.
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
    )
    app_log = logging.getLogger("polyfill_docs")
    app_log.setLevel(level)
    if not app_log.handlers:
        app_log.addHandler(handler)
    app_log.propagate = False


_configure_logging()


def configure_collaborators(
    *,
    registry: SupportRegistry | None = None,
    builder: BundleBuilder | None = None,
) -> None:
    """Install the support registry and bundle builder used by the app.

    Call before startup.  Without an explicit registry the file-backed one
    is used when both data paths are configured.
    """
    global _registry, _builder  # noqa: PLW0603
    _registry = registry
    _builder = builder


def _resolve_registry() -> SupportRegistry | None:
    if _registry is not None:
        return _registry
    if settings.compat_data_path and settings.polyfill_metadata_path:
        return FileSupportRegistry(settings.compat_data_path, settings.polyfill_metadata_path)
    logger.warning("No support registry configured; the features page is disabled.")
    return None


def build_docs_service() -> DocsService:
    registry = _resolve_registry()
    cache = TTLMemoCache(
        default_providers(registry, _builder),
        ttl=settings.cache_ttl_seconds,
    )
    return DocsService(cache, registry)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # ── Startup ──────────────────────────────────────────────────────
    app.state.docs_service = build_docs_service()
    yield
    # ── Shutdown ─────────────────────────────────────────────────────
    await close_http_client()


app = FastAPI(
    title="Polyfill Docs",
    description="Usage statistics and feature compatibility data for the polyfill docs.",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router)


@app.get("/health", tags=["health"])
async def health() -> dict[str, str]:
    return {"status": "ok"}
