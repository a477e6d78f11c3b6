from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

import polyfill_docs.workers.fetcher as fetcher_module
from polyfill_docs.core.config import settings
from polyfill_docs.main import app, configure_collaborators
from tests.support import (
    POLYFILL_METADATA,
    SUPPORT_TABLE,
    FakeClock,
    StubBuilder,
    StubRegistry,
)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry() -> StubRegistry:
    return StubRegistry(SUPPORT_TABLE, POLYFILL_METADATA)


@pytest.fixture
def builder() -> StubBuilder:
    return StubBuilder()


@pytest.fixture
def upstream_settings(monkeypatch):
    """Credentials for both Fastly and Pingdom."""
    monkeypatch.setattr(settings, "fastly_service_id", "svc123")
    monkeypatch.setattr(settings, "fastly_api_key", "fastly-secret")
    monkeypatch.setattr(settings, "pingdom_check_id", "chk42")
    monkeypatch.setattr(settings, "pingdom_api_key", "pingdom-key")
    monkeypatch.setattr(settings, "pingdom_account", "ops@example.com")
    monkeypatch.setattr(settings, "pingdom_username", "ops")
    monkeypatch.setattr(settings, "pingdom_password", "hunter2")
    return settings


@pytest.fixture
def no_upstream_settings(monkeypatch):
    monkeypatch.setattr(settings, "fastly_service_id", None)
    monkeypatch.setattr(settings, "pingdom_check_id", None)
    return settings


@pytest.fixture(autouse=True)
def _reset_http_client():
    """Never let a client bound to a closed event loop leak between tests."""
    fetcher_module._http_client = None
    yield
    fetcher_module._http_client = None


@pytest.fixture
def client(registry, builder):
    """TestClient with stub collaborators and the HTTP client shutdown mocked."""
    configure_collaborators(registry=registry, builder=builder)
    with patch("polyfill_docs.main.close_http_client", new_callable=AsyncMock):
        with TestClient(app) as c:
            yield c
    configure_collaborators()
