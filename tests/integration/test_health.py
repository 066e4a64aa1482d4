"""Health endpoint against real dependencies."""

from collections.abc import AsyncGenerator

import pytest
from httpx import AsyncClient

from src.sso_bridge.core.health import reset_health_cache

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]


@pytest.fixture
async def without_redis(monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[None]:
    async def _get_none() -> None:
        return None

    monkeypatch.setattr("src.sso_bridge.core.health.get_redis", _get_none)
    reset_health_cache()
    yield
    reset_health_cache()


async def test_health_reports_database(browser: AsyncClient, without_redis):
    response = await browser.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["database"] == "healthy"
    assert body["redis"] == "not_configured"


async def test_health_served_on_unknown_host(browser: AsyncClient, without_redis):
    response = await browser.get("http://unknown.test/health")
    assert response.status_code == 200
