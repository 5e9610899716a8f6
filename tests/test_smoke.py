"""
tests.test_smoke

Smoke tests to validate the service can boot and serve core endpoints.
"""

from __future__ import annotations

import httpx
import pytest
from conftest import FakeDirectory

from saml_provisioner.api.app import create_app


@pytest.mark.asyncio
async def test_health_endpoints(settings) -> None:
    app = create_app(settings=settings, directory=FakeDirectory())

    # ASGITransport does not drive lifespan; enter it explicitly.
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            r = await client.get("/healthz")
            assert r.status_code == 200
            assert r.json()["status"] == "ok"
            assert r.headers["x-request-id"]

            r = await client.get("/readyz")
            assert r.status_code == 200
            assert r.json()["status"] == "ready"


@pytest.mark.asyncio
async def test_readyz_reports_missing_ledger_schema(settings) -> None:
    # prod skips create_all, so the ledger table does not exist yet.
    app = create_app(settings=settings.model_copy(update={"env": "prod"}), directory=FakeDirectory())

    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            r = await client.get("/readyz")

    assert r.status_code == 503
    assert r.json()["status"] == "unavailable"
