"""
tests.test_middleware

Access logging from `RequestContextMiddleware`.
"""

from __future__ import annotations

from typing import Any

import httpx
import pytest
from fastapi import FastAPI

from saml_provisioner.observability import middleware
from saml_provisioner.observability.middleware import RequestContextMiddleware


class RecordingLog:
    def __init__(self) -> None:
        self.lines: list[tuple[str, str, dict[str, Any]]] = []

    def log(self, level: int, event: str, **kw: Any) -> None:
        self.lines.append((f"level-{level}", event, kw))

    def exception(self, event: str, **kw: Any) -> None:
        self.lines.append(("exception", event, kw))


def _app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestContextMiddleware)

    @app.get("/ok")
    async def ok() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/boom")
    async def boom() -> dict[str, str]:
        raise RuntimeError("directory client bug")

    return app


@pytest.mark.asyncio
async def test_unhandled_error_still_emits_access_log(monkeypatch) -> None:
    recorder = RecordingLog()
    monkeypatch.setattr(middleware, "log", recorder)

    transport = httpx.ASGITransport(app=_app(), raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        r = await client.get("/boom")

    assert r.status_code == 500
    ((kind, event, fields),) = recorder.lines
    assert (kind, event) == ("exception", "request.completed")
    assert fields["status_code"] == 500
    assert "duration_ms" in fields


@pytest.mark.asyncio
async def test_request_id_is_echoed(monkeypatch) -> None:
    recorder = RecordingLog()
    monkeypatch.setattr(middleware, "log", recorder)

    transport = httpx.ASGITransport(app=_app())
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        r = await client.get("/ok", headers={"x-request-id": "req-42"})

    assert r.headers["x-request-id"] == "req-42"
    ((kind, event, fields),) = recorder.lines
    assert (kind, event) == ("level-20", "request.completed")
    assert fields["status_code"] == 200
