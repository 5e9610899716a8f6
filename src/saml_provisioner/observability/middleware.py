"""
saml_provisioner.observability.middleware

Request-scoped logging context for the API.

Responsibilities:
- Accept or mint a request id and echo it back in `x-request-id`.
- Bind request metadata into structlog contextvars for everything logged downstream.
- Emit one access log per request, leveled by outcome.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from saml_provisioner.observability.logging import get_logger

log = get_logger(__name__)

REQUEST_ID_HEADER = "x-request-id"
# Probe traffic is only logged at debug.
_QUIET_PATHS = frozenset({"/healthz", "/readyz"})


def _access_level(path: str, status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.DEBUG if path in _QUIET_PATHS else logging.INFO


def _access_fields(request: Request, started: float) -> dict[str, Any]:
    return {
        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        "remote_addr": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        path = request.url.path

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id, method=request.method, path=path)
        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
            log.log(
                _access_level(path, response.status_code),
                "request.completed",
                status_code=response.status_code,
                **_access_fields(request, started),
            )
        except Exception:
            # Unhandled errors become a 500 further out; log the request here.
            log.exception("request.completed", status_code=500, **_access_fields(request, started))
            raise
        finally:
            structlog.contextvars.clear_contextvars()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
