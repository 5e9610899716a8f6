"""
saml_provisioner.api.errors

Maps provisioning errors onto HTTP responses.

Responsibilities:
- Choose a status code per error type.
- Render a consistent JSON error body including the stage a run reached.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
    HTTP_503_SERVICE_UNAVAILABLE,
    HTTP_504_GATEWAY_TIMEOUT,
)

from saml_provisioner.errors import (
    CredentialError,
    DirectoryError,
    DirectoryNotFoundError,
    LedgerError,
    ProvisionerError,
    ProvisioningTimeoutError,
    ValidationError,
)
from saml_provisioner.observability.logging import get_logger

log = get_logger(__name__)

_STATUS_BY_ERROR: dict[type[ProvisionerError], int] = {
    # starlette renamed its 422 constant; the bare code works on every version.
    ValidationError: 422,
    DirectoryNotFoundError: HTTP_404_NOT_FOUND,
    DirectoryError: HTTP_502_BAD_GATEWAY,
    CredentialError: HTTP_502_BAD_GATEWAY,
    ProvisioningTimeoutError: HTTP_504_GATEWAY_TIMEOUT,
    LedgerError: HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: ProvisionerError) -> int:
    # Most specific class wins (DirectoryNotFoundError before DirectoryError).
    for cls in type(exc).__mro__:
        if cls in _STATUS_BY_ERROR:
            return _STATUS_BY_ERROR[cls]
    return HTTP_500_INTERNAL_SERVER_ERROR


async def handle_provisioner_error(request: Request, exc: ProvisionerError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        log.error("request.failed", error=exc.code, detail=exc.message, stage=exc.stage)
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": exc.code,
                "message": exc.message,
                "stage": exc.stage.value if exc.stage else None,
                "request_id": getattr(request.state, "request_id", None),
            }
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProvisionerError, handle_provisioner_error)  # type: ignore[arg-type]
