"""
saml_provisioner.api.routers.health

Liveness and readiness probes.

Responsibilities:
- `/healthz`: the process is serving.
- `/readyz`: the ledger is reachable and its schema is in place.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from saml_provisioner.api.deps import db_session
from saml_provisioner.db.models import OwnershipRecordRow
from saml_provisioner.observability.logging import get_logger

log = get_logger(__name__)

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz", response_model=None)
async def readyz(session: AsyncSession = Depends(db_session)) -> dict[str, str] | JSONResponse:
    try:
        await session.execute(select(OwnershipRecordRow.application_id).limit(1))
    except SQLAlchemyError as e:
        log.warning("readiness.ledger_unavailable", error=str(e))
        return JSONResponse(
            status_code=HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "ledger": "unreachable"},
        )
    return {"status": "ready"}


# --- Module Notes -----------------------------------------------------------
# Readiness does not call the directory; a Graph outage should not take pods out
# of rotation for read-only ledger traffic.
