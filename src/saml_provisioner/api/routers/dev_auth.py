from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from starlette.status import HTTP_404_NOT_FOUND

from saml_provisioner.api.deps import settings_dep
from saml_provisioner.auth.jwt import JwtConfig, issue_token
from saml_provisioner.auth.models import OPERATOR_ROLE
from saml_provisioner.observability.logging import get_logger
from saml_provisioner.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/v1/dev", tags=["dev"])


class DevTokenRequest(BaseModel):
    # Directory user object id the token acts as (and the owner of anything it provisions).
    subject: str = Field(min_length=1, max_length=256)
    roles: list[str] = Field(default_factory=lambda: [OPERATOR_ROLE])
    ttl_minutes: int = Field(default=60, ge=1, le=24 * 60)


class DevTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    tenant_id: str


@router.post("/token", response_model=DevTokenResponse)
async def mint_dev_token(
    body: DevTokenRequest,
    settings: Settings = Depends(settings_dep),
) -> DevTokenResponse:
    if settings.env == "prod":
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")

    ttl = timedelta(minutes=body.ttl_minutes)
    cfg = JwtConfig.from_settings(settings)
    token = issue_token(cfg=cfg, subject=body.subject, roles=body.roles, ttl=ttl)
    log.info("auth.dev_token_issued", subject=body.subject, roles=body.roles)
    return DevTokenResponse(
        access_token=token,
        expires_in=int(ttl.total_seconds()),
        tenant_id=cfg.tenant_id,
    )
