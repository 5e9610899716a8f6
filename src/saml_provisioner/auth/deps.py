"""
saml_provisioner.auth.deps

FastAPI dependencies for authenticating and authorizing API callers.

Responsibilities:
- Resolve the bearer token into a `Principal` (401 on any token problem).
- Gate routers on roles (403 when the principal lacks them).
"""

from __future__ import annotations

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from saml_provisioner.api.deps import settings_dep
from saml_provisioner.auth.jwt import JwtConfig, JwtValidationError, principal_from_token
from saml_provisioner.auth.models import Principal
from saml_provisioner.observability.logging import get_logger
from saml_provisioner.settings import Settings

log = get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)


def get_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(settings_dep),
) -> Principal:
    if creds is None or not creds.credentials:
        raise HTTPException(
            status_code=HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return principal_from_token(cfg=JwtConfig.from_settings(settings), token=creds.credentials)
    except JwtValidationError as e:
        log.info("auth.rejected", reason=str(e))
        raise HTTPException(
            status_code=HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {e}",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def require_roles(*required: str):
    def _dep(principal: Principal = Depends(get_principal)) -> Principal:
        if not principal.can(*required):
            raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Insufficient role")
        return principal

    return _dep
