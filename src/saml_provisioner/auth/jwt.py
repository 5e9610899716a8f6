"""
saml_provisioner.auth.jwt

Bearer tokens for the provisioning API.

Responsibilities:
- Mint operator tokens for local/dev use, scoped to the configured directory tenant.
- Verify tokens (signature, iss/aud/exp/iat/sub/tid) and turn them into a `Principal`.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError

from saml_provisioner.auth.models import Principal
from saml_provisioner.settings import Settings

_REQUIRED_CLAIMS = ["exp", "iat", "iss", "aud", "sub", "tid"]


@dataclass(frozen=True, slots=True)
class JwtConfig:
    alg: str
    issuer: str
    audience: str
    secret: str
    # Directory tenant the token's subject (a user object id) belongs to.
    tenant_id: str

    @classmethod
    def from_settings(cls, settings: Settings) -> JwtConfig:
        return cls(
            alg=settings.jwt_alg,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            secret=settings.jwt_secret,
            tenant_id=settings.tenant_id,
        )


class JwtValidationError(Exception):
    pass


def issue_token(
    *,
    cfg: JwtConfig,
    subject: str,
    roles: Iterable[str],
    ttl: timedelta = timedelta(hours=1),
) -> str:
    issued_at = datetime.now(tz=UTC)
    claims: dict[str, Any] = {
        "iss": cfg.issuer,
        "aud": cfg.audience,
        "sub": subject,
        "tid": cfg.tenant_id,
        "roles": sorted(set(roles)),
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + ttl).timestamp()),
    }
    return jwt.encode(claims, cfg.secret, algorithm=cfg.alg)


def decode_and_validate(*, cfg: JwtConfig, token: str) -> dict[str, Any]:
    try:
        claims = jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            audience=cfg.audience,
            options={"require": _REQUIRED_CLAIMS},
        )
    except InvalidTokenError as e:
        raise JwtValidationError(str(e)) from e

    # Owner ids are only meaningful inside the tenant this service provisions into.
    if claims["tid"] != cfg.tenant_id:
        raise JwtValidationError("token was issued for a different tenant")
    return claims


def principal_from_token(*, cfg: JwtConfig, token: str) -> Principal:
    claims = decode_and_validate(cfg=cfg, token=token)

    subject = claims["sub"]
    roles = claims.get("roles", [])
    if not isinstance(subject, str) or not subject.strip():
        raise JwtValidationError("subject must be a directory user object id")
    if not isinstance(roles, list) or not all(isinstance(r, str) for r in roles):
        raise JwtValidationError("roles must be a list of strings")

    return Principal(subject=subject, roles=frozenset(roles), tenant_id=claims["tid"])


# --- Module Notes -----------------------------------------------------------
# Production deployments put an OIDC-aware gateway in front of the API and
# re-issue its identity as this token; the browser login flow is not part of
# this service.
