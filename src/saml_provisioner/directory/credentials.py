"""
saml_provisioner.directory.credentials

Client-credentials token provider for the directory API.

Responsibilities:
- Exchange the app registration's client id/secret for a bearer token.
- Cache the token until it expires; refresh it wholesale afterwards.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable

import httpx

from saml_provisioner.errors import CredentialError
from saml_provisioner.models import CachedCredential
from saml_provisioner.observability.logging import get_logger
from saml_provisioner.settings import Settings

log = get_logger(__name__)


class CredentialProvider:
    """
    Holds at most one `CachedCredential`.

    The check-then-refresh sequence runs under a lock so concurrent callers on a
    stale cache trigger a single token request and all receive its result.
    Errors are not retried here.
    """

    def __init__(
        self,
        *,
        settings: Settings,
        http: httpx.AsyncClient,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._http = http
        self._clock = clock
        self._token_url = settings.token_url
        self._form = {
            "client_id": settings.client_id,
            "client_secret": settings.client_secret,
            "grant_type": "client_credentials",
            "scope": settings.graph_scope,
        }
        self._cached: CachedCredential | None = None
        self._lock = asyncio.Lock()

    async def get_token(self) -> str:
        async with self._lock:
            cached = self._cached
            if cached is not None and cached.is_valid(self._clock()):
                return cached.token
            self._cached = await self._request_token()
            return self._cached.token

    async def _request_token(self) -> CachedCredential:
        try:
            # `data=` sends application/x-www-form-urlencoded.
            r = await self._http.post(self._token_url, data=self._form)
        except httpx.HTTPError as e:
            raise CredentialError(f"token request failed: {e}") from e

        if not r.is_success:
            raise CredentialError(f"token endpoint returned HTTP {r.status_code}")

        try:
            body = r.json()
            token = body["access_token"]
            expires_in = float(body["expires_in"])
        except (ValueError, KeyError, TypeError) as e:
            raise CredentialError("token endpoint returned a malformed response") from e
        if not isinstance(token, str) or not token:
            raise CredentialError("token endpoint returned an empty access_token")

        expires_at = self._clock() + expires_in
        log.info("credential.refreshed", expires_in=expires_in)
        return CachedCredential(token=token, expires_at=expires_at)


# --- Module Notes -----------------------------------------------------------
# Never log the token itself; only its lifetime.
