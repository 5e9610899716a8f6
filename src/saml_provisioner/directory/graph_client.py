"""
saml_provisioner.directory.graph_client

Microsoft Graph implementation of the `DirectoryService` port.

Responsibilities:
- Attach a bearer token from `CredentialProvider` to every call.
- Map Graph endpoints onto the workflow's directory operations.
- Translate unsuccessful responses into `DirectoryError` / `DirectoryNotFoundError`.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote

import httpx

from saml_provisioner.directory.credentials import CredentialProvider
from saml_provisioner.errors import DirectoryError, DirectoryNotFoundError
from saml_provisioner.models import (
    DirectoryApplication,
    InstantiatedApplication,
    SigningCertificate,
)
from saml_provisioner.settings import Settings

_NOT_FOUND_CODE = "Request_ResourceNotFound"


def _seg(value: str) -> str:
    # Ids are opaque; never let them alter the request path.
    return quote(value, safe="")


class GraphDirectoryClient:
    def __init__(
        self,
        *,
        settings: Settings,
        http: httpx.AsyncClient,
        credentials: CredentialProvider,
    ) -> None:
        self._base_url = settings.graph_base_url.rstrip("/")
        self._http = http
        self._credentials = credentials

    async def _authz(self) -> dict[str, str]:
        token = await self._credentials.get_token()
        return {"Authorization": f"Bearer {token}"}

    async def _call(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        headers = await self._authz()
        try:
            r = await self._http.request(
                method, f"{self._base_url}{path}", headers=headers, json=json
            )
        except httpx.HTTPError as e:
            raise DirectoryError(f"{operation} failed: {e}", operation=operation) from e

        if r.is_success:
            return r

        graph_code, graph_message = _graph_error(r)
        message = f"{operation} failed with HTTP {r.status_code}"
        if graph_message:
            message = f"{message}: {graph_message}"
        if r.status_code == 404 or graph_code == _NOT_FOUND_CODE:
            raise DirectoryNotFoundError(
                message, operation=operation, status_code=r.status_code, graph_code=graph_code
            )
        raise DirectoryError(
            message, operation=operation, status_code=r.status_code, graph_code=graph_code
        )

    async def instantiate_from_template(
        self,
        *,
        template_id: str,
        display_name: str,
        identifier_uris: Sequence[str],
    ) -> InstantiatedApplication:
        r = await self._call(
            "instantiate_from_template",
            "POST",
            f"/applicationTemplates/{_seg(template_id)}/instantiate",
            json={"displayName": display_name, "identifierUris": list(identifier_uris)},
        )
        return InstantiatedApplication.from_graph(r.json())

    async def get_application(self, application_id: str) -> DirectoryApplication:
        r = await self._call("get_application", "GET", f"/applications/{_seg(application_id)}")
        return DirectoryApplication.from_graph(r.json())

    async def patch_application(self, application_id: str, fields: dict[str, Any]) -> None:
        await self._call(
            "patch_application", "PATCH", f"/applications/{_seg(application_id)}", json=fields
        )

    async def patch_service_principal(
        self, service_principal_id: str, fields: dict[str, Any]
    ) -> None:
        await self._call(
            "patch_service_principal",
            "PATCH",
            f"/servicePrincipals/{_seg(service_principal_id)}",
            json=fields,
        )

    async def add_token_signing_certificate(
        self,
        service_principal_id: str,
        *,
        display_name: str,
        not_after: datetime,
    ) -> SigningCertificate:
        r = await self._call(
            "add_token_signing_certificate",
            "POST",
            f"/servicePrincipals/{_seg(service_principal_id)}/addTokenSigningCertificate",
            json={
                "displayName": display_name,
                "endDateTime": not_after.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ"),
            },
        )
        return SigningCertificate.from_graph(r.json())

    async def add_owner(self, application_id: str, owner_id: str) -> None:
        await self._call(
            "add_owner",
            "POST",
            f"/applications/{_seg(application_id)}/owners/$ref",
            json={"@odata.id": f"{self._base_url}/users/{_seg(owner_id)}"},
        )


def _graph_error(r: httpx.Response) -> tuple[str | None, str | None]:
    # Graph errors look like {"error": {"code": "...", "message": "..."}}.
    try:
        err = r.json()["error"]
        return err.get("code"), err.get("message")
    except (ValueError, KeyError, TypeError, AttributeError):
        return None, None


# --- Module Notes -----------------------------------------------------------
# Timeouts are configured on the shared httpx.AsyncClient (see `api.app`).
