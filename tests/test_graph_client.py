from __future__ import annotations

import json
from datetime import UTC, datetime

import httpx
import pytest

from saml_provisioner.directory.graph_client import GraphDirectoryClient
from saml_provisioner.errors import DirectoryError, DirectoryNotFoundError

GRAPH = "https://graph.microsoft.com/v1.0"


class StaticCredentials:
    async def get_token(self) -> str:
        return "graph-token"


def _client(settings, http: httpx.AsyncClient) -> GraphDirectoryClient:
    return GraphDirectoryClient(settings=settings, http=http, credentials=StaticCredentials())  # type: ignore[arg-type]


def _graph(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_get_application_sends_bearer_and_parses(settings) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "id": "obj-1",
                "appId": "client-1",
                "displayName": "contoso",
                "identifierUris": ["https://contoso.example/saml"],
            },
        )

    async with _graph(handler) as http:
        app = await _client(settings, http).get_application("obj-1")

    assert seen[0].method == "GET"
    assert str(seen[0].url) == f"{GRAPH}/applications/obj-1"
    assert seen[0].headers["authorization"] == "Bearer graph-token"
    assert app.application_id == "obj-1"
    assert app.app_id == "client-1"
    assert app.identifier_uris == ("https://contoso.example/saml",)


@pytest.mark.asyncio
async def test_ids_are_quoted_into_the_path(settings) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "x"})

    async with _graph(handler) as http:
        await _client(settings, http).get_application("a/b c")

    assert seen[0].url.raw_path == b"/v1.0/applications/a%2Fb%20c"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(404, json={"error": {"code": "Request_ResourceNotFound", "message": "gone"}}),
        httpx.Response(400, json={"error": {"code": "Request_ResourceNotFound", "message": "nope"}}),
        httpx.Response(404),
    ],
)
async def test_not_found_responses(settings, response) -> None:
    async with _graph(lambda request: response) as http:
        with pytest.raises(DirectoryNotFoundError) as exc_info:
            await _client(settings, http).get_application("obj-1")

    assert exc_info.value.operation == "get_application"


@pytest.mark.asyncio
async def test_other_failures_raise_directory_error(settings) -> None:
    response = httpx.Response(
        503, json={"error": {"code": "serviceNotAvailable", "message": "try later"}}
    )
    async with _graph(lambda request: response) as http:
        with pytest.raises(DirectoryError) as exc_info:
            await _client(settings, http).patch_application("obj-1", {"identifierUris": []})

    err = exc_info.value
    assert not isinstance(err, DirectoryNotFoundError)
    assert err.operation == "patch_application"
    assert err.status_code == 503
    assert err.graph_code == "serviceNotAvailable"
    assert "try later" in err.message


@pytest.mark.asyncio
async def test_transport_failure_raises_directory_error(settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    async with _graph(handler) as http:
        with pytest.raises(DirectoryError) as exc_info:
            await _client(settings, http).add_owner("obj-1", "u1")

    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_instantiate_from_template(settings) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            201,
            json={
                "application": {"id": "obj-1", "appId": "client-1", "displayName": "contoso"},
                "servicePrincipal": {"id": "sp-1", "appId": "client-1"},
            },
        )

    async with _graph(handler) as http:
        created = await _client(settings, http).instantiate_from_template(
            template_id=settings.saml_template_id,
            display_name="contoso",
            identifier_uris=["https://contoso.example/saml"],
        )

    assert seen[0].method == "POST"
    assert str(seen[0].url) == (
        f"{GRAPH}/applicationTemplates/8adf8e6e-67b2-4cf2-a259-e3dc5476c621/instantiate"
    )
    assert json.loads(seen[0].content) == {
        "displayName": "contoso",
        "identifierUris": ["https://contoso.example/saml"],
    }
    assert created.application.application_id == "obj-1"
    assert created.service_principal.service_principal_id == "sp-1"


@pytest.mark.asyncio
async def test_add_token_signing_certificate(settings) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200, json={"thumbprint": "ABC123", "endDateTime": "2029-05-01T00:00:00Z"}
        )

    async with _graph(handler) as http:
        cert = await _client(settings, http).add_token_signing_certificate(
            "sp-1",
            display_name="CN=Microsoft Azure Federated SSO Certificate",
            not_after=datetime(2029, 5, 1, tzinfo=UTC),
        )

    assert str(seen[0].url) == f"{GRAPH}/servicePrincipals/sp-1/addTokenSigningCertificate"
    assert json.loads(seen[0].content) == {
        "displayName": "CN=Microsoft Azure Federated SSO Certificate",
        "endDateTime": "2029-05-01T00:00:00Z",
    }
    assert cert.thumbprint == "ABC123"
    assert cert.not_after == datetime(2029, 5, 1, tzinfo=UTC)


@pytest.mark.asyncio
async def test_add_owner_posts_directory_reference(settings) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204)

    async with _graph(handler) as http:
        await _client(settings, http).add_owner("obj-1", "user-42")

    assert seen[0].method == "POST"
    assert seen[0].url.raw_path == b"/v1.0/applications/obj-1/owners/$ref"
    assert json.loads(seen[0].content) == {"@odata.id": f"{GRAPH}/users/user-42"}


@pytest.mark.asyncio
async def test_patch_application_sends_fields_as_json(settings) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204)

    uris = ["https://contoso.example/saml"]
    async with _graph(handler) as http:
        await _client(settings, http).patch_application(
            "obj 1", {"web": {"redirectUris": uris}, "identifierUris": uris}
        )

    (request,) = seen
    assert request.method == "PATCH"
    assert request.url.raw_path == b"/v1.0/applications/obj%201"
    assert request.headers["authorization"] == "Bearer graph-token"
    assert json.loads(request.content) == {"web": {"redirectUris": uris}, "identifierUris": uris}


@pytest.mark.asyncio
async def test_patch_service_principal_sends_fields_as_json(settings) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204)

    fields = {
        "preferredSingleSignOnMode": "saml",
        "appRoleAssignmentRequired": False,
        "loginUrl": None,
    }
    async with _graph(handler) as http:
        await _client(settings, http).patch_service_principal("sp/1", fields)

    (request,) = seen
    assert request.method == "PATCH"
    assert request.url.raw_path == b"/v1.0/servicePrincipals/sp%2F1"
    assert request.headers["authorization"] == "Bearer graph-token"
    assert json.loads(request.content) == fields
