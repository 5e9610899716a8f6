"""
saml_provisioner.api.routers.saml_apps

Endpoints for provisioning and browsing the caller's SAML applications.

Responsibilities:
- Provision a SAML app owned by the authenticated principal.
- List the principal's apps and show a single app with its launch/metadata URLs.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from starlette.status import HTTP_201_CREATED

from saml_provisioner.api.deps import provisioner_dep, settings_dep
from saml_provisioner.auth.deps import get_principal, require_roles
from saml_provisioner.auth.models import OPERATOR_ROLE, Principal
from saml_provisioner.models import DirectoryApplication, ProvisioningRequest
from saml_provisioner.services.provisioning_service import ProvisioningOrchestrator
from saml_provisioner.settings import Settings

router = APIRouter(
    prefix="/v1/saml-apps",
    tags=["saml-apps"],
    dependencies=[Depends(require_roles(OPERATOR_ROLE))],
)


class CreateSamlAppRequest(BaseModel):
    # Used as both the entity id and the reply URL.
    entity_id: str = Field(min_length=1, max_length=2048)
    sign_on_url: str | None = Field(default=None, max_length=2048)
    # Defaults to the entity id.
    display_name: str | None = Field(default=None, max_length=256)
    # Extra entity ids; the first one sent is always `entity_id`.
    identifier_uris: list[str] = Field(default_factory=list, max_length=32)


class OwnershipRecordResponse(BaseModel):
    application_id: str
    service_principal_id: str
    display_name: str
    owner_id: str


class SamlAppSummary(BaseModel):
    application_id: str
    app_id: str
    display_name: str
    identifier_uris: list[str]
    service_principal_id: str | None = None

    @classmethod
    def from_application(cls, app: DirectoryApplication) -> SamlAppSummary:
        return cls(
            application_id=app.application_id,
            app_id=app.app_id,
            display_name=app.display_name,
            identifier_uris=list(app.identifier_uris),
            service_principal_id=app.service_principal_id,
        )


class SamlAppDetail(SamlAppSummary):
    user_access_url: str | None
    metadata_url: str
    application: dict[str, Any]


@router.post("", response_model=OwnershipRecordResponse, status_code=HTTP_201_CREATED)
async def create_saml_app(
    body: CreateSamlAppRequest,
    principal: Principal = Depends(get_principal),
    provisioner: ProvisioningOrchestrator = Depends(provisioner_dep),
) -> OwnershipRecordResponse:
    request = ProvisioningRequest(
        display_name=body.display_name or body.entity_id,
        identifier_uris=(body.entity_id, *body.identifier_uris),
        owner_id=principal.subject,
        sign_on_url=body.sign_on_url,
    )
    record = await provisioner.build_saml_app(request)
    return OwnershipRecordResponse(**record.to_dict())


@router.get("", response_model=list[SamlAppSummary])
async def list_saml_apps(
    principal: Principal = Depends(get_principal),
    provisioner: ProvisioningOrchestrator = Depends(provisioner_dep),
) -> list[SamlAppSummary]:
    apps = await provisioner.get_applications_by_user(principal.subject)
    return [SamlAppSummary.from_application(a) for a in apps]


@router.get("/{application_id}", response_model=SamlAppDetail)
async def get_saml_app(
    application_id: str,
    provisioner: ProvisioningOrchestrator = Depends(provisioner_dep),
    settings: Settings = Depends(settings_dep),
) -> SamlAppDetail:
    app = await provisioner.get_application_by_id(application_id)
    summary = SamlAppSummary.from_application(app)
    return SamlAppDetail(
        **summary.model_dump(),
        user_access_url=app.user_access_url(settings.tenant_id),
        metadata_url=app.federation_metadata_url(settings.tenant_id),
        application=app.raw,
    )


# --- Module Notes -----------------------------------------------------------
# Errors from the provisioner propagate to `api.errors`, which maps them to
# HTTP status codes; this router never catches them.
