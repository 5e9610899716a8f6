from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import Any

from saml_provisioner.db.ledger import Ledger
from saml_provisioner.directory.base import DirectoryService
from saml_provisioner.errors import DirectoryNotFoundError, ProvisioningTimeoutError
from saml_provisioner.models import (
    DirectoryApplication,
    OwnershipRecord,
    ProvisioningStage,
    signing_certificate_end_date,
)
from saml_provisioner.observability.logging import get_logger
from saml_provisioner.orchestrator.state import ProvisioningState
from saml_provisioner.settings import Settings

log = get_logger(__name__)


def _event(name: str, **details: Any) -> list[dict[str, Any]]:
    return [{"event": name, "details": details}]


async def instantiate_node(
    state: ProvisioningState, *, directory: DirectoryService, settings: Settings
) -> dict[str, Any]:
    request = state["request"]
    created = await directory.instantiate_from_template(
        template_id=settings.saml_template_id,
        display_name=request.display_name,
        identifier_uris=list(request.identifier_uris),
    )
    return {
        "instantiated": created,
        "stage": ProvisioningStage.instantiated,
        "events": _event(
            "INSTANTIATED",
            application_id=created.application.application_id,
            service_principal_id=created.service_principal.service_principal_id,
        ),
    }


async def converge_node(
    state: ProvisioningState, *, directory: DirectoryService, settings: Settings
) -> dict[str, Any]:
    application_id = state["instantiated"].application.application_id
    application, attempts = await wait_for_application(
        directory,
        application_id=application_id,
        interval=settings.poll_interval_seconds,
        max_attempts=settings.poll_max_attempts,
        deadline=settings.poll_deadline_seconds,
    )
    return {
        "application": application,
        "poll_attempts": attempts,
        "stage": ProvisioningStage.converged,
        "events": _event("CONVERGED", attempts=attempts),
    }


async def wait_for_application(
    directory: DirectoryService,
    *,
    application_id: str,
    interval: float,
    max_attempts: int,
    deadline: float | None = None,
) -> tuple[DirectoryApplication, int]:
    """
    Poll until a freshly instantiated application becomes readable.

    Template instantiation is eventually consistent: "not found" is retried, any
    other directory error propagates immediately. Each attempt sleeps `interval`
    seconds before reading. Gives up with `ProvisioningTimeoutError` after
    `max_attempts` reads or once `deadline` seconds have elapsed, whichever is
    first. Cancelling the calling task stops the poll at the next await.
    """

    attempts = 0
    budget = asyncio.timeout(deadline)
    try:
        async with budget:
            while attempts < max_attempts:
                attempts += 1
                await asyncio.sleep(interval)
                try:
                    application = await directory.get_application(application_id)
                except DirectoryNotFoundError:
                    log.debug("provisioning.poll_miss", application_id=application_id, attempt=attempts)
                    continue
                return application, attempts
    except TimeoutError as e:
        # A TimeoutError raised by the directory itself is not ours to rewrite.
        if not budget.expired():
            raise
        raise ProvisioningTimeoutError(
            f"application {application_id} not visible within {deadline}s",
            attempts=attempts,
        ) from e

    raise ProvisioningTimeoutError(
        f"application {application_id} not visible after {attempts} attempts",
        attempts=attempts,
    )


async def configure_reply_urls_node(
    state: ProvisioningState, *, directory: DirectoryService
) -> dict[str, Any]:
    uris = list(state["request"].identifier_uris)
    # Reply (ACS) URLs and entity ids are the same set.
    await directory.patch_application(
        state["instantiated"].application.application_id,
        {"web": {"redirectUris": uris}, "identifierUris": uris},
    )
    return {"stage": ProvisioningStage.urls_set, "events": _event("URLS_SET", uris=uris)}


async def enable_saml_sso_node(
    state: ProvisioningState, *, directory: DirectoryService
) -> dict[str, Any]:
    sign_on_url = state["request"].sign_on_url
    await directory.patch_service_principal(
        state["instantiated"].service_principal.service_principal_id,
        {
            "preferredSingleSignOnMode": "saml",
            "appRoleAssignmentRequired": False,
            "loginUrl": sign_on_url,
        },
    )
    return {
        "stage": ProvisioningStage.sso_enabled,
        "events": _event("SSO_ENABLED", sign_on_url=sign_on_url),
    }


async def issue_signing_certificate_node(
    state: ProvisioningState, *, directory: DirectoryService, settings: Settings
) -> dict[str, Any]:
    sp_id = state["instantiated"].service_principal.service_principal_id
    not_after = signing_certificate_end_date(
        datetime.now(tz=UTC), years=settings.signing_certificate_years
    )
    certificate = await directory.add_token_signing_certificate(
        sp_id,
        display_name=settings.signing_certificate_display_name,
        not_after=not_after,
    )
    await directory.patch_service_principal(
        sp_id, {"preferredTokenSigningKeyThumbprint": certificate.thumbprint}
    )
    return {
        "certificate": certificate,
        "stage": ProvisioningStage.certificate_issued,
        "events": _event(
            "CERTIFICATE_ISSUED",
            thumbprint=certificate.thumbprint,
            not_after=not_after.isoformat(),
        ),
    }


async def link_owner_node(
    state: ProvisioningState, *, directory: DirectoryService
) -> dict[str, Any]:
    request = state["request"]
    await directory.add_owner(state["instantiated"].application.application_id, request.owner_id)
    return {
        "stage": ProvisioningStage.owner_linked,
        "events": _event("OWNER_LINKED", owner_id=request.owner_id),
    }


async def persist_ownership_node(state: ProvisioningState, *, ledger: Ledger) -> dict[str, Any]:
    request = state["request"]
    instantiated = state["instantiated"]
    record = OwnershipRecord(
        application_id=instantiated.application.application_id,
        service_principal_id=instantiated.service_principal.service_principal_id,
        display_name=request.display_name,
        owner_id=request.owner_id,
    )
    await ledger.put(record)
    return {"record": record, "events": _event("RECORDED", **record.to_dict())}
