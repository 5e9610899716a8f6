"""
saml_provisioner.services.provisioning_service

SAML application provisioning service.

Responsibilities:
- Validate the request, then run the provisioning graph step by step.
- Track the last completed stage and attach it to any error that aborts a run.
- Expose the read-side operations (by id, by owner).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from saml_provisioner.db.ledger import Ledger
from saml_provisioner.directory.base import DirectoryService
from saml_provisioner.errors import ProvisionerError
from saml_provisioner.models import DirectoryApplication, OwnershipRecord, ProvisioningRequest
from saml_provisioner.observability.logging import get_logger
from saml_provisioner.orchestrator.graph import build_graph
from saml_provisioner.orchestrator.reducers import append_events
from saml_provisioner.orchestrator.state import ProvisioningState
from saml_provisioner.services.ownership_query import OwnershipQueryService
from saml_provisioner.settings import Settings

log = get_logger(__name__)


class ProvisioningOrchestrator:
    def __init__(
        self,
        *,
        directory: DirectoryService,
        ledger: Ledger,
        settings: Settings,
    ) -> None:
        self._directory = directory
        self._graph = build_graph(directory=directory, ledger=ledger, settings=settings)
        self._owners = OwnershipQueryService(directory=directory, ledger=ledger)

    async def build_saml_app(
        self, request: ProvisioningRequest | Mapping[str, Any]
    ) -> OwnershipRecord:
        """
        Provision a SAML application for `request.owner_id` and record ownership.

        Steps run strictly in order: instantiate, converge, configure reply URLs,
        enable SAML SSO, issue the signing certificate, link the owner, persist
        the ownership record. The first failure aborts the run and is re-raised
        unchanged, with `.stage` set to the last completed stage. Nothing already
        applied in the directory is rolled back.
        """

        if not isinstance(request, ProvisioningRequest):
            request = ProvisioningRequest.from_mapping(request)

        bound = log.bind(display_name=request.display_name, owner_id=request.owner_id)
        progress: ProvisioningState = {"request": request, "stage": None, "events": []}

        try:
            async for update in self._graph.astream(dict(progress), stream_mode="updates"):
                if not isinstance(update, dict):
                    continue
                for node_name, node_update in update.items():
                    if not isinstance(node_update, dict):
                        continue
                    _merge(progress, node_update)
                    bound.info("provisioning.step", step=node_name, stage=progress.get("stage"))
        except ProvisionerError as e:
            e.stage = progress.get("stage")
            instantiated = progress.get("instantiated")
            bound.warning(
                "provisioning.failed",
                stage=e.stage,
                error=e.code,
                detail=e.message,
                application_id=instantiated.application.application_id if instantiated else None,
            )
            raise

        record = progress.get("record")
        if record is None:
            raise ProvisionerError("provisioning finished without an ownership record")
        bound.info("provisioning.completed", application_id=record.application_id)
        return record

    async def get_application_by_id(self, application_id: str) -> DirectoryApplication:
        return await self._directory.get_application(application_id)

    async def get_applications_by_user(self, owner_id: str) -> list[DirectoryApplication]:
        return await self._owners.list_for_owner(owner_id)


def _merge(progress: ProvisioningState, update: dict[str, Any]) -> None:
    # "updates" stream mode yields raw node output, not reduced state.
    for key, value in update.items():
        if key == "events":
            progress["events"] = append_events(progress.get("events"), value)
        else:
            progress[key] = value  # type: ignore[literal-required]


# --- Module Notes -----------------------------------------------------------
# Concurrent build_saml_app calls share nothing but the credential cache; two
# requests with the same identifier URIs are not de-duplicated.
