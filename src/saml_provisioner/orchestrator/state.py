"""
saml_provisioner.orchestrator.state

Typed state schema used by the provisioning graph.

Responsibilities:
- Define the contract between step nodes (inputs/outputs).
- Record the last completed `ProvisioningStage` so failures can report progress.
"""

from __future__ import annotations

from typing import Annotated, Any, TypedDict

from saml_provisioner.models import (
    DirectoryApplication,
    InstantiatedApplication,
    OwnershipRecord,
    ProvisioningRequest,
    ProvisioningStage,
    SigningCertificate,
)
from saml_provisioner.orchestrator.reducers import append_events


class ProvisioningState(TypedDict, total=False):
    request: ProvisioningRequest

    # Last completed step; None until instantiation succeeds.
    stage: ProvisioningStage | None

    # Step outputs
    instantiated: InstantiatedApplication
    application: DirectoryApplication
    poll_attempts: int
    certificate: SigningCertificate
    record: OwnershipRecord

    events: Annotated[list[dict[str, Any]], append_events]


# --- Module Notes -----------------------------------------------------------
# total=False: a failed run leaves later keys unset, which is exactly what the
# caller inspects to see how far it got.
