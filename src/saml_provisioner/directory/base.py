"""
saml_provisioner.directory.base

Port definition for the external identity directory.

Responsibilities:
- Declare the operations the provisioning workflow performs against the directory.
- Document the error contract every implementation must honour.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any, Protocol

from saml_provisioner.models import (
    DirectoryApplication,
    InstantiatedApplication,
    SigningCertificate,
)


class DirectoryService(Protocol):
    """
    Capability consumed by the orchestrator and the ownership query.

    Implementations raise `DirectoryNotFoundError` when the addressed object does
    not exist and `DirectoryError` for every other unsuccessful call.
    """

    async def instantiate_from_template(
        self,
        *,
        template_id: str,
        display_name: str,
        identifier_uris: Sequence[str],
    ) -> InstantiatedApplication: ...

    async def get_application(self, application_id: str) -> DirectoryApplication: ...

    async def patch_application(self, application_id: str, fields: dict[str, Any]) -> None: ...

    async def patch_service_principal(
        self, service_principal_id: str, fields: dict[str, Any]
    ) -> None: ...

    async def add_token_signing_certificate(
        self,
        service_principal_id: str,
        *,
        display_name: str,
        not_after: datetime,
    ) -> SigningCertificate: ...

    async def add_owner(self, application_id: str, owner_id: str) -> None: ...
