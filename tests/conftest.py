"""
tests.conftest

Shared fakes and fixtures.

Responsibilities:
- In-memory DirectoryService / Ledger fakes that record every call in order.
- Fast settings (zero poll interval, small attempt ceiling, temp SQLite file).
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any

import pytest

from saml_provisioner.errors import DirectoryError, DirectoryNotFoundError, LedgerError
from saml_provisioner.models import (
    DirectoryApplication,
    InstantiatedApplication,
    OwnershipRecord,
    SigningCertificate,
)
from saml_provisioner.settings import Settings


class FakeDirectory:
    """
    `visible_after` is the number of "not found" reads each new application
    returns before it becomes readable. `fail_on` maps an operation name to the
    exception that operation raises. `failing_ids` makes reads of those
    application ids fail with a 500.
    """

    def __init__(
        self,
        *,
        visible_after: int = 0,
        fail_on: dict[str, Exception] | None = None,
        failing_ids: Sequence[str] = (),
    ) -> None:
        self.visible_after = visible_after
        self.fail_on = dict(fail_on or {})
        self.failing_ids = set(failing_ids)
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.applications: dict[str, dict[str, Any]] = {}
        self._reads: dict[str, int] = {}
        self._created = 0

    @property
    def operations(self) -> list[str]:
        return [op for op, _ in self.calls]

    def seed(self, application_id: str, *, display_name: str = "seeded") -> None:
        self.applications[application_id] = {
            "id": application_id,
            "appId": f"client-{application_id}",
            "displayName": display_name,
            "identifierUris": [f"https://{application_id}.example/saml"],
        }
        self._reads[application_id] = self.visible_after

    def _record(self, op: str, *args: Any) -> None:
        self.calls.append((op, args))
        if op in self.fail_on:
            raise self.fail_on[op]

    async def instantiate_from_template(
        self, *, template_id: str, display_name: str, identifier_uris: Sequence[str]
    ) -> InstantiatedApplication:
        self._record("instantiate_from_template", template_id, display_name, tuple(identifier_uris))
        self._created += 1
        application_id = f"app-{self._created}"
        self.applications[application_id] = {
            "id": application_id,
            "appId": f"client-{self._created}",
            "displayName": display_name,
            "identifierUris": [],
        }
        return InstantiatedApplication.from_graph(
            {
                "application": self.applications[application_id],
                "servicePrincipal": {"id": f"sp-{self._created}", "appId": f"client-{self._created}"},
            }
        )

    async def get_application(self, application_id: str) -> DirectoryApplication:
        self._record("get_application", application_id)
        if application_id in self.failing_ids:
            raise DirectoryError(
                "server error", operation="get_application", status_code=500
            )
        seen = self._reads.get(application_id, 0)
        self._reads[application_id] = seen + 1
        if application_id not in self.applications or seen < self.visible_after:
            raise DirectoryNotFoundError(
                "not found", operation="get_application", status_code=404
            )
        return DirectoryApplication.from_graph(self.applications[application_id])

    async def patch_application(self, application_id: str, fields: dict[str, Any]) -> None:
        self._record("patch_application", application_id, fields)
        if "identifierUris" in fields and application_id in self.applications:
            self.applications[application_id]["identifierUris"] = list(fields["identifierUris"])

    async def patch_service_principal(
        self, service_principal_id: str, fields: dict[str, Any]
    ) -> None:
        self._record("patch_service_principal", service_principal_id, fields)

    async def add_token_signing_certificate(
        self, service_principal_id: str, *, display_name: str, not_after: datetime
    ) -> SigningCertificate:
        self._record("add_token_signing_certificate", service_principal_id, display_name, not_after)
        return SigningCertificate(thumbprint="A1B2C3", not_after=not_after)

    async def add_owner(self, application_id: str, owner_id: str) -> None:
        self._record("add_owner", application_id, owner_id)


class FakeLedger:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.puts: list[OwnershipRecord] = []
        self.records: list[OwnershipRecord] = []

    async def put(self, record: OwnershipRecord) -> None:
        self.puts.append(record)
        if self.fail:
            raise LedgerError("ledger unavailable")
        self.records.append(record)

    async def query_by_owner(self, owner_id: str) -> list[OwnershipRecord]:
        return [r for r in self.records if r.owner_id == owner_id]


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        env="test",
        tenant_id="tenant-123",
        client_id="client-id",
        client_secret="client-secret",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}",
        poll_interval_seconds=0,
        poll_max_attempts=5,
    )


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory()


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()
