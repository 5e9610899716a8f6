"""
saml_provisioner.services.ownership_query

Owner-scoped application lookup.

Responsibilities:
- Read a user's ownership records from the ledger.
- Fetch the matching applications from the directory concurrently, all-or-nothing.
"""

from __future__ import annotations

import asyncio
import dataclasses

from saml_provisioner.db.ledger import Ledger
from saml_provisioner.directory.base import DirectoryService
from saml_provisioner.models import DirectoryApplication
from saml_provisioner.observability.logging import get_logger

log = get_logger(__name__)


class OwnershipQueryService:
    def __init__(self, *, directory: DirectoryService, ledger: Ledger) -> None:
        self._directory = directory
        self._ledger = ledger

    async def list_for_owner(self, owner_id: str) -> list[DirectoryApplication]:
        records = await self._ledger.query_by_owner(owner_id)
        if not records:
            return []

        tasks = [
            asyncio.ensure_future(self._directory.get_application(r.application_id))
            for r in records
        ]
        try:
            apps = await asyncio.gather(*tasks)
        except Exception:
            # Fail fast: the first failed read fails the query; drop the rest.
            for t in tasks:
                t.cancel()
            raise
        log.debug("ownership.listed", owner_id=owner_id, count=len(apps))
        return [
            dataclasses.replace(app, service_principal_id=r.service_principal_id)
            for app, r in zip(apps, records)
        ]
