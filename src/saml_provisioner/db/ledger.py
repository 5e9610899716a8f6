"""
saml_provisioner.db.ledger

Ledger port and its SQLAlchemy implementation.

Responsibilities:
- Declare the `Ledger` capability used by the orchestrator and ownership query.
- Persist and query ownership records with bound parameters only.
- Surface every persistence failure as `LedgerError`.
"""

from __future__ import annotations

from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from saml_provisioner.db.models import OwnershipRecordRow
from saml_provisioner.errors import LedgerError
from saml_provisioner.models import OwnershipRecord


class Ledger(Protocol):
    async def put(self, record: OwnershipRecord) -> None: ...

    async def query_by_owner(self, owner_id: str) -> list[OwnershipRecord]: ...


class SqlLedger:
    """
    Each call opens and commits its own session; the ledger has no long-lived
    transaction because the workflow writes exactly one row at the very end.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def put(self, record: OwnershipRecord) -> None:
        try:
            async with self._session_factory() as session:
                session.add(OwnershipRecordRow.from_record(record))
                await session.commit()
        except SQLAlchemyError as e:
            raise LedgerError(
                f"could not store ownership record for application {record.application_id}: {e}"
            ) from e

    async def query_by_owner(self, owner_id: str) -> list[OwnershipRecord]:
        # owner_id is bound as a parameter, never interpolated into SQL.
        stmt = (
            select(OwnershipRecordRow)
            .where(OwnershipRecordRow.owner_id == owner_id)
            .order_by(OwnershipRecordRow.created_at)
        )
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as e:
            raise LedgerError(f"could not query ownership records: {e}") from e
        return [row.to_record() for row in rows]


# --- Module Notes -----------------------------------------------------------
# Records come back in insertion order (created_at); `list_for_owner` keeps it.
