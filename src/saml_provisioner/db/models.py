"""
saml_provisioner.db.models

Ledger schema.

Responsibilities:
- Define the `ownership_records` table mapping directory applications to owners.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from saml_provisioner.db.base import Base
from saml_provisioner.models import OwnershipRecord


def _utcnow() -> datetime:
    # Naive UTC; SQLite has no timezone-aware column type.
    return datetime.now(tz=UTC).replace(tzinfo=None)


class OwnershipRecordRow(Base):
    __tablename__ = "ownership_records"

    # Directory object id of the application; one record per application.
    application_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    service_principal_id: Mapped[str] = mapped_column(String(64), nullable=False)
    display_name: Mapped[str] = mapped_column(String(256), nullable=False)
    owner_id: Mapped[str] = mapped_column(String(256), nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)

    @classmethod
    def from_record(cls, record: OwnershipRecord) -> OwnershipRecordRow:
        return cls(
            application_id=record.application_id,
            service_principal_id=record.service_principal_id,
            display_name=record.display_name,
            owner_id=record.owner_id,
        )

    def to_record(self) -> OwnershipRecord:
        return OwnershipRecord(
            application_id=self.application_id,
            service_principal_id=self.service_principal_id,
            display_name=self.display_name,
            owner_id=self.owner_id,
        )


# --- Module Notes -----------------------------------------------------------
# Records are append-only from this service's point of view; stale rows (apps
# deleted directly in the directory) are not reconciled here.
