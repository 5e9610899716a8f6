"""
saml_provisioner.db.init_db

Create the ledger schema directly (dev/test). Production uses Alembic.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from saml_provisioner.db import models  # noqa: F401  # registers ownership_records on Base.metadata
from saml_provisioner.db.base import Base
from saml_provisioner.observability.logging import get_logger

log = get_logger(__name__)


async def init_db(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.info("ledger.schema_ready", tables=sorted(Base.metadata.tables))
