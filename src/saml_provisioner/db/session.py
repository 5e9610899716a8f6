"""
saml_provisioner.db.session

Engine and session factories for the ownership ledger.
"""

from __future__ import annotations

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from saml_provisioner.settings import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    url = make_url(settings.database_url)
    if url.get_backend_name() == "sqlite":
        # File-backed SQLite: no network connections to go stale.
        return create_async_engine(url)
    return create_async_engine(url, pool_pre_ping=True)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Ledger rows are turned into OwnershipRecord values after commit.
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)
