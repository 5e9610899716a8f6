"""
saml_provisioner.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions and the provisioner.
- Encapsulate app.state access patterns.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from saml_provisioner.services.provisioning_service import ProvisioningOrchestrator
from saml_provisioner.settings import Settings


def settings_dep(request: Request) -> Settings:
    # The Settings the app was built with (see `api.app.create_app`).
    return request.app.state.settings  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


def provisioner_dep(request: Request) -> ProvisioningOrchestrator:
    return request.app.state.provisioner  # type: ignore[attr-defined]
