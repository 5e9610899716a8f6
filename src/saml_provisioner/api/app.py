"""
saml_provisioner.api.app

FastAPI app factory for the SAML provisioning service.

Responsibilities:
- Build the FastAPI application and register routers/middleware/error handlers.
- Own shared infrastructure for the app's lifetime (DB engine, httpx client,
  credential cache, provisioner).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from saml_provisioner import __version__
from saml_provisioner.api.errors import register_exception_handlers
from saml_provisioner.api.routers.dev_auth import router as dev_auth_router
from saml_provisioner.api.routers.health import router as health_router
from saml_provisioner.api.routers.saml_apps import router as saml_apps_router
from saml_provisioner.db.init_db import init_db
from saml_provisioner.db.ledger import SqlLedger
from saml_provisioner.db.session import create_engine, create_sessionmaker
from saml_provisioner.directory.base import DirectoryService
from saml_provisioner.directory.credentials import CredentialProvider
from saml_provisioner.directory.graph_client import GraphDirectoryClient
from saml_provisioner.observability.logging import configure_logging, get_logger
from saml_provisioner.observability.middleware import RequestContextMiddleware
from saml_provisioner.services.provisioning_service import ProvisioningOrchestrator
from saml_provisioner.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings, directory: DirectoryService | None = None) -> FastAPI:
    """
    `directory` overrides the Graph client (tests, local stubs).
    """

    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod uses Alembic.
            await init_db(engine)

        http = httpx.AsyncClient(timeout=settings.graph_timeout_seconds)
        if directory is None:
            credentials = CredentialProvider(settings=settings, http=http)
            app_directory: DirectoryService = GraphDirectoryClient(
                settings=settings, http=http, credentials=credentials
            )
        else:
            app_directory = directory

        app.state.provisioner = ProvisioningOrchestrator(
            directory=app_directory,
            ledger=SqlLedger(app.state.sessionmaker),
            settings=settings,
        )
        try:
            yield
        finally:
            await http.aclose()
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="SAML Application Provisioner",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    register_exception_handlers(app)
    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(saml_apps_router)

    return app


# --- Module Notes -----------------------------------------------------------
# One httpx.AsyncClient (and therefore one credential cache) per process; every
# provisioning run in the process shares the cached token.
