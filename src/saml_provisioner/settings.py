"""
saml_provisioner.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide env-driven settings for the API, the directory client and the ledger.
- Hide secrets from repr/logging (client secret, JWT secret).
- Make the convergence poll (interval, ceiling, deadline) explicit configuration.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SAMLP_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "saml-provisioner"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # API auth (bearer JWT carrying the operator's directory object id as `sub`)
    jwt_alg: str = "HS256"
    jwt_issuer: str = "saml-provisioner"
    jwt_audience: str = "saml-provisioner-api"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)

    # Ledger
    database_url: str = "sqlite+aiosqlite:///./saml_provisioner.db"

    # Directory app registration used for client-credentials calls
    tenant_id: str = "common"
    client_id: str = ""
    client_secret: str = Field(default="", repr=False)
    login_authority: str = "https://login.microsoftonline.com"
    graph_base_url: str = "https://graph.microsoft.com/v1.0"
    graph_scope: str = "https://graph.microsoft.com/.default"
    graph_timeout_seconds: float = 30.0

    # Workflow
    # Non-gallery application template; plain POST /applications cannot produce a SAML app.
    saml_template_id: str = "8adf8e6e-67b2-4cf2-a259-e3dc5476c621"
    signing_certificate_display_name: str = "CN=Microsoft Azure Federated SSO Certificate"
    signing_certificate_years: int = Field(default=3, ge=1)
    poll_interval_seconds: float = Field(default=1.0, ge=0)
    poll_max_attempts: int = Field(default=30, ge=1)
    poll_deadline_seconds: float | None = Field(default=None, gt=0)

    @property
    def token_url(self) -> str:
        return f"{self.login_authority.rstrip('/')}/{self.tenant_id}/oauth2/v2.0/token"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars on every call.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# The API stores the Settings instance it was built with on app.state; request
# handlers read it from there rather than from `get_settings()`.
