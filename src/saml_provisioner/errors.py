"""
saml_provisioner.errors

Exception hierarchy shared by the directory client, the ledger and the orchestrator.

Responsibilities:
- Give each failure class of the provisioning workflow a distinct type.
- Carry the workflow stage reached when a provisioning run aborted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from saml_provisioner.models import ProvisioningStage


class ProvisionerError(Exception):
    """
    Base class for every error raised by this package.

    `stage` is filled in by the orchestrator when the error aborts a run:
    it names the last workflow stage that completed (None if nothing did).
    """

    code = "provisioner_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.stage: ProvisioningStage | None = None


class ValidationError(ProvisionerError):
    """Malformed provisioning request; raised before any external call."""

    code = "validation_error"


class CredentialError(ProvisionerError):
    """The client-credentials token exchange failed."""

    code = "credential_error"


class DirectoryError(ProvisionerError):
    code = "directory_error"

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        status_code: int | None = None,
        graph_code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code
        self.graph_code = graph_code


class DirectoryNotFoundError(DirectoryError):
    """The directory object does not exist (yet)."""

    code = "directory_not_found"


class ProvisioningTimeoutError(ProvisionerError):
    """The created application never became readable within the poll budget."""

    code = "provisioning_timeout"

    def __init__(self, message: str, *, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class LedgerError(ProvisionerError):
    code = "ledger_error"


# --- Module Notes -----------------------------------------------------------
# `api.errors` maps these types onto HTTP status codes; keep `code` values stable.
