"""
saml_provisioner.models

Domain models for SAML application provisioning.

Responsibilities:
- Validate provisioning requests before any external call is made.
- Give typed shapes to the directory objects the workflow reads and writes.
- Define the ownership record persisted to the ledger.
- Define the workflow stages used to report how far a run progressed.
"""

from __future__ import annotations

import enum
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from saml_provisioner.errors import ValidationError

_ACCESS_URL_STRIP = re.compile(r"[:./]")


class ProvisioningStage(enum.StrEnum):
    # Ordered; each value is the last completed step of a workflow run.
    instantiated = "INSTANTIATED"
    converged = "CONVERGED"
    urls_set = "URLS_SET"
    sso_enabled = "SSO_ENABLED"
    certificate_issued = "CERTIFICATE_ISSUED"
    owner_linked = "OWNER_LINKED"


def _require_text(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} must be a non-empty string")
    return value


@dataclass(frozen=True, slots=True)
class ProvisioningRequest:
    """
    Caller input for `ProvisioningOrchestrator.build_saml_app`.

    `identifier_uris` doubles as the SAML entity id list and the reply-URL set.
    It must be a list or tuple; strings, sets and other iterables are rejected
    because their order (or their element type) is not what the caller meant.
    """

    display_name: str
    identifier_uris: tuple[str, ...]
    owner_id: str
    sign_on_url: str | None = None

    def __post_init__(self) -> None:
        _require_text("display_name", self.display_name)
        _require_text("owner_id", self.owner_id)

        uris = self.identifier_uris
        if isinstance(uris, (str, bytes)) or not isinstance(uris, Sequence):
            raise ValidationError("identifier_uris must be a list of URI strings")
        if not uris:
            raise ValidationError("identifier_uris must not be empty")
        for uri in uris:
            _require_text("identifier_uris item", uri)
        object.__setattr__(self, "identifier_uris", tuple(uris))

        if self.sign_on_url is not None and not isinstance(self.sign_on_url, str):
            raise ValidationError("sign_on_url must be a string")
        # Blank form fields mean "no sign-on URL".
        if not self.sign_on_url:
            object.__setattr__(self, "sign_on_url", None)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> ProvisioningRequest:
        if not isinstance(payload, Mapping):
            raise ValidationError("provisioning request must be a mapping")
        return cls(
            display_name=payload.get("display_name"),  # type: ignore[arg-type]
            identifier_uris=payload.get("identifier_uris"),  # type: ignore[arg-type]
            owner_id=payload.get("owner_id"),  # type: ignore[arg-type]
            sign_on_url=payload.get("sign_on_url"),
        )


@dataclass(frozen=True, slots=True)
class DirectoryApplication:
    # `application_id` is the directory object id; `app_id` is the client id shown to users.
    application_id: str
    app_id: str
    display_name: str
    identifier_uris: tuple[str, ...]
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)
    # Not part of the Graph application payload; filled from the ownership ledger.
    service_principal_id: str | None = None

    @classmethod
    def from_graph(cls, payload: Mapping[str, Any]) -> DirectoryApplication:
        return cls(
            application_id=str(payload.get("id", "")),
            app_id=str(payload.get("appId", "")),
            display_name=str(payload.get("displayName") or ""),
            identifier_uris=tuple(payload.get("identifierUris") or ()),
            raw=dict(payload),
        )

    def user_access_url(self, tenant_id: str) -> str | None:
        """My Apps launch URL, or None when no entity id has been configured yet."""

        if not self.identifier_uris:
            return None
        slug = _ACCESS_URL_STRIP.sub("", self.identifier_uris[0])
        return f"https://myapps.microsoft.com/signin/{slug}/{self.app_id}/?tenantId={tenant_id}"

    def federation_metadata_url(self, tenant_id: str) -> str:
        return (
            f"https://login.microsoftonline.com/{tenant_id}"
            f"/federationmetadata/2007-06/federationmetadata.xml?appid={self.app_id}"
        )


@dataclass(frozen=True, slots=True)
class ServicePrincipal:
    service_principal_id: str
    app_id: str

    @classmethod
    def from_graph(cls, payload: Mapping[str, Any]) -> ServicePrincipal:
        return cls(
            service_principal_id=str(payload.get("id", "")),
            app_id=str(payload.get("appId", "")),
        )


@dataclass(frozen=True, slots=True)
class InstantiatedApplication:
    """Initial (possibly incomplete) pair returned by template instantiation."""

    application: DirectoryApplication
    service_principal: ServicePrincipal

    @classmethod
    def from_graph(cls, payload: Mapping[str, Any]) -> InstantiatedApplication:
        return cls(
            application=DirectoryApplication.from_graph(payload.get("application") or {}),
            service_principal=ServicePrincipal.from_graph(payload.get("servicePrincipal") or {}),
        )


@dataclass(frozen=True, slots=True)
class SigningCertificate:
    thumbprint: str
    not_after: datetime | None

    @classmethod
    def from_graph(cls, payload: Mapping[str, Any]) -> SigningCertificate:
        raw_end = payload.get("endDateTime")
        return cls(
            thumbprint=str(payload.get("thumbprint", "")),
            not_after=datetime.fromisoformat(raw_end) if raw_end else None,
        )


def signing_certificate_end_date(now: datetime, *, years: int) -> datetime:
    """
    Midnight (UTC) of `now`'s date, `years` years later.

    Feb 29 rolls over to Mar 1 when the target year is not a leap year.
    """

    midnight = now.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)
    try:
        return midnight.replace(year=midnight.year + years)
    except ValueError:
        return midnight.replace(year=midnight.year + years, day=28) + timedelta(days=1)


@dataclass(frozen=True, slots=True)
class OwnershipRecord:
    application_id: str
    service_principal_id: str
    display_name: str
    owner_id: str

    def to_dict(self) -> dict[str, str]:
        return {
            "application_id": self.application_id,
            "service_principal_id": self.service_principal_id,
            "display_name": self.display_name,
            "owner_id": self.owner_id,
        }


@dataclass(frozen=True, slots=True)
class CachedCredential:
    token: str
    # Epoch seconds.
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


# --- Module Notes -----------------------------------------------------------
# The directory is the source of truth for applications; these dataclasses are
# never cached beyond a single workflow run or query.
