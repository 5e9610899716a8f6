"""
saml_provisioner.auth.models

Caller identity and the roles the API checks.
"""

from __future__ import annotations

from dataclasses import dataclass

OPERATOR_ROLE = "saml_operator"
ADMIN_ROLE = "admin"


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller.

    `subject` is the caller's directory user object id in `tenant_id`; it
    becomes the owner of every application the caller provisions.
    """

    subject: str
    roles: frozenset[str]
    tenant_id: str

    @property
    def is_admin(self) -> bool:
        return ADMIN_ROLE in self.roles

    def can(self, *required: str) -> bool:
        return self.is_admin or set(required) <= self.roles
