"""
saml_provisioner

Provisions SAML single-sign-on applications in Microsoft Entra ID (via Graph)
and records which directory user owns each one.

Responsibilities:
- Expose package version metadata.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"


# --- Module Notes -----------------------------------------------------------
# Programmatic entry point: `services.provisioning_service.ProvisioningOrchestrator`.
# Importing this package must not pull in FastAPI or LangGraph.
