"""
saml_provisioner.services

Service-layer package.

Responsibilities:
- Expose the programmatic provisioning operations.
- Compose the directory and ledger ports with the workflow graph.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services are pure Python and testable with fake DirectoryService/Ledger objects.
