"""
saml_provisioner.directory

Directory service boundary (Microsoft Graph).

Responsibilities:
- Define the `DirectoryService` port the orchestrator depends on.
- Provide the client-credentials token cache and the httpx-based Graph client.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The orchestrator should depend on `directory.base.DirectoryService`, not on httpx.
