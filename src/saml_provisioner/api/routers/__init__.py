"""
saml_provisioner.api.routers

API routers.
"""

# Package marker; routers are imported directly from submodules.
