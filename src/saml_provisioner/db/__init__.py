"""
saml_provisioner.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide the ownership ORM model, engine/session setup, and the SQL ledger.
"""

# Package marker.
