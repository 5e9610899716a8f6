"""
saml_provisioner.orchestrator

Provisioning workflow package (LangGraph state machine).

Responsibilities:
- Typed state schema, step nodes, and linear graph compilation.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Call sites should go through `services.provisioning_service`, not the graph directly.
