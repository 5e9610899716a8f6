"""
saml_provisioner.orchestrator.reducers

How node updates are merged into `ProvisioningState`.
"""

from __future__ import annotations

from typing import Any

Event = dict[str, Any]


def append_events(left: list[Event] | None, right: list[Event] | None) -> list[Event]:
    """
    Append-only merge for the provisioning event trail.

    Each event is numbered with its position in the trail (`seq`, starting at 1)
    so log lines and API responses can be ordered without timestamps.
    """

    trail = list(left or [])
    for event in right or []:
        trail.append({**event, "seq": len(trail) + 1})
    return trail
