from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from langgraph.graph import END, StateGraph

from saml_provisioner.db.ledger import Ledger
from saml_provisioner.directory.base import DirectoryService
from saml_provisioner.orchestrator.nodes import (
    configure_reply_urls_node,
    converge_node,
    enable_saml_sso_node,
    instantiate_node,
    issue_signing_certificate_node,
    link_owner_node,
    persist_ownership_node,
)
from saml_provisioner.orchestrator.state import ProvisioningState
from saml_provisioner.settings import Settings

# Execution order. Each step starts only after the previous one's call returned.
WORKFLOW_STEPS: tuple[str, ...] = (
    "instantiate",
    "converge",
    "configure_reply_urls",
    "enable_saml_sso",
    "issue_signing_certificate",
    "link_owner",
    "persist_ownership",
)


def build_graph(*, directory: DirectoryService, ledger: Ledger, settings: Settings):
    """
    Returns a compiled LangGraph runnable for one provisioning run.
    """

    nodes = {
        "instantiate": _bind(instantiate_node, directory=directory, settings=settings),
        "converge": _bind(converge_node, directory=directory, settings=settings),
        "configure_reply_urls": _bind(configure_reply_urls_node, directory=directory),
        "enable_saml_sso": _bind(enable_saml_sso_node, directory=directory),
        "issue_signing_certificate": _bind(
            issue_signing_certificate_node, directory=directory, settings=settings
        ),
        "link_owner": _bind(link_owner_node, directory=directory),
        "persist_ownership": _bind(persist_ownership_node, ledger=ledger),
    }

    graph = StateGraph(ProvisioningState)
    for name in WORKFLOW_STEPS:
        graph.add_node(name, nodes[name])

    graph.set_entry_point(WORKFLOW_STEPS[0])
    for current, following in zip(WORKFLOW_STEPS, WORKFLOW_STEPS[1:]):
        graph.add_edge(current, following)
    graph.add_edge(WORKFLOW_STEPS[-1], END)

    return graph.compile()


def _bind(
    fn: Callable[..., Awaitable[dict[str, Any]]],
    **deps: Any,
) -> Callable[[ProvisioningState], Awaitable[dict[str, Any]]]:
    async def _wrapped(state: ProvisioningState) -> dict[str, Any]:
        return await fn(state, **deps)

    return _wrapped
