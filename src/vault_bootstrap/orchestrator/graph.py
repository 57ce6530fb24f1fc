from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from langgraph.graph import END, StateGraph

from vault_bootstrap.components.engines import SecretsEngineConfigurator
from vault_bootstrap.components.initializer import Initializer
from vault_bootstrap.components.policies import PolicyManager
from vault_bootstrap.components.status import StatusProbe
from vault_bootstrap.components.tokens import TokenIssuer
from vault_bootstrap.components.unsealer import Unsealer
from vault_bootstrap.errors import BootstrapError, StepFailedError
from vault_bootstrap.models import BootstrapPlan
from vault_bootstrap.orchestrator.nodes import (
    apply_policies_node,
    enable_engine_node,
    finish_node,
    initialize_node,
    issue_tokens_node,
    unseal_node,
    wait_ready_node,
)
from vault_bootstrap.orchestrator.state import BootstrapState
from vault_bootstrap.vault_client.http import VaultClient

STEP_ORDER: tuple[str, ...] = (
    "wait_ready",
    "initialize",
    "unseal",
    "enable_engine",
    "apply_policies",
    "issue_tokens",
    "finish",
)


@dataclass(frozen=True, slots=True)
class BootstrapComponents:
    probe: StatusProbe
    initializer: Initializer
    unsealer: Unsealer
    engines: SecretsEngineConfigurator
    policies: PolicyManager
    tokens: TokenIssuer

    @classmethod
    def from_client(cls, client: VaultClient) -> BootstrapComponents:
        probe = StatusProbe(client=client)
        return cls(
            probe=probe,
            initializer=Initializer(client=client, probe=probe),
            unsealer=Unsealer(client=client, probe=probe),
            engines=SecretsEngineConfigurator(client=client),
            policies=PolicyManager(client=client),
            tokens=TokenIssuer(client=client),
        )


def build_graph(*, components: BootstrapComponents, plan: BootstrapPlan):
    """
    Returns a compiled LangGraph runnable. The sequence is strictly linear;
    the first raised error aborts the run.
    """

    c = components
    graph = StateGraph(BootstrapState)

    graph.add_node("wait_ready", _bind("wait_ready", wait_ready_node, probe=c.probe, plan=plan))
    graph.add_node(
        "initialize", _bind("initialize", initialize_node, initializer=c.initializer, plan=plan)
    )
    graph.add_node("unseal", _bind("unseal", unseal_node, unsealer=c.unsealer))
    graph.add_node(
        "enable_engine", _bind("enable_engine", enable_engine_node, engines=c.engines, plan=plan)
    )
    graph.add_node(
        "apply_policies",
        _bind("apply_policies", apply_policies_node, policies=c.policies, plan=plan),
    )
    graph.add_node(
        "issue_tokens", _bind("issue_tokens", issue_tokens_node, tokens=c.tokens, plan=plan)
    )
    graph.add_node("finish", _bind("finish", finish_node))

    graph.set_entry_point(STEP_ORDER[0])
    for src, dst in zip(STEP_ORDER, STEP_ORDER[1:]):
        graph.add_edge(src, dst)
    graph.add_edge(STEP_ORDER[-1], END)

    return graph.compile()


def _bind(
    step: str,
    fn: Callable[..., Awaitable[BootstrapState]],
    **deps: Any,
) -> Callable[[BootstrapState], Awaitable[BootstrapState]]:
    async def _wrapped(state: BootstrapState) -> BootstrapState:
        try:
            return await fn(state, **deps)
        except BootstrapError as e:
            # Attribute the failure to the transition that raised it.
            if e.step is None:
                e.step = step
            if e.material is None:
                e.material = state.get("material")
            raise
        except Exception as e:
            err = StepFailedError(f"{e.__class__.__name__}: {e}", step=step)
            err.material = state.get("material")
            raise err from e

    return _wrapped
