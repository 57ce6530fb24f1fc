"""
vault_bootstrap.orchestrator.state

Typed state schema used by the LangGraph orchestration engine.

Responsibilities:
- Define the contract between nodes (inputs/outputs).
- Carry secret material explicitly from the step that produces it to the steps that use it.
"""

from __future__ import annotations

from typing import Annotated, Any, TypedDict

from pydantic import SecretStr

from vault_bootstrap.models import Phase, ServiceStatus, Token, UnsealMaterial


def _append_steps(
    left: list[dict[str, Any]] | None, right: list[dict[str, Any]] | None
) -> list[dict[str, Any]]:
    # Nodes return `{"steps": [entry]}`; entries accumulate in execution order.
    return [*(left or []), *(right or [])]


class BootstrapState(TypedDict, total=False):
    # Progress
    phase: Phase
    status: ServiceStatus

    # Credentials: seeded from settings, replaced by fresh init output.
    root_token: SecretStr | None
    unseal_keys: list[SecretStr]
    material: UnsealMaterial | None

    # Step results
    engine_applied: bool
    applied_policies: list[str]
    tokens: list[Token]

    # Audit (non-secret)
    steps: Annotated[list[dict[str, Any]], _append_steps]


# --- Module Notes -----------------------------------------------------------
# State lives only in memory for one graph invocation; no checkpointer is attached,
# so secrets are never serialized.
