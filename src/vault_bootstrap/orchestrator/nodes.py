from __future__ import annotations

from typing import Any

from pydantic import SecretStr

from vault_bootstrap.components.engines import SecretsEngineConfigurator
from vault_bootstrap.components.initializer import Initializer
from vault_bootstrap.components.policies import PolicyManager
from vault_bootstrap.components.status import StatusProbe, wait_for_service
from vault_bootstrap.components.tokens import TokenIssuer
from vault_bootstrap.components.unsealer import Unsealer
from vault_bootstrap.errors import ConflictingStateError, UnauthorizedError
from vault_bootstrap.models import AlreadyInState, BootstrapPlan, Phase, ServiceStatus
from vault_bootstrap.orchestrator.state import BootstrapState


def _entry(step: str, outcome: str, **details: Any) -> dict[str, Any]:
    return {"step": step, "outcome": outcome, "details": details}


def _advance(state: BootstrapState, target: Phase) -> Phase:
    # Each phase is only reachable from its predecessor (or is already behind us).
    current = state.get("phase", Phase.UNCONFIGURED)
    if current < target - 1:
        raise ConflictingStateError(f"cannot enter {target.name} from {current.name}")
    return max(current, target)


def _root_token(state: BootstrapState) -> SecretStr:
    token = state.get("root_token")
    if token is None or not token.get_secret_value():
        raise UnauthorizedError(
            "no privileged credential: service was initialized earlier and no root token was supplied"
        )
    return token


def phase_from_status(status: ServiceStatus) -> Phase:
    if not status.initialized:
        return Phase.UNCONFIGURED
    if status.sealed:
        return Phase.INITIALIZED_SEALED
    return Phase.UNSEALED


async def wait_ready_node(
    state: BootstrapState, *, probe: StatusProbe, plan: BootstrapPlan
) -> BootstrapState:
    status = await wait_for_service(
        probe,
        timeout_s=plan.ready_timeout_s,
        initial_backoff_s=plan.ready_initial_backoff_s,
        max_backoff_s=plan.ready_max_backoff_s,
    )
    return {
        "status": status,
        "phase": phase_from_status(status),
        "steps": [
            _entry("wait_ready", "observed", initialized=status.initialized, sealed=status.sealed)
        ],
    }


async def initialize_node(
    state: BootstrapState, *, initializer: Initializer, plan: BootstrapPlan
) -> BootstrapState:
    result = await initializer.initialize(plan.key_shares, plan.key_threshold)
    phase = _advance(state, Phase.INITIALIZED_SEALED)

    if isinstance(result, AlreadyInState):
        # Keep whatever credentials the caller supplied; init output is gone for good.
        return {"phase": phase, "steps": [_entry("initialize", "skipped", reason=result.detail)]}

    return {
        "phase": phase,
        "material": result,
        "root_token": result.root_token,
        "unseal_keys": list(result.unseal_keys),
        "steps": [
            _entry("initialize", "applied", shares=result.shares, threshold=result.threshold)
        ],
    }


async def unseal_node(state: BootstrapState, *, unsealer: Unsealer) -> BootstrapState:
    phase = _advance(state, Phase.UNSEALED)
    keys = list(state.get("unseal_keys") or [])
    result = await unsealer.unseal_with(keys)
    if isinstance(result, AlreadyInState):
        return {"phase": phase, "steps": [_entry("unseal", "skipped", reason=result.detail)]}
    return {"phase": phase, "steps": [_entry("unseal", "applied")]}


async def enable_engine_node(
    state: BootstrapState, *, engines: SecretsEngineConfigurator, plan: BootstrapPlan
) -> BootstrapState:
    phase = _advance(state, Phase.ENGINE_ENABLED)
    applied = await engines.ensure_engine(plan.mount_path, plan.engine_type, token=_root_token(state))
    return {
        "phase": phase,
        "engine_applied": applied,
        "steps": [
            _entry(
                "enable_engine",
                "applied" if applied else "skipped",
                path=plan.mount_path,
                engine_type=plan.engine_type,
            )
        ],
    }


async def apply_policies_node(
    state: BootstrapState, *, policies: PolicyManager, plan: BootstrapPlan
) -> BootstrapState:
    phase = _advance(state, Phase.POLICIES_APPLIED)
    token = _root_token(state)
    names: list[str] = []
    for policy in plan.policies:
        await policies.apply_policy(policy.name, policy.rules, token=token)
        names.append(policy.name)
    return {
        "phase": phase,
        "applied_policies": names,
        "steps": [_entry("apply_policies", "applied", policies=names)],
    }


async def issue_tokens_node(
    state: BootstrapState, *, tokens: TokenIssuer, plan: BootstrapPlan
) -> BootstrapState:
    phase = _advance(state, Phase.TOKENS_ISSUED)
    token = _root_token(state)
    issued = []
    for requested in plan.token_requests:
        issued.append(await tokens.issue_token(requested, token=token, ttl=plan.token_ttl))
    return {
        "phase": phase,
        "tokens": issued,
        "steps": [
            _entry(
                "issue_tokens",
                "applied",
                accessors=[t.accessor for t in issued],
                count=len(issued),
            )
        ],
    }


async def finish_node(state: BootstrapState) -> BootstrapState:
    return {"steps": [_entry("finish", "done", phase=state.get("phase", Phase.UNCONFIGURED).name)]}
