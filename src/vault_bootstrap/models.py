"""
vault_bootstrap.models

Domain types exchanged between components and the orchestrator.

Responsibilities:
- Hold secret material in `SecretStr` so default str/repr never reveals it.
- Render ACL policies deterministically (convergent writes).
- Describe the non-secret run plan.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from pydantic import SecretStr

CAPABILITY_ORDER: tuple[str, ...] = ("create", "read", "update", "delete", "list")


class Phase(IntEnum):
    UNCONFIGURED = 0
    INITIALIZED_SEALED = 1
    UNSEALED = 2
    ENGINE_ENABLED = 3
    POLICIES_APPLIED = 4
    TOKENS_ISSUED = 5


@dataclass(frozen=True, slots=True)
class ServiceStatus:
    """
    Snapshot of one probe call. Never cache it: the service can change underneath.
    """

    initialized: bool
    sealed: bool
    threshold: int | None = None
    shares: int | None = None
    progress: int | None = None


@dataclass(frozen=True, slots=True)
class AlreadyInState:
    """
    Result (not an error) returned when a step's target state is already achieved.
    """

    step: str
    detail: str


@dataclass(frozen=True, slots=True)
class UnsealMaterial:
    """
    Root credential and unseal key shares; produced exactly once per storage lifetime.
    """

    root_token: SecretStr = field(repr=False)
    unseal_keys: tuple[SecretStr, ...] = field(repr=False)
    shares: int
    threshold: int

    def __post_init__(self) -> None:
        if len(self.unseal_keys) < self.threshold:
            raise ValueError(
                f"unseal material has {len(self.unseal_keys)} keys, threshold is {self.threshold}"
            )


@dataclass(frozen=True, slots=True)
class PolicyRule:
    path: str
    capabilities: frozenset[str]

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("policy rule path must not be empty")
        unknown = set(self.capabilities) - set(CAPABILITY_ORDER)
        if unknown:
            raise ValueError(f"unknown capabilities: {sorted(unknown)}")
        if not self.capabilities:
            raise ValueError(f"policy rule for {self.path!r} grants no capabilities")

    def render(self) -> str:
        caps = ", ".join(f'"{c}"' for c in CAPABILITY_ORDER if c in self.capabilities)
        return f'path "{self.path}" {{\n  capabilities = [{caps}]\n}}\n'


@dataclass(frozen=True, slots=True)
class Policy:
    name: str
    rules: tuple[PolicyRule, ...]

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("policy name must not be empty")
        if not self.rules:
            raise ValueError(f"policy {self.name!r} has no rules")

    def render(self) -> str:
        # Declared rule order + canonical capability order => byte-identical output.
        return "".join(rule.render() for rule in self.rules)


@dataclass(frozen=True, slots=True)
class Token:
    client_token: SecretStr = field(repr=False)
    policies: frozenset[str]
    # Accessor is a non-secret handle; it is the only token attribute we log.
    accessor: str | None = None


@dataclass(frozen=True, slots=True)
class BootstrapPlan:
    """
    Non-secret parameters for one bootstrap run.
    """

    key_shares: int = 1
    key_threshold: int = 1
    mount_path: str = "secret"
    engine_type: str = "kv-v2"
    policies: tuple[Policy, ...] = ()
    token_requests: tuple[frozenset[str], ...] = ()
    token_ttl: str | None = None

    ready_timeout_s: float = 120.0
    ready_initial_backoff_s: float = 0.5
    ready_max_backoff_s: float = 5.0

    def __post_init__(self) -> None:
        if not 1 <= self.key_threshold <= self.key_shares:
            raise ValueError(
                f"key threshold must be between 1 and key shares ({self.key_shares}), got {self.key_threshold}"
            )


@dataclass(frozen=True, slots=True)
class BootstrapResult:
    """
    Outcome handed to the caller. `material` is None when the service was already initialized.
    """

    phase: Phase
    tokens: tuple[Token, ...]
    material: UnsealMaterial | None = field(default=None, repr=False)
    steps: tuple[dict, ...] = ()


# --- Module Notes -----------------------------------------------------------
# These types are plain frozen dataclasses; pydantic is only used for SecretStr here
# and for response validation at the HTTP boundary (`vault_client.schemas`).
