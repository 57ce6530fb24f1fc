"""
vault_bootstrap.defaults

Default policies and token requests for a fresh KV-backed Vault.

Responsibilities:
- Provide the stock `read-only` / `read-write` policies over the KV mount.
- Build a `BootstrapPlan` from settings.
"""

from __future__ import annotations

from vault_bootstrap.models import BootstrapPlan, Policy, PolicyRule
from vault_bootstrap.settings import Settings

READ_ONLY = "read-only"
READ_WRITE = "read-write"


def default_policies(mount_path: str = "secret") -> tuple[Policy, ...]:
    mount = mount_path.strip("/")
    return (
        Policy(
            name=READ_ONLY,
            rules=(
                PolicyRule(f"{mount}/data/*", frozenset({"read", "list"})),
                PolicyRule(f"{mount}/metadata/*", frozenset({"list"})),
            ),
        ),
        Policy(
            name=READ_WRITE,
            rules=(
                PolicyRule(
                    f"{mount}/data/*",
                    frozenset({"create", "read", "update", "delete", "list"}),
                ),
                PolicyRule(
                    f"{mount}/metadata/*",
                    frozenset({"list", "create", "update", "delete"}),
                ),
            ),
        ),
    )


def plan_from_settings(settings: Settings) -> BootstrapPlan:
    return BootstrapPlan(
        key_shares=settings.key_shares,
        key_threshold=settings.key_threshold,
        mount_path=settings.kv_mount_path,
        engine_type=settings.kv_engine_type,
        policies=default_policies(settings.kv_mount_path),
        # One token per policy, in the same order the policies are written.
        token_requests=(frozenset({READ_ONLY}), frozenset({READ_WRITE})),
        token_ttl=settings.token_ttl,
        ready_timeout_s=settings.ready_timeout_s,
        ready_initial_backoff_s=settings.ready_initial_backoff_s,
        ready_max_backoff_s=settings.ready_max_backoff_s,
    )
