"""
vault_bootstrap.components.policies

Upserts named ACL policies.

Responsibilities:
- Always write (overwrite semantics); identical rules converge to an identical document.
- Read a stored policy back for verification.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import SecretStr

from vault_bootstrap.models import Policy, PolicyRule
from vault_bootstrap.observability.logging import get_logger
from vault_bootstrap.vault_client.http import VaultClient
from vault_bootstrap.vault_client.schemas import PolicyResponse, parse, unwrap_data

log = get_logger(__name__)


class PolicyManager:
    def __init__(self, *, client: VaultClient) -> None:
        self._client = client

    async def apply_policy(self, name: str, rules: Iterable[PolicyRule], *, token: SecretStr) -> None:
        document = Policy(name=name, rules=tuple(rules)).render()
        await self._client.write_policy(name=name, policy=document, token=token)
        log.info("policy_written", policy=name, bytes=len(document))

    async def read_policy(self, name: str, *, token: SecretStr) -> str | None:
        body = await self._client.read_policy(name=name, token=token)
        if body is None:
            return None
        return parse(PolicyResponse, unwrap_data(body), what=f"sys/policies/acl/{name}").policy
