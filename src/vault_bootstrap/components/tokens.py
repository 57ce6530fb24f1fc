"""
vault_bootstrap.components.tokens

Mints scoped tokens bound to named policies.

Responsibilities:
- Create one new token per call (no idempotency; the caller decides cardinality).
- Log only the non-secret accessor.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import SecretStr

from vault_bootstrap.errors import MalformedResponseError
from vault_bootstrap.models import Token
from vault_bootstrap.observability.logging import get_logger
from vault_bootstrap.vault_client.http import VaultClient
from vault_bootstrap.vault_client.schemas import TokenCreateResponse, parse

log = get_logger(__name__)


class TokenIssuer:
    def __init__(self, *, client: VaultClient) -> None:
        self._client = client

    async def issue_token(
        self,
        policies: Iterable[str],
        *,
        token: SecretStr,
        ttl: str | None = None,
    ) -> Token:
        requested = sorted(set(policies))
        if not requested:
            raise ValueError("a scoped token needs at least one policy")

        body = await self._client.create_token(policies=requested, token=token, ttl=ttl)
        auth = parse(TokenCreateResponse, body, what="auth/token/create").auth
        if not auth.client_token.get_secret_value():
            raise MalformedResponseError("auth/token/create: empty client_token")

        # Vault echoes the effective policy list (plus "default"); fall back to the request.
        granted = frozenset(auth.policies) or frozenset(requested)
        log.info("token_issued", policies=requested, accessor=auth.accessor)
        return Token(client_token=auth.client_token, policies=granted, accessor=auth.accessor)
