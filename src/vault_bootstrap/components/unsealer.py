"""
vault_bootstrap.components.unsealer

Submits unseal key shares until the service reports unsealed.

Responsibilities:
- No-op (without touching the unseal write path) when already unsealed.
- Distinguish a rejected key (Unauthorized) from transport failures.
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import SecretStr

from vault_bootstrap.components.status import StatusProbe
from vault_bootstrap.errors import ConflictingStateError, UnauthorizedError
from vault_bootstrap.models import AlreadyInState
from vault_bootstrap.observability.logging import get_logger
from vault_bootstrap.vault_client.http import VaultClient
from vault_bootstrap.vault_client.schemas import UnsealResponse, parse

log = get_logger(__name__)

STEP = "unseal"


class Unsealer:
    def __init__(self, *, client: VaultClient, probe: StatusProbe) -> None:
        self._client = client
        self._probe = probe

    async def unseal(self, key: SecretStr) -> bool:
        """
        Returns the `sealed` flag after submitting one share.
        """

        status = await self._probe.check_status()
        if not status.sealed:
            return False
        return await self._submit(key)

    async def unseal_with(self, keys: Sequence[SecretStr]) -> AlreadyInState | bool:
        """
        Checks the seal once, then submits shares in order until the service
        crosses its threshold. Returns `AlreadyInState` when nothing had to be done.
        """

        status = await self._probe.check_status()
        if not status.sealed:
            log.info("vault_already_unsealed")
            return AlreadyInState(step=STEP, detail="already unsealed")
        if not keys:
            raise UnauthorizedError("service is sealed and no unseal key is available")

        sealed = True
        for key in keys:
            sealed = await self._submit(key)
            if not sealed:
                break
        if sealed:
            raise UnauthorizedError(f"service still sealed after {len(keys)} key share(s)")

        log.info("vault_unsealed")
        return sealed

    async def _submit(self, key: SecretStr) -> bool:
        try:
            body = await self._client.unseal(key=key)
        except ConflictingStateError as e:
            raise UnauthorizedError("unseal key rejected by service") from e

        resp = parse(UnsealResponse, body, what="sys/unseal")
        log.info("unseal_share_submitted", sealed=resp.sealed, progress=resp.progress)
        return resp.sealed
