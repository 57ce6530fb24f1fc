"""
vault_bootstrap.components.initializer

One-time generation of the root credential and unseal key shares.

Responsibilities:
- Skip (AlreadyInState) when the service reports it is initialized.
- Treat a service-side rejection of init as "already done"; never retry it.
- Parse the init response into `UnsealMaterial` without exposing secrets.
"""

from __future__ import annotations

from vault_bootstrap.components.status import StatusProbe
from vault_bootstrap.errors import ConflictingStateError, MalformedResponseError
from vault_bootstrap.models import AlreadyInState, UnsealMaterial
from vault_bootstrap.observability.logging import get_logger
from vault_bootstrap.vault_client.http import VaultClient
from vault_bootstrap.vault_client.schemas import InitResponse, parse

log = get_logger(__name__)

STEP = "initialize"


class Initializer:
    def __init__(self, *, client: VaultClient, probe: StatusProbe) -> None:
        self._client = client
        self._probe = probe

    async def initialize(self, shares: int, threshold: int) -> UnsealMaterial | AlreadyInState:
        if threshold < 1 or threshold > shares:
            raise ValueError(f"threshold must satisfy 1 <= threshold <= shares (got {threshold}/{shares})")

        status = await self._probe.check_status()
        if status.initialized:
            log.info("vault_already_initialized")
            return AlreadyInState(step=STEP, detail="service already initialized")

        try:
            body = await self._client.initialize(shares=shares, threshold=threshold)
        except ConflictingStateError as e:
            # Another caller won the one-time init race; the service is the arbiter.
            log.warning("vault_init_rejected", errors=list(e.errors))
            return AlreadyInState(step=STEP, detail="initialization rejected by service")

        resp = parse(InitResponse, body, what="sys/init")
        if not resp.root_token.get_secret_value():
            raise MalformedResponseError("sys/init: empty root_token")
        if len(resp.keys_base64) < threshold:
            raise MalformedResponseError(
                f"sys/init: returned {len(resp.keys_base64)} keys, threshold is {threshold}"
            )

        log.info("vault_initialized", shares=shares, threshold=threshold, key_count=len(resp.keys_base64))
        return UnsealMaterial(
            root_token=resp.root_token,
            unseal_keys=tuple(resp.keys_base64),
            shares=shares,
            threshold=threshold,
        )
