"""
vault_bootstrap.components.status

Service health / seal state probe and the readiness wait loop.

Responsibilities:
- Read `initialized` and `sealed` into a fresh `ServiceStatus` on every call.
- Retry transient failures with bounded exponential backoff up to a deadline.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

from vault_bootstrap.errors import TransientNetworkError, UnreachableError
from vault_bootstrap.models import ServiceStatus
from vault_bootstrap.observability.logging import get_logger
from vault_bootstrap.vault_client.http import VaultClient
from vault_bootstrap.vault_client.schemas import (
    InitStatusResponse,
    SealStatusResponse,
    parse,
)

log = get_logger(__name__)


class StatusProbe:
    def __init__(self, *, client: VaultClient) -> None:
        self._client = client

    async def check_status(self) -> ServiceStatus:
        init = parse(InitStatusResponse, await self._client.init_status(), what="sys/init")
        seal = parse(SealStatusResponse, await self._client.seal_status(), what="sys/seal-status")
        return ServiceStatus(
            initialized=init.initialized,
            sealed=seal.sealed,
            threshold=seal.t,
            shares=seal.n,
            progress=seal.progress,
        )


async def wait_for_service(
    probe: StatusProbe,
    *,
    timeout_s: float,
    initial_backoff_s: float = 0.5,
    max_backoff_s: float = 5.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> ServiceStatus:
    """
    Poll until the service answers a status query.

    Only `TransientNetworkError` is retried; a malformed answer means the service is up
    but speaking a different protocol, which waiting will not fix.
    """

    deadline = clock() + timeout_s
    backoff = initial_backoff_s
    attempt = 0
    while True:
        attempt += 1
        try:
            status = await probe.check_status()
        except TransientNetworkError as e:
            remaining = deadline - clock()
            if remaining <= 0:
                raise UnreachableError(
                    f"service not reachable after {attempt} attempts in {timeout_s:.1f}s: {e.message}"
                ) from e
            delay = min(backoff, remaining)
            log.info("service_not_ready", attempt=attempt, retry_in_s=round(delay, 3), error=e.message)
            await sleep(delay)
            backoff = min(backoff * 2, max_backoff_s)
            continue

        log.info(
            "service_ready",
            attempt=attempt,
            initialized=status.initialized,
            sealed=status.sealed,
        )
        return status
