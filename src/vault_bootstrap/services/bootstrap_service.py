"""
vault_bootstrap.services.bootstrap_service

Bootstrap run lifecycle service.

Responsibilities:
- Wire the Vault client, components and graph for one run.
- Seed the graph state with externally supplied credentials.
- Log the outcome (never secrets) and hand results back to the caller.
"""

from __future__ import annotations

import uuid

import httpx
import structlog

from vault_bootstrap.defaults import plan_from_settings
from vault_bootstrap.errors import BootstrapError
from vault_bootstrap.models import BootstrapPlan, BootstrapResult, Phase
from vault_bootstrap.observability.logging import configure_logging, get_logger
from vault_bootstrap.orchestrator.graph import BootstrapComponents, build_graph
from vault_bootstrap.orchestrator.state import BootstrapState
from vault_bootstrap.settings import Settings, get_settings
from vault_bootstrap.vault_client.http import VaultClient

log = get_logger(__name__)


class BootstrapService:
    def __init__(
        self,
        *,
        settings: Settings,
        http: httpx.AsyncClient,
        plan: BootstrapPlan | None = None,
    ) -> None:
        self._settings = settings
        self._http = http
        self._plan = plan or plan_from_settings(settings)

    async def run(self) -> BootstrapResult:
        run_id = str(uuid.uuid4())
        structlog.contextvars.bind_contextvars(run_id=run_id)
        try:
            return await self._run()
        finally:
            structlog.contextvars.unbind_contextvars("run_id")

    async def _run(self) -> BootstrapResult:
        components = BootstrapComponents.from_client(VaultClient(http=self._http))
        graph = build_graph(components=components, plan=self._plan)

        initial: BootstrapState = {
            "phase": Phase.UNCONFIGURED,
            "root_token": self._settings.root_token,
            "unseal_keys": list(self._settings.unseal_keys),
            "material": None,
            "tokens": [],
            "steps": [],
        }

        log.info("bootstrap_started", mount_path=self._plan.mount_path, policies=len(self._plan.policies))
        try:
            final: BootstrapState = await graph.ainvoke(initial)
        except BootstrapError as e:
            # Material from this run rides on the error; the caller must collect it.
            log.error(
                "bootstrap_failed",
                step=e.step,
                error_type=e.__class__.__name__,
                error=e.message,
                initialized_now=e.material is not None,
            )
            raise
        except Exception as e:
            log.error("bootstrap_failed", step=None, error_type=e.__class__.__name__)
            raise

        result = BootstrapResult(
            phase=final.get("phase", Phase.UNCONFIGURED),
            tokens=tuple(final.get("tokens", [])),
            material=final.get("material"),
            steps=tuple(final.get("steps", [])),
        )
        log.info(
            "bootstrap_completed",
            phase=result.phase.name,
            tokens_issued=len(result.tokens),
            initialized_now=result.material is not None,
        )
        return result


async def run_bootstrap(
    settings: Settings | None = None,
    plan: BootstrapPlan | None = None,
) -> BootstrapResult:
    """
    Composition root: configure logging, open the HTTP client, run once, close.
    """

    settings = settings or get_settings()
    configure_logging(service_name=settings.service_name, level=settings.log_level)
    async with httpx.AsyncClient(
        base_url=settings.vault_addr,
        timeout=settings.request_timeout_s,
    ) as http:
        return await BootstrapService(settings=settings, http=http, plan=plan).run()


# --- Module Notes -----------------------------------------------------------
# The returned result (or the raised error's `material`) is the only copy of fresh
# unseal material; the caller decides where (if anywhere) it goes. Nothing here writes it out.
