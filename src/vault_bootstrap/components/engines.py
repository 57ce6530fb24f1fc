"""
vault_bootstrap.components.engines

Ensures a secrets engine is mounted at a path with the expected type.

Responsibilities:
- Create the mount when absent.
- Accept an existing mount of the same (normalized) type.
- Refuse to touch a mount of a different type.
"""

from __future__ import annotations

from pydantic import SecretStr

from vault_bootstrap.errors import ConflictingStateError
from vault_bootstrap.observability.logging import get_logger
from vault_bootstrap.vault_client.http import VaultClient
from vault_bootstrap.vault_client.schemas import MountResponse, parse, unwrap_data

log = get_logger(__name__)


def normalize_engine_type(engine_type: str, options: dict[str, str] | None = None) -> tuple[str, str | None]:
    """
    Vault mounts `kv-v2` as type `kv` with `options.version == "2"`; compare on (type, version).
    """

    engine_type = engine_type.strip().lower()
    if engine_type == "kv-v2":
        return ("kv", "2")
    if engine_type == "kv-v1":
        return ("kv", "1")
    if engine_type == "kv":
        version = (options or {}).get("version") or "1"
        return ("kv", version)
    return (engine_type, None)


class SecretsEngineConfigurator:
    def __init__(self, *, client: VaultClient) -> None:
        self._client = client

    async def ensure_engine(self, path: str, engine_type: str, *, token: SecretStr) -> bool:
        """
        Returns True when the mount was created, False when it already matched.
        """

        body = await self._client.read_mount(path=path, token=token)
        if body is None:
            await self._client.enable_mount(path=path, engine_type=engine_type, token=token)
            log.info("engine_enabled", path=path, engine_type=engine_type)
            return True

        mount = parse(MountResponse, unwrap_data(body), what=f"sys/mounts/{path}")
        desired = normalize_engine_type(engine_type)
        actual = normalize_engine_type(mount.type, mount.options)
        if actual != desired:
            raise ConflictingStateError(
                f"mount {path!r} exists with type {_describe(actual)}, wanted {_describe(desired)}"
            )

        log.info("engine_already_enabled", path=path, engine_type=engine_type)
        return False


def _describe(normalized: tuple[str, str | None]) -> str:
    kind, version = normalized
    return f"{kind} (version {version})" if version else kind
