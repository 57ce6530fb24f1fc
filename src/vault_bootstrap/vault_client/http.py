"""
vault_bootstrap.vault_client.http

HTTP client boundary used by the bootstrap components to call Vault.

Responsibilities:
- Attach the privileged credential (`X-Vault-Token`) to calls that need it.
- Map transport failures and status codes onto the bootstrap error taxonomy.
- Return decoded JSON objects; shape validation is left to `schemas`.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import SecretStr

from vault_bootstrap.errors import (
    ConflictingStateError,
    MalformedResponseError,
    TransientNetworkError,
    UnauthorizedError,
)


class VaultClient:
    """
    Thin async wrapper over an injected `httpx.AsyncClient`.
    The http client's base_url is the Vault address; paths here are relative to `/v1/`.
    """

    def __init__(self, *, http: httpx.AsyncClient) -> None:
        self._http = http

    @staticmethod
    def _authz(token: SecretStr | None) -> dict[str, str]:
        if token is None:
            return {}
        return {"X-Vault-Token": token.get_secret_value()}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        token: SecretStr | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        what = f"{method} /v1/{path}"
        try:
            r = await self._http.request(method, f"/v1/{path}", headers=self._authz(token), json=json)
        except httpx.TransportError as e:
            raise TransientNetworkError(f"{what}: {e.__class__.__name__}") from e

        if r.is_success or r.status_code == 404:
            return r
        errors = _errors(r)
        if r.status_code in (401, 403):
            raise UnauthorizedError(f"{what}: permission denied")
        if r.status_code == 400:
            raise ConflictingStateError(f"{what}: {'; '.join(errors) or 'bad request'}", errors=errors)
        if r.status_code >= 500:
            raise TransientNetworkError(f"{what}: HTTP {r.status_code} {'; '.join(errors)}".rstrip())
        raise MalformedResponseError(f"{what}: unexpected HTTP {r.status_code}")

    async def _get_json(self, method: str, path: str, **kw: Any) -> dict[str, Any] | None:
        r = await self._request(method, path, **kw)
        if r.status_code == 404:
            return None
        if r.status_code == 204 or not r.content:
            return {}
        try:
            body = r.json()
        except ValueError:
            raise MalformedResponseError(f"{method} /v1/{path}: response is not JSON") from None
        if not isinstance(body, dict):
            raise MalformedResponseError(f"{method} /v1/{path}: response is not a JSON object")
        return body

    async def _require_json(self, method: str, path: str, **kw: Any) -> dict[str, Any]:
        body = await self._get_json(method, path, **kw)
        if body is None:
            raise MalformedResponseError(f"{method} /v1/{path}: endpoint not found")
        return body

    # --- unauthenticated system endpoints ---------------------------------

    async def init_status(self) -> dict[str, Any]:
        return await self._require_json("GET", "sys/init")

    async def seal_status(self) -> dict[str, Any]:
        return await self._require_json("GET", "sys/seal-status")

    async def initialize(self, *, shares: int, threshold: int) -> dict[str, Any]:
        return await self._require_json(
            "PUT",
            "sys/init",
            json={"secret_shares": shares, "secret_threshold": threshold},
        )

    async def unseal(self, *, key: SecretStr) -> dict[str, Any]:
        return await self._require_json("PUT", "sys/unseal", json={"key": key.get_secret_value()})

    # --- privileged endpoints ---------------------------------------------

    async def read_mount(self, *, path: str, token: SecretStr) -> dict[str, Any] | None:
        try:
            return await self._get_json("GET", f"sys/mounts/{path.strip('/')}", token=token)
        except ConflictingStateError:
            # Vault answers 400 "No secret engine mount at <path>" for an absent mount.
            return None

    async def enable_mount(self, *, path: str, engine_type: str, token: SecretStr) -> None:
        await self._require_json(
            "POST",
            f"sys/mounts/{path.strip('/')}",
            token=token,
            json={"type": engine_type},
        )

    async def write_policy(self, *, name: str, policy: str, token: SecretStr) -> None:
        await self._require_json("PUT", f"sys/policies/acl/{name}", token=token, json={"policy": policy})

    async def read_policy(self, *, name: str, token: SecretStr) -> dict[str, Any] | None:
        return await self._get_json("GET", f"sys/policies/acl/{name}", token=token)

    async def create_token(
        self,
        *,
        policies: list[str],
        token: SecretStr,
        ttl: str | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"policies": policies}
        if ttl:
            payload["ttl"] = ttl
        return await self._require_json("POST", "auth/token/create", token=token, json=payload)


def _errors(r: httpx.Response) -> tuple[str, ...]:
    # Vault error bodies look like {"errors": ["..."]}; anything else yields no detail.
    try:
        body = r.json()
    except ValueError:
        return ()
    if isinstance(body, dict) and isinstance(body.get("errors"), list):
        return tuple(str(e) for e in body["errors"])
    return ()


# --- Module Notes -----------------------------------------------------------
# Error messages carry method + path + Vault's error strings only. Request bodies
# (which may hold unseal keys) are never echoed.
