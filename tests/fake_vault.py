"""
tests.fake_vault

In-process stand-in for the Vault HTTP API, served through `httpx.ASGITransport`.

Responsibilities:
- Emulate init/seal/unseal, mounts, ACL policies and token creation.
- Count calls per endpoint so tests can assert which write paths were touched.
"""

from __future__ import annotations

import base64
import secrets
from collections import Counter
from typing import Any

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response


def _err(status: int, *errors: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"errors": list(errors)})


class FakeVault:
    def __init__(self) -> None:
        self.initialized = False
        self.sealed = True
        self.shares = 0
        self.threshold = 0
        self.keys: list[str] = []
        self.root_token: str | None = None
        self.progress: set[str] = set()
        self.mounts: dict[str, dict[str, Any]] = {}
        self.policies: dict[str, str] = {}
        self.tokens: dict[str, list[str]] = {}
        self.calls: Counter[str] = Counter()
        self.app = self._build_app()

    # --- test helpers -------------------------------------------------------

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=self.app), base_url="http://vault.test"
        )

    def seal(self) -> None:
        self.sealed = True
        self.progress.clear()

    def preinitialize(self, *, shares: int = 1, threshold: int = 1) -> tuple[str, list[str]]:
        self._do_init(shares, threshold)
        assert self.root_token is not None
        return self.root_token, list(self.keys)

    def _do_init(self, shares: int, threshold: int) -> None:
        self.initialized = True
        self.sealed = True
        self.shares = shares
        self.threshold = threshold
        self.keys = [base64.b64encode(secrets.token_bytes(32)).decode() for _ in range(shares)]
        self.root_token = "hvs." + secrets.token_urlsafe(18)
        # Vault's built-in policies.
        self.policies.setdefault("default", 'path "auth/token/lookup-self" {\n  capabilities = ["read"]\n}\n')
        self.policies.setdefault("root", "")

    def _authorized(self, request: Request) -> bool:
        token = request.headers.get("x-vault-token")
        return token is not None and token == self.root_token

    # --- ASGI app -----------------------------------------------------------

    def _build_app(self) -> FastAPI:
        app = FastAPI()

        @app.get("/v1/sys/init")
        async def init_status() -> dict[str, Any]:
            self.calls["init_status"] += 1
            return {"initialized": self.initialized}

        @app.put("/v1/sys/init")
        async def init(request: Request) -> Any:
            self.calls["init"] += 1
            if self.initialized:
                return _err(400, "Vault is already initialized")
            body = await request.json()
            self._do_init(int(body["secret_shares"]), int(body["secret_threshold"]))
            return {
                "keys": [base64.b64decode(k).hex() for k in self.keys],
                "keys_base64": list(self.keys),
                "root_token": self.root_token,
            }

        @app.get("/v1/sys/seal-status")
        async def seal_status() -> dict[str, Any]:
            self.calls["seal_status"] += 1
            return {
                "type": "shamir",
                "initialized": self.initialized,
                "sealed": self.sealed,
                "t": self.threshold,
                "n": self.shares,
                "progress": len(self.progress),
            }

        @app.put("/v1/sys/unseal")
        async def unseal(request: Request) -> Any:
            self.calls["unseal"] += 1
            if not self.initialized:
                return _err(400, "Vault is not initialized")
            body = await request.json()
            key = body.get("key")
            if self.sealed:
                if key not in self.keys:
                    self.progress.clear()
                    return _err(400, "Unseal failed, invalid key")
                self.progress.add(key)
                if len(self.progress) >= self.threshold:
                    self.sealed = False
                    self.progress.clear()
            return {
                "sealed": self.sealed,
                "t": self.threshold,
                "n": self.shares,
                "progress": len(self.progress),
            }

        @app.get("/v1/sys/mounts/{path:path}")
        async def read_mount(path: str, request: Request) -> Any:
            self.calls["read_mount"] += 1
            if self.sealed:
                return _err(503, "Vault is sealed")
            if not self._authorized(request):
                return _err(403, "permission denied")
            mount = self.mounts.get(path.strip("/"))
            if mount is None:
                return _err(400, f"No secret engine mount at {path}/")
            return {**mount, "data": dict(mount)}

        @app.post("/v1/sys/mounts/{path:path}")
        async def enable_mount(path: str, request: Request) -> Any:
            self.calls["enable_mount"] += 1
            if self.sealed:
                return _err(503, "Vault is sealed")
            if not self._authorized(request):
                return _err(403, "permission denied")
            path = path.strip("/")
            if path in self.mounts:
                return _err(400, f"path is already in use at {path}/")
            engine_type = (await request.json())["type"]
            if engine_type == "kv-v2":
                self.mounts[path] = {"type": "kv", "options": {"version": "2"}}
            else:
                self.mounts[path] = {"type": engine_type, "options": None}
            return Response(status_code=204)

        @app.put("/v1/sys/policies/acl/{name}")
        async def write_policy(name: str, request: Request) -> Any:
            self.calls["write_policy"] += 1
            if self.sealed:
                return _err(503, "Vault is sealed")
            if not self._authorized(request):
                return _err(403, "permission denied")
            self.policies[name] = (await request.json())["policy"]
            return Response(status_code=204)

        @app.get("/v1/sys/policies/acl/{name}")
        async def read_policy(name: str, request: Request) -> Any:
            self.calls["read_policy"] += 1
            if not self._authorized(request):
                return _err(403, "permission denied")
            if name not in self.policies:
                return _err(404)
            doc = {"name": name, "policy": self.policies[name]}
            return {**doc, "data": doc}

        @app.post("/v1/auth/token/create")
        async def create_token(request: Request) -> Any:
            self.calls["create_token"] += 1
            if self.sealed:
                return _err(503, "Vault is sealed")
            if not self._authorized(request):
                return _err(403, "permission denied")
            policies = list((await request.json()).get("policies", []))
            missing = [p for p in policies if p not in self.policies]
            if missing:
                return _err(400, f"policy {missing[0]!r} does not exist")
            client_token = "hvs." + secrets.token_urlsafe(18)
            effective = sorted({"default", *policies})
            self.tokens[client_token] = effective
            return {
                "auth": {
                    "client_token": client_token,
                    "accessor": secrets.token_hex(12),
                    "policies": effective,
                    "token_policies": effective,
                    "renewable": True,
                }
            }

        return app


def mock_client(handler) -> httpx.AsyncClient:
    # For failure modes the fake app cannot produce (refused connections, garbage bodies).
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://vault.test")


class FakeClock:
    """
    Deterministic clock + sleep pair for readiness polling tests.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay


# --- Module Notes -----------------------------------------------------------
# Status codes follow Vault: 400 for bad input/state, 403 for permission denied,
# 503 while sealed, 204 for writes with no body.
