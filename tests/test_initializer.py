"""
tests.test_initializer

One-time initialization: fresh, already-done, lost race, bad input.
"""

from __future__ import annotations

import httpx
import pytest
from fake_vault import FakeVault, mock_client
from pydantic import SecretStr

from vault_bootstrap.components.initializer import Initializer
from vault_bootstrap.components.status import StatusProbe
from vault_bootstrap.errors import MalformedResponseError
from vault_bootstrap.models import AlreadyInState, UnsealMaterial
from vault_bootstrap.vault_client.http import VaultClient


def _initializer(http: httpx.AsyncClient) -> Initializer:
    client = VaultClient(http=http)
    return Initializer(client=client, probe=StatusProbe(client=client))


@pytest.mark.asyncio
async def test_fresh_service_yields_root_token_and_single_key(fake: FakeVault) -> None:
    async with fake.client() as http:
        material = await _initializer(http).initialize(1, 1)

    assert isinstance(material, UnsealMaterial)
    assert material.root_token.get_secret_value() == fake.root_token
    assert [k.get_secret_value() for k in material.unseal_keys] == fake.keys
    assert (material.shares, material.threshold) == (1, 1)
    assert fake.initialized is True


@pytest.mark.asyncio
async def test_multiple_shares(fake: FakeVault) -> None:
    async with fake.client() as http:
        material = await _initializer(http).initialize(5, 3)

    assert isinstance(material, UnsealMaterial)
    assert len(material.unseal_keys) == 5
    assert material.threshold == 3


@pytest.mark.asyncio
async def test_already_initialized_is_not_reinitialized(fake: FakeVault) -> None:
    fake.preinitialize()

    async with fake.client() as http:
        result = await _initializer(http).initialize(1, 1)

    assert isinstance(result, AlreadyInState)
    assert result.step == "initialize"
    assert fake.calls["init"] == 0


@pytest.mark.asyncio
async def test_lost_init_race_is_already_in_state() -> None:
    init_calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v1/sys/init" and request.method == "GET":
            return httpx.Response(200, json={"initialized": False})
        if request.url.path == "/v1/sys/seal-status":
            return httpx.Response(200, json={"sealed": True})
        init_calls["n"] += 1
        return httpx.Response(400, json={"errors": ["Vault is already initialized"]})

    async with mock_client(handler) as http:
        result = await _initializer(http).initialize(1, 1)

    assert isinstance(result, AlreadyInState)
    assert init_calls["n"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(("shares", "threshold"), [(1, 0), (2, 3), (0, 0)])
async def test_threshold_bounds_are_checked_before_any_call(
    fake: FakeVault, shares: int, threshold: int
) -> None:
    async with fake.client() as http:
        with pytest.raises(ValueError):
            await _initializer(http).initialize(shares, threshold)

    assert sum(fake.calls.values()) == 0


@pytest.mark.asyncio
async def test_malformed_init_response_does_not_echo_secrets() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET" and request.url.path == "/v1/sys/init":
            return httpx.Response(200, json={"initialized": False})
        if request.url.path == "/v1/sys/seal-status":
            return httpx.Response(200, json={"sealed": True})
        return httpx.Response(200, json={"root_token": "hvs.topsecret", "keys_base64": []})

    async with mock_client(handler) as http:
        with pytest.raises(MalformedResponseError) as ei:
            await _initializer(http).initialize(1, 1)

    assert "keys_base64" in str(ei.value)
    assert "hvs.topsecret" not in str(ei.value)
    assert ei.value.__cause__ is None


@pytest.mark.asyncio
async def test_material_renders_without_secrets(fake: FakeVault) -> None:
    async with fake.client() as http:
        material = await _initializer(http).initialize(1, 1)

    assert isinstance(material, UnsealMaterial)
    rendered = f"{material!r} {material!s} {material.root_token} {material.unseal_keys}"
    assert fake.root_token not in rendered
    assert fake.keys[0] not in rendered


def test_material_enforces_threshold() -> None:
    with pytest.raises(ValueError):
        UnsealMaterial(root_token=SecretStr("t"), unseal_keys=(SecretStr("k"),), shares=3, threshold=2)
