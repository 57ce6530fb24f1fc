"""
tests.conftest

Shared fixtures for the bootstrap test suite.
"""

from __future__ import annotations

import pytest
from fake_vault import FakeVault
from pydantic import SecretStr


@pytest.fixture
def fake() -> FakeVault:
    return FakeVault()


@pytest.fixture
def unsealed(fake: FakeVault) -> tuple[FakeVault, SecretStr]:
    # Initialized + unsealed service and its root token, for privileged-step tests.
    root, _ = fake.preinitialize()
    fake.sealed = False
    return fake, SecretStr(root)
