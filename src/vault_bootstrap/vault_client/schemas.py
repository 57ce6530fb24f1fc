"""
vault_bootstrap.vault_client.schemas

Pydantic models for the Vault response bodies we consume.

Responsibilities:
- Validate response shapes strictly (protocol drift is fatal, never ignored).
- Parse secret fields straight into `SecretStr`.
- Convert validation failures into `MalformedResponseError` without echoing input values.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, Field, SecretStr, StrictBool, ValidationError

from vault_bootstrap.errors import MalformedResponseError


class InitStatusResponse(BaseModel):
    initialized: StrictBool


class SealStatusResponse(BaseModel):
    sealed: StrictBool
    t: int | None = None
    n: int | None = None
    progress: int | None = None


class InitResponse(BaseModel):
    root_token: SecretStr
    keys_base64: list[SecretStr] = Field(min_length=1)


class UnsealResponse(BaseModel):
    sealed: StrictBool
    progress: int | None = None


class MountResponse(BaseModel):
    type: str
    options: dict[str, str] | None = None


class PolicyResponse(BaseModel):
    name: str | None = None
    policy: str


class TokenAuth(BaseModel):
    client_token: SecretStr
    accessor: str | None = None
    policies: list[str] = Field(default_factory=list)


class TokenCreateResponse(BaseModel):
    auth: TokenAuth


M = TypeVar("M", bound=BaseModel)


def parse(model: type[M], payload: Any, *, what: str) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        # Only field locations are reported; input values may be secrets.
        locs = sorted(
            {".".join(str(p) for p in err["loc"]) or "<root>" for err in e.errors(include_input=False)}
        )
        raise MalformedResponseError(
            f"{what}: unexpected response shape (fields: {', '.join(locs)})"
        ) from None


def unwrap_data(payload: dict[str, Any]) -> dict[str, Any]:
    # Newer Vault versions mirror the body under "data"; older ones return it top-level.
    data = payload.get("data")
    if isinstance(data, dict):
        return data
    return payload


# --- Module Notes -----------------------------------------------------------
# Models ignore unknown fields: Vault adds fields between releases and that is not drift.
