"""
vault_bootstrap.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for the bootstrap run.
- Hide externally supplied secrets (root token, unseal keys) from repr/logging.
- Offer a cached settings instance for the composition root.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration:
    - Defaults match a single-node dev Vault on localhost
    - Secrets only need to be supplied when re-running against an initialized service
    """

    model_config = SettingsConfigDict(env_prefix="VAULT_BOOTSTRAP_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "vault-bootstrap"
    log_level: str = "INFO"

    # Service endpoint
    vault_addr: str = "http://127.0.0.1:8200"
    request_timeout_s: float = 10.0

    # Readiness polling (bounded exponential backoff up to an overall deadline)
    ready_timeout_s: float = 120.0
    ready_initial_backoff_s: float = 0.5
    ready_max_backoff_s: float = 5.0

    # Initialization
    key_shares: int = Field(default=1, ge=1)
    key_threshold: int = Field(default=1, ge=1)

    # Secrets engine
    kv_mount_path: str = "secret"
    kv_engine_type: str = "kv-v2"

    # Scoped tokens, e.g. "768h"; None uses the auth backend default.
    token_ttl: str | None = None

    # Externally supplied credentials for an already-initialized service.
    root_token: SecretStr | None = Field(default=None, repr=False)
    unseal_keys: list[SecretStr] = Field(default_factory=list, repr=False)

    @model_validator(mode="after")
    def _threshold_within_shares(self) -> Settings:
        if self.key_threshold > self.key_shares:
            raise ValueError(
                f"key_threshold ({self.key_threshold}) must not exceed key_shares ({self.key_shares})"
            )
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars on repeated composition.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Secret fields are SecretStr so an accidental `log.info(settings=...)` renders
# masked values; the logging redaction processor is a second line of defence.
