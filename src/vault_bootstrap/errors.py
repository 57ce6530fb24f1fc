"""
vault_bootstrap.errors

Error taxonomy for the bootstrap sequence.

Responsibilities:
- Distinguish retryable transport failures from fatal ones.
- Carry the identity of the failing step so callers can diagnose which transition failed.

Note:
- "Target state already achieved" is not an error; see `models.AlreadyInState`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vault_bootstrap.models import UnsealMaterial


class BootstrapError(Exception):
    """
    Base class for every failure surfaced by the bootstrap run.
    `step` is filled in by the orchestrator when the error crosses a node boundary.
    `material` carries unseal material produced earlier in the same run, so a failure
    after a fresh init does not lose the only copy of the root token and keys.
    """

    def __init__(self, message: str, *, step: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.step = step
        self.material: UnsealMaterial | None = None

    def __str__(self) -> str:
        if self.step:
            return f"[{self.step}] {self.message}"
        return self.message


class TransientNetworkError(BootstrapError):
    """Connection refused, timeout or a 5xx from the service. Retryable while probing."""


class UnreachableError(BootstrapError):
    """The service did not become reachable before the readiness deadline."""


class UnauthorizedError(BootstrapError):
    """Missing or invalid credential, or a rejected unseal key."""


class ConflictingStateError(BootstrapError):
    """Existing service-side state is incompatible with the desired configuration."""

    def __init__(
        self,
        message: str,
        *,
        errors: tuple[str, ...] = (),
        step: str | None = None,
    ) -> None:
        super().__init__(message, step=step)
        self.errors = errors


class MalformedResponseError(BootstrapError):
    """The response shape violates the expected contract (protocol drift)."""


class StepFailedError(BootstrapError):
    """A step raised something outside this taxonomy; the original is chained as `__cause__`."""


# --- Module Notes -----------------------------------------------------------
# Messages must never embed secret values: callers log `str(error)` verbatim.
# `material` never appears in `str()`; its fields are SecretStr.
