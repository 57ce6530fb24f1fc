"""
vault_bootstrap.components

Bootstrap step components.

Responsibilities:
- One class per step, each owning its own idempotency predicate.
"""

# Package marker.
