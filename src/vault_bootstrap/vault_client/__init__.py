"""
vault_bootstrap.vault_client

Vault client package.

Responsibilities:
- Provide the HTTP boundary to the secrets service and its response schemas.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Components should depend on this boundary (not on httpx directly).
