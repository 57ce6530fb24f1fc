"""
vault_bootstrap.observability

Observability package.

Responsibilities:
- Structured logging configuration.
- Redaction of secret material before log rendering.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Metrics/tracing exporters can be added here without touching orchestration logic.
