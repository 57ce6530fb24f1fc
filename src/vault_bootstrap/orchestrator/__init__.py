"""
vault_bootstrap.orchestrator

Orchestration package (LangGraph state machine).

Responsibilities:
- Typed state schema, nodes, and graph compilation for the bootstrap sequence.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Public surface area should remain small and stable; call sites should use the service layer.
