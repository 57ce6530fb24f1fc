"""
vault_bootstrap.services

Service layer package.

Responsibilities:
- Own the run lifecycle: compose components, invoke the graph, report outcome.
"""

# Package marker.
