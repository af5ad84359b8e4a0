"""
Boundary layer for external system integrations.

Handles all interactions with external systems (knowledge store database,
embedding provider). Provides adapters and clients for infrastructure
dependencies.
"""
