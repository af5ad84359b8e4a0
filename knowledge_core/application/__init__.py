"""
Application layer: use case orchestration over the knowledge core.
"""
