"""
HTTP API layer: FastAPI app factory, dependencies and routers.
"""
