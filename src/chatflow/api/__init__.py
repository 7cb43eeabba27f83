"""
API endpoints for chatflow.

This module contains FastAPI routers for health checks and v1 API endpoints.
"""

from chatflow.api.health import router as health_router

__all__ = ["health_router"]
