"""Health check endpoints."""

from fastapi import APIRouter, Request

from chatflow.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/")
async def health_check() -> dict[str, str]:
    """
    Liveness check.

    Returns:
        Status response indicating the API is up
    """
    logger.debug("Health check (liveness) request received")
    return {"status": "healthy"}


@router.get("/ready")
async def readiness_check(request: Request) -> dict[str, str]:
    """
    Readiness check.

    Ready once the service clients have been created at startup.
    """
    logger.debug("Readiness check request received")
    ready = getattr(request.app.state, "webui_client", None) is not None
    return {"status": "ready" if ready else "starting"}
