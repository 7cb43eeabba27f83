"""Dependencies for FastAPI endpoints.

Provides JWT bearer token verification and access to the service clients
created at application startup.
"""

import jwt
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from chatflow.chains.workflow import ChatWorkflow
from chatflow.config import Settings
from chatflow.tools.alpr import AlprClient
from chatflow.tools.registry import RegistryClient
from chatflow.utils.logging import get_logger
from chatflow.utils.user_context import set_user_context
from chatflow.webui.client import WebUIClient

logger = get_logger(__name__)

security = HTTPBearer()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _get_state_client(request: Request, name: str):  # type: ignore[no-untyped-def]
    client = getattr(request.app.state, name, None)
    if client is None:
        logger.error(
            "Service client not available - application startup may have failed",
            extra={"client": name, "status_code": 503},
        )
        raise HTTPException(status_code=503, detail=f"Service not initialized: {name}")
    return client


def get_webui_client(request: Request) -> WebUIClient:
    return _get_state_client(request, "webui_client")


def get_registry_client(request: Request) -> RegistryClient:
    return _get_state_client(request, "registry_client")


def get_alpr_client(request: Request) -> AlprClient:
    return _get_state_client(request, "alpr_client")


def get_workflow(
    client: WebUIClient = Depends(get_webui_client),
    settings: Settings = Depends(get_settings),
) -> ChatWorkflow:
    """Build a ChatWorkflow for this request; each request gets its own run state."""
    return ChatWorkflow(client, settings.workflow_config)


async def verify_bearer_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    settings: Settings = Depends(get_settings),
) -> dict:
    """
    Verify JWT bearer token from Authorization header.

    Args:
        credentials: HTTPAuthorizationCredentials from Authorization header
        settings: Application settings containing JWT configuration

    Returns:
        Decoded JWT token payload as dictionary

    Raises:
        HTTPException: 401 if token is expired
        HTTPException: 403 if token signature is invalid
    """
    token = credentials.credentials

    if not settings.jwt_secret_key or len(settings.jwt_secret_key) < 32:
        logger.critical(
            "JWT_SECRET_KEY is missing or too short - authentication system compromised",
            extra={
                "key_length": len(settings.jwt_secret_key) if settings.jwt_secret_key else 0,
                "minimum_length": 32,
            },
        )
        raise HTTPException(
            status_code=500,
            detail="Authentication system misconfigured",
        )

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )

        # user_id flows from here into every log line via the JSON formatter
        user_id = payload.get("sub", "unknown")
        set_user_context(user_id)

        logger.debug(
            "JWT token verified successfully",
            extra={"subject": user_id},
        )
        return payload

    except jwt.ExpiredSignatureError as exc:
        logger.warning("JWT token verification failed: token expired")
        raise HTTPException(
            status_code=401,
            detail="Token has expired",
        ) from exc

    except jwt.InvalidTokenError as exc:
        logger.warning(
            "JWT token verification failed: invalid token",
            extra={"error": str(exc)},
        )
        raise HTTPException(
            status_code=403,
            detail="Invalid authentication credentials",
        ) from exc
