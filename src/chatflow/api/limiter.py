"""
Rate limiting configuration using SlowAPI.

Requests are keyed by the JWT subject when a bearer token is present, falling
back to the client IP address.
"""

import os

import jwt
from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from chatflow.utils.logging import get_logger

logger = get_logger(__name__)


def get_jwt_subject_or_ip(request: Request) -> str:
    """
    Extract rate limit key from JWT subject or fall back to IP address.

    The token signature is not verified here; verification happens in the
    endpoint dependency. Only the 'sub' claim is read.

    Returns:
        "user_{subject}" for requests with a decodable token, else "ip_{address}"
    """
    auth_header = request.headers.get("Authorization", "")

    if auth_header.startswith("Bearer "):
        token = auth_header[7:]
        try:
            payload = jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError as exc:
            logger.debug(
                "JWT decoding failed for rate limit key, using IP fallback",
                extra={"error": type(exc).__name__, "path": str(request.url.path)},
            )
        else:
            subject = payload.get("sub")
            if subject:
                return f"user_{subject}"

    return f"ip_{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_jwt_subject_or_ip,
    default_limits=[os.getenv("RATE_LIMIT_DEFAULT", "100/hour")],
    headers_enabled=True,
    enabled=os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true",  # Disabled in tests
)


def get_limiter_status(settings) -> dict[str, str | bool]:  # type: ignore[no-untyped-def]
    """
    Get a structured dump of the rate limiter's configuration for startup logs.

    Args:
        settings: Application settings
    """
    return {
        "enabled": limiter.enabled,
        "default_limit": settings.rate_limit_default,
        "chat_limit": settings.rate_limit_chat,
        "tools_limit": settings.rate_limit_tools,
        "key_function_type": "jwt-based",
    }
