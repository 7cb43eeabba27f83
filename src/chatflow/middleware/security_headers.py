"""
Security headers middleware.

Adds security headers to all responses.
"""

from fastapi import Request

from chatflow.utils.logging import get_logger

logger = get_logger(__name__)


async def security_headers_middleware(request: Request, call_next):  # type: ignore
    """Middleware to add security headers to all responses.

    Adds X-Content-Type-Options, X-Frame-Options and X-XSS-Protection to every
    response, and Strict-Transport-Security to HTTPS requests (direct or behind
    a proxy that sets X-Forwarded-Proto).

    Args:
        request: FastAPI Request object
        call_next: Next middleware/route handler

    Returns:
        Response with security headers added
    """
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-XSS-Protection"] = "1; mode=block"

    is_https = (
        request.url.scheme == "https"
        or request.headers.get("X-Forwarded-Proto", "").lower() == "https"
    )

    if is_https:
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

    logger.debug(
        "Security headers applied",
        extra={"path": str(request.url.path), "scheme": request.url.scheme, "hsts": is_https},
    )
    return response
