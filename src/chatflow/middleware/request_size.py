"""
Request size validation middleware.

Validates incoming request body size before processing.
"""

from fastapi import Request
from fastapi.responses import JSONResponse

from chatflow.utils.errors import RequestSizeError
from chatflow.utils.logging import get_logger

logger = get_logger(__name__)


async def request_size_validator(request: Request, call_next):  # type: ignore
    """Middleware to validate request body size.

    Checks the Content-Length header against ``max_request_body_size`` and
    answers 413 when it is exceeded. GET requests and health endpoints are not
    checked; requests without a usable Content-Length pass through.

    Args:
        request: FastAPI Request object
        call_next: Next middleware/route handler

    Returns:
        Response from next middleware/route handler or 413 error response
    """
    if request.method == "GET" or request.url.path.startswith("/health"):
        return await call_next(request)

    content_length_header = request.headers.get("content-length")
    if content_length_header is None:
        return await call_next(request)

    try:
        content_length = int(content_length_header)
    except ValueError:
        return await call_next(request)

    max_size = request.app.state.settings.max_request_body_size
    if content_length > max_size:
        error = RequestSizeError(actual_size=content_length, max_size=max_size)
        logger.warning(
            "Request body too large",
            extra={
                "actual_size": content_length,
                "max_size": max_size,
                "path": request.url.path,
                "method": request.method,
            },
        )
        return JSONResponse(
            status_code=error.status_code,
            content={
                "error": "request_too_large",
                "message": error.message,
                "actual_size_bytes": content_length,
                "max_size_bytes": max_size,
            },
        )

    return await call_next(request)
