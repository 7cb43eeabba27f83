"""
Main FastAPI application for chatflow.

Sets up the application with all routes, middleware, and startup/shutdown logic.
"""

import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from chatflow.api.health import router as health_router
from chatflow.api.limiter import get_limiter_status, limiter
from chatflow.api.v1.chat import router as chat_router
from chatflow.api.v1.files import router as files_router
from chatflow.api.v1.tools import router as tools_router
from chatflow.config import Settings
from chatflow.middleware.request_size import request_size_validator
from chatflow.middleware.security_headers import security_headers_middleware
from chatflow.tools.alpr import AlprClient
from chatflow.tools.registry import RegistryClient
from chatflow.utils.errors import ChatflowError
from chatflow.utils.logging import get_logger, setup_logging
from chatflow.utils.request_context import set_request_id
from chatflow.webui.client import WebUIClient

logger = get_logger(__name__)

_CLIENT_NAMES = ("webui_client", "registry_client", "alpr_client")


@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore
    """
    Manage application lifecycle.

    Creates the Open WebUI, registry and ALPR clients on startup (unless they
    were already placed on app.state) and closes them on shutdown.

    Args:
        app: FastAPI application instance

    Yields:
        Control during application runtime
    """
    logger.info("Application starting up")
    settings: Settings = app.state.settings

    if getattr(app.state, "webui_client", None) is None:
        app.state.webui_client = WebUIClient(
            settings.webui_host_url,
            settings.webui_api_token,
            timeout=settings.webui_timeout,
        )
    if getattr(app.state, "registry_client", None) is None:
        app.state.registry_client = RegistryClient(
            settings.registry_api_url,
            timeout=settings.tool_timeout,
            connect_timeout=settings.egress_connect_timeout,
            keepalive=settings.egress_keepalive,
        )
    if getattr(app.state, "alpr_client", None) is None:
        app.state.alpr_client = AlprClient(settings.alpr_api_url, timeout=settings.tool_timeout)

    logger.info(
        "Service clients initialized",
        extra={
            "step": "initialization",
            "webui_host_url": settings.webui_host_url,
            "webui_model_name": settings.webui_model_name,
            "registry_api_url": settings.registry_api_url,
            "alpr_api_url": settings.alpr_api_url,
        },
    )
    logger.info(
        "Rate limiter initialized with status",
        extra={
            "step": "initialization",
            "component": "rate_limiter",
            **get_limiter_status(settings),
        },
    )

    try:
        yield
    finally:
        logger.info("Application shutting down")
        for name in _CLIENT_NAMES:
            client = getattr(app.state, name, None)
            if client is not None:
                await client.aclose()
                setattr(app.state, name, None)


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use; loaded from the environment when omitted

    Returns:
        Configured FastAPI application instance
    """
    if settings is None:
        try:
            settings = Settings()
        except Exception as exc:
            # Cannot use logger yet - settings failed to load
            print(f"CRITICAL: Failed to load settings: {exc}", file=sys.stderr)
            raise

    setup_logging(settings)

    logger.info(
        "Creating FastAPI application",
        extra={
            "environment": settings.environment,
            "api_title": settings.api_title,
        },
    )

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="Chat workflow relay for Open WebUI with egress-restricted tool calls",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.limiter = limiter

    @app.middleware("http")
    async def add_request_tracking(request: Request, call_next):  # type: ignore
        """Add request ID propagation and response timing."""
        request_id = request.headers.get("X-Request-ID", "").strip()
        if not request_id:
            request_id = f"req_{int(time.time() * 1000)}"

        set_request_id(request_id)

        start_time = time.time()
        response = await call_next(request)
        elapsed = time.time() - start_time

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = str(elapsed)
        logger.info(
            "Response completed",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "response_time": elapsed,
            },
        )
        return response

    app.middleware("http")(request_size_validator)

    if settings.enable_security_headers:
        app.middleware("http")(security_headers_middleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    @app.exception_handler(ChatflowError)
    async def chatflow_error_handler(request: Request, exc: ChatflowError) -> JSONResponse:
        """Map service errors to their HTTP status with the error text."""
        log_fn = logger.warning if exc.status_code < 500 else logger.error
        log_fn(
            f"Request failed: {exc.message}",
            extra={
                "error_code": exc.error_code,
                "status_code": exc.status_code,
                "path": request.url.path,
            },
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.error_code,
                "message": exc.message,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed caller input is a 400, not FastAPI's default 422."""
        logger.warning(
            "Malformed request",
            extra={"path": request.url.path, "error_count": len(exc.errors())},
        )
        return JSONResponse(
            status_code=400,
            content={
                "error": "VALIDATION_ERROR",
                "message": "Malformed request body",
                "detail": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        """Return HTTP 429 with a Retry-After header."""
        logger.warning(
            "Rate limit exceeded",
            extra={
                "client": request.client.host if request.client else "unknown",
                "path": str(request.url.path),
                "method": request.method,
                "limit": str(exc.detail),
            },
        )
        return JSONResponse(
            status_code=429,
            headers={"Retry-After": "60"},
            content={"detail": str(exc.detail)},
        )

    app.include_router(health_router)
    app.include_router(chat_router)
    app.include_router(files_router)
    app.include_router(tools_router)

    logger.info("FastAPI application created successfully")

    return app


# Create the application instance for running with the FastAPI CLI
app = create_app()
