"""
Utility modules for chatflow.

This module provides error handling, logging, and request context helpers.
"""

from chatflow.utils.errors import (
    ChatflowError,
    ConfigurationError,
    EgressBlockedError,
    ExternalServiceError,
    PollTimeoutError,
    ResponseShapeError,
    ServiceConnectionError,
    ServiceStatusError,
    ToolError,
    ValidationError,
    WorkflowStepError,
)
from chatflow.utils.logging import get_logger, setup_logging

__all__ = [
    # Errors
    "ChatflowError",
    "ConfigurationError",
    "ValidationError",
    "ExternalServiceError",
    "ServiceConnectionError",
    "EgressBlockedError",
    "ServiceStatusError",
    "ResponseShapeError",
    "PollTimeoutError",
    "WorkflowStepError",
    "ToolError",
    # Logging
    "get_logger",
    "setup_logging",
]
