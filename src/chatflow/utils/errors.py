"""
Custom exception hierarchy for the chatflow service.

Provides domain-specific exceptions for transport, protocol, response shape,
polling and workflow failures.
"""

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chatflow.models.chains import WorkflowStep


class ChatflowError(Exception):
    """
    Base exception for all chatflow-specific errors.

    All application errors should inherit from this class.
    """

    status_code = 500

    def __init__(self, message: str, error_code: str | None = None) -> None:
        """
        Initialize a chatflow error.

        Args:
            message: Human-readable error message
            error_code: Optional error code for categorization
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__


class ConfigurationError(ChatflowError):
    """
    Raised when there's an error in application configuration.

    Typically thrown during startup when settings are invalid.
    """


class ValidationError(ChatflowError):
    """
    Raised when input validation fails.

    Indicates that provided data doesn't meet requirements.
    """

    status_code = 400


class RequestSizeError(ValidationError):
    """Raised when request body exceeds size limit."""

    status_code = 413

    def __init__(self, actual_size: int, max_size: int) -> None:
        """
        Initialize a request size error.

        Args:
            actual_size: Actual size of request body in bytes
            max_size: Maximum allowed size in bytes
        """
        message = (
            f"Request body size ({actual_size} bytes) exceeds maximum allowed ({max_size} bytes)"
        )
        super().__init__(message, error_code="REQUEST_TOO_LARGE")
        self.actual_size = actual_size
        self.max_size = max_size


class ToolInputError(ValidationError):
    """Raised when a tool is invoked with unusable input."""


class ExternalServiceError(ChatflowError):
    """
    Raised when an external service (Open WebUI, registry, ALPR) call fails.

    Wraps errors from third-party services with context.
    """

    def __init__(
        self,
        message: str,
        service_name: str,
        status_code: int | None = None,
        error_code: str | None = None,
    ) -> None:
        """
        Initialize an external service error.

        Args:
            message: Human-readable error message
            service_name: Name of the external service
            status_code: Optional HTTP status code returned by the service
            error_code: Optional error code
        """
        super().__init__(message, error_code)
        self.service_name = service_name
        self.upstream_status_code = status_code


class ServiceConnectionError(ExternalServiceError):
    """Raised when a call never produced a response (refused, timed out, TLS failure)."""

    def __init__(self, message: str, service_name: str) -> None:
        super().__init__(
            message=message,
            service_name=service_name,
            error_code="CONNECTION_ERROR",
        )


class EgressBlockedError(ServiceConnectionError):
    """
    Raised when the egress dialer refuses a destination that is not a literal IP.

    Raised before any name resolution takes place.
    """

    def __init__(self, host: str, service_name: str = "registry") -> None:
        message = f"hostname lookup blocked: connection attempt to '{host}' is prohibited"
        super().__init__(message=message, service_name=service_name)
        self.error_code = "EGRESS_BLOCKED"
        self.host = host


class ServiceStatusError(ExternalServiceError):
    """Raised when a service answers with a non-2xx status."""

    def __init__(self, service_name: str, status_code: int, body: str) -> None:
        message = f"API call failed with status {status_code}: {body}"
        super().__init__(
            message=message,
            service_name=service_name,
            status_code=status_code,
            error_code="API_STATUS_ERROR",
        )
        self.body = body


class ResponseShapeError(ExternalServiceError):
    """Raised when a decoded response lacks an expected field or has the wrong type."""

    def __init__(self, message: str, service_name: str) -> None:
        super().__init__(
            message=message,
            service_name=service_name,
            error_code="RESPONSE_SHAPE_ERROR",
        )


class NotReadyReason(str, Enum):
    """Why a fetched chat state does not yet hold the assistant's answer."""

    EMPTY_RESPONSE = "empty_response"
    MESSAGE_MISSING = "message_missing"
    WRONG_ROLE = "wrong_role"
    EMPTY_CONTENT = "empty_content"

    @property
    def description(self) -> str:
        return _NOT_READY_DESCRIPTIONS[self]


_NOT_READY_DESCRIPTIONS = {
    NotReadyReason.EMPTY_RESPONSE: "chat response array was empty",
    NotReadyReason.MESSAGE_MISSING: "assistant message ID not yet present in history",
    NotReadyReason.WRONG_ROLE: "found message, but role is incorrect",
    NotReadyReason.EMPTY_CONTENT: "assistant message content is empty",
}


class ChatNotReadyError(ChatflowError):
    """
    Transient condition raised by a single poll attempt.

    Recoverable by polling again within the attempt budget.
    """

    def __init__(self, reason: NotReadyReason) -> None:
        super().__init__(f"{reason.description}, continuing poll", error_code="NOT_READY")
        self.reason = reason


class PollTimeoutError(ChatflowError):
    """Raised when the poll budget is exhausted without assistant content."""

    status_code = 504  # Gateway Timeout

    def __init__(self, attempts: int, last_reason: NotReadyReason | None = None) -> None:
        message = f"assistant content not available after {attempts} poll attempts"
        if last_reason is not None:
            message = f"{message} (last state: {last_reason.description})"
        super().__init__(message, error_code="POLL_TIMEOUT")
        self.attempts = attempts
        self.last_reason = last_reason


class CompletionAlreadyTriggeredError(ChatflowError):
    """Raised when a completion is requested twice for the same assistant message."""

    def __init__(self, message_id: str) -> None:
        super().__init__(
            f"completion already triggered for message {message_id}",
            error_code="COMPLETION_ALREADY_TRIGGERED",
        )
        self.message_id = message_id


class WorkflowStepError(ChatflowError):
    """
    Raised when a workflow step fails; aborts the remaining steps.

    The message names the step: "failed to <step label>: <cause>".
    """

    def __init__(self, step: "WorkflowStep", cause: Exception) -> None:
        cause_text = getattr(cause, "message", None) or str(cause) or type(cause).__name__
        super().__init__(f"failed to {step.label}: {cause_text}", error_code="WORKFLOW_STEP_FAILED")
        self.step = step
        self.cause = cause
        self.status_code = getattr(cause, "status_code", 500)


class ToolError(ChatflowError):
    """Raised when a tool call returns a result that cannot be used."""

    def __init__(self, message: str, tool_name: str) -> None:
        super().__init__(message, error_code="TOOL_ERROR")
        self.tool_name = tool_name


class DocumentStagingError(ChatflowError):
    """Raised when a document cannot be written to or read from the staging directory."""

    def __init__(self, cause: OSError) -> None:
        super().__init__(f"failed to stage document: {cause}", error_code="STAGING_FAILED")
        self.cause = cause
