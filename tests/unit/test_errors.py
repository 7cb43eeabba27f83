"""
Unit tests for the chatflow error hierarchy.

Checks the messages callers see, the HTTP status each error maps to and the
inheritance the exception handlers rely on.
"""

import pytest

from chatflow.models.chains import WorkflowStep
from chatflow.utils.errors import (
    ChatflowError,
    ChatNotReadyError,
    CompletionAlreadyTriggeredError,
    DocumentStagingError,
    EgressBlockedError,
    ExternalServiceError,
    NotReadyReason,
    PollTimeoutError,
    RequestSizeError,
    ResponseShapeError,
    ServiceConnectionError,
    ServiceStatusError,
    ToolError,
    ToolInputError,
    ValidationError,
    WorkflowStepError,
)


class TestErrorHierarchy:
    """Every domain error is a ChatflowError with a stable error code."""

    @pytest.mark.parametrize(
        "error",
        [
            ValidationError("bad input"),
            ToolInputError("empty registration"),
            ServiceConnectionError("refused", service_name="open-webui"),
            EgressBlockedError("example.com"),
            ServiceStatusError("open-webui", 500, "boom"),
            ResponseShapeError("missing id", service_name="open-webui"),
            ChatNotReadyError(NotReadyReason.EMPTY_CONTENT),
            PollTimeoutError(15),
            CompletionAlreadyTriggeredError("msg-1"),
            ToolError("no plate", tool_name="alpr"),
            DocumentStagingError(NotADirectoryError(20, "Not a directory")),
        ],
    )
    def test_is_chatflow_error(self, error: ChatflowError) -> None:
        assert isinstance(error, ChatflowError)
        assert error.error_code
        assert str(error) == error.message

    def test_default_error_code_is_class_name(self) -> None:
        assert ChatflowError("x").error_code == "ChatflowError"

    def test_egress_blocked_is_connection_error(self) -> None:
        error = EgressBlockedError("dvsa.example.com")
        assert isinstance(error, ServiceConnectionError)
        assert isinstance(error, ExternalServiceError)
        assert error.error_code == "EGRESS_BLOCKED"
        assert error.host == "dvsa.example.com"

    def test_tool_input_error_is_validation_error(self) -> None:
        assert isinstance(ToolInputError("x"), ValidationError)


class TestErrorMessages:
    def test_egress_blocked_message(self) -> None:
        error = EgressBlockedError("dvsa.example.com")
        assert error.message == (
            "hostname lookup blocked: connection attempt to 'dvsa.example.com' is prohibited"
        )

    def test_status_error_carries_code_and_body(self) -> None:
        error = ServiceStatusError("open-webui", 502, "bad gateway")
        assert error.message == "API call failed with status 502: bad gateway"
        assert error.upstream_status_code == 502
        assert error.body == "bad gateway"
        assert error.service_name == "open-webui"

    @pytest.mark.parametrize(
        "reason,text",
        [
            (NotReadyReason.EMPTY_RESPONSE, "chat response array was empty"),
            (NotReadyReason.MESSAGE_MISSING, "assistant message ID not yet present in history"),
            (NotReadyReason.WRONG_ROLE, "found message, but role is incorrect"),
            (NotReadyReason.EMPTY_CONTENT, "assistant message content is empty"),
        ],
    )
    def test_not_ready_reasons_are_distinct(self, reason: NotReadyReason, text: str) -> None:
        error = ChatNotReadyError(reason)
        assert error.reason is reason
        assert error.message == f"{text}, continuing poll"

    def test_poll_timeout_mentions_last_state(self) -> None:
        error = PollTimeoutError(15, NotReadyReason.EMPTY_CONTENT)
        assert "15 poll attempts" in error.message
        assert "assistant message content is empty" in error.message
        assert error.attempts == 15

    def test_workflow_step_error_names_the_step(self) -> None:
        cause = ServiceStatusError("open-webui", 500, "boom")
        error = WorkflowStepError(WorkflowStep.CREATE_CHAT, cause)
        assert error.message == "failed to create chat: API call failed with status 500: boom"
        assert error.step is WorkflowStep.CREATE_CHAT
        assert error.cause is cause

    def test_workflow_step_error_wraps_plain_exceptions(self) -> None:
        error = WorkflowStepError(WorkflowStep.MARK_COMPLETED, ValueError("no chat"))
        assert error.message == "failed to mark completion: no chat"


class TestStatusCodes:
    """HTTP status each error maps to at the front door."""

    def test_defaults(self) -> None:
        assert ChatflowError("x").status_code == 500
        assert ValidationError("x").status_code == 400
        assert ToolInputError("x").status_code == 400
        assert RequestSizeError(actual_size=2048, max_size=1024).status_code == 413
        assert PollTimeoutError(15).status_code == 504
        assert ServiceStatusError("open-webui", 404, "").status_code == 500
        assert ToolError("x", tool_name="alpr").status_code == 500

    def test_workflow_step_error_inherits_cause_status(self) -> None:
        timeout = WorkflowStepError(WorkflowStep.FETCH_RESULT, PollTimeoutError(15))
        assert timeout.status_code == 504

        failure = WorkflowStepError(
            WorkflowStep.TRIGGER_COMPLETION, ServiceConnectionError("refused", "open-webui")
        )
        assert failure.status_code == 500

    def test_request_size_error(self) -> None:
        error = RequestSizeError(actual_size=2_000_000, max_size=1_000_000)
        assert error.error_code == "REQUEST_TOO_LARGE"
        assert error.actual_size == 2_000_000
        assert error.max_size == 1_000_000
        assert "2000000" in error.message
