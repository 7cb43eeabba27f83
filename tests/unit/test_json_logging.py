"""Unit tests for the JSON log formatter and logging setup."""

import json
import logging

from chatflow.config import Settings
from chatflow.utils.logging import JSONFormatter, setup_logging
from chatflow.utils.request_context import _request_id_var
from chatflow.utils.user_context import _user_context_var


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="chatflow.chains.workflow",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Chat created",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def setup_method(self) -> None:
        _request_id_var.set(None)
        _user_context_var.set(None)

    def test_core_fields(self) -> None:
        data = json.loads(JSONFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "chatflow.chains.workflow"
        assert data["message"] == "Chat created"
        assert "timestamp" in data
        assert "request_id" not in data

    def test_extra_fields_included(self) -> None:
        data = json.loads(JSONFormatter().format(_record(step="create_chat", chat_id="chat-1")))

        assert data["step"] == "create_chat"
        assert data["chat_id"] == "chat-1"
        assert "lineno" not in data

    def test_context_injected(self) -> None:
        _request_id_var.set("req_123")
        _user_context_var.set("client-a")

        data = json.loads(JSONFormatter().format(_record()))

        assert data["request_id"] == "req_123"
        assert data["user_id"] == "client-a"

    def test_unserializable_values_stringified(self) -> None:
        data = json.loads(JSONFormatter().format(_record(step=object())))

        assert data["step"].startswith("<object object")


class TestSetupLogging:
    def test_json_handler_installed(self, test_settings: Settings) -> None:
        setup_logging(test_settings)

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_standard_format(self, test_settings: Settings) -> None:
        setup_logging(test_settings.model_copy(update={"log_format": "standard"}))

        assert not isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)
