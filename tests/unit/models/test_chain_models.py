"""
Unit tests for the chat workflow models.

Covers the per-run state and the chat documents built from it: the create
payload holds only the user turn, every update payload holds both turns and the
complete history, and wire field names follow the backend's JSON.
"""

import itertools
from unittest.mock import patch

import pytest

from chatflow.models.chains import ChatRun, WorkflowConfig, WorkflowStep
from chatflow.models.webui import Chat, Message
from chatflow.webui.client import dump_payload


@pytest.fixture
def config() -> WorkflowConfig:
    return WorkflowConfig(model_name="llama3.2:latest", tools=["DVSA Lookup"])


@pytest.fixture
def run(config: WorkflowConfig) -> ChatRun:
    run = ChatRun.start("Who owns AB12CDE?", config)
    run.chat_id = "chat-1"
    return run


class TestWorkflowStep:
    def test_steps_are_numbered_in_protocol_order(self) -> None:
        assert [step.number for step in WorkflowStep] == [1, 2, 3, 4, 5, 6]
        assert WorkflowStep.CREATE_CHAT.number == 1
        assert WorkflowStep.FETCH_RESULT.number == 6

    def test_every_step_has_a_label(self) -> None:
        assert WorkflowStep.CREATE_CHAT.label == "create chat"
        assert WorkflowStep.INJECT_ASSISTANT_MESSAGE.label == "inject empty assistant message"
        assert WorkflowStep.UPDATE_MODEL_DETAILS.label == "update chat with model details"
        assert all(step.label for step in WorkflowStep)


class TestChatRun:
    def test_start_builds_user_turn(self, config: WorkflowConfig) -> None:
        run = ChatRun.start("hello", config)

        assert run.user_message.role == "user"
        assert run.user_message.content == "hello"
        assert run.user_message.models == ["llama3.2:latest"]
        assert run.user_message.timestamp > 0
        assert run.chat_id is None
        assert run.completion_triggered is False

    def test_runs_never_share_ids(self, config: WorkflowConfig) -> None:
        first = ChatRun.start("one", config)
        second = ChatRun.start("two", config)

        ids = {
            first.user_message.id,
            first.assistant_message_id,
            second.user_message.id,
            second.assistant_message_id,
        }
        assert len(ids) == 4

    def test_assistant_turn_answers_user_turn(self, run: ChatRun, config: WorkflowConfig) -> None:
        assistant = run.build_assistant_message(config)

        assert assistant.id == run.assistant_message_id
        assert assistant.role == "assistant"
        assert assistant.content == ""
        assert assistant.parent_id == run.user_message.id
        assert assistant.model_name == "llama3.2:latest"
        assert assistant.model_idx == 0

    def test_assistant_timestamp_regenerated_per_payload(
        self, run: ChatRun, config: WorkflowConfig
    ) -> None:
        with patch("chatflow.models.chains.now_millis", side_effect=itertools.count(1000)):
            first = run.build_assistant_message(config)
            second = run.build_assistant_message(config)

        assert second.timestamp > first.timestamp


class TestChatPayloads:
    def test_new_chat_payload_holds_only_user_turn(self, run: ChatRun, config: WorkflowConfig) -> None:
        body = dump_payload(run.new_chat_payload(config))["chat"]
        user_id = run.user_message.id

        assert body["title"] == "Who owns AB12CDE?"
        assert body["models"] == ["llama3.2:latest"]
        assert body["tools"] == ["DVSA Lookup"]
        assert [m["id"] for m in body["messages"]] == [user_id]
        assert body["history"]["current_id"] == user_id
        assert list(body["history"]["messages"]) == [user_id]
        assert "id" not in body

    def test_update_payload_is_complete(self, run: ChatRun, config: WorkflowConfig) -> None:
        body = dump_payload(run.update_chat_payload(config))["chat"]
        user_id = run.user_message.id
        assistant_id = run.assistant_message_id

        assert body["id"] == "chat-1"
        assert [m["id"] for m in body["messages"]] == [user_id, assistant_id]
        assert body["history"]["current_id"] == assistant_id
        assert set(body["history"]["messages"]) == {user_id, assistant_id}

        assistant = body["history"]["messages"][assistant_id]
        assert assistant["parentId"] == user_id
        assert assistant["modelName"] == "llama3.2:latest"
        assert assistant["content"] == ""

    def test_user_turn_omits_assistant_only_fields(self, run: ChatRun, config: WorkflowConfig) -> None:
        user = dump_payload(run.new_chat_payload(config))["chat"]["messages"][0]

        assert "parentId" not in user
        assert "modelName" not in user
        assert "modelIdx" not in user


class TestWireModels:
    def test_message_accepts_backend_field_names(self) -> None:
        message = Message.model_validate(
            {"id": "m1", "role": "assistant", "content": None, "parentId": "u1", "modelIdx": 0}
        )

        assert message.content == ""
        assert message.parent_id == "u1"
        assert message.model_idx == 0

    def test_chat_ignores_unknown_fields(self) -> None:
        chat = Chat.model_validate(
            {"id": "c1", "title": "t", "archived": False, "history": {"messages": {}}}
        )
        assert chat.id == "c1"
        assert chat.history.messages == {}
