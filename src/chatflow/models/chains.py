"""
Chat workflow models.

This module holds the data structures for the Open WebUI chat workflow, which
drives a conversation through a fixed sequence of backend calls:

1. Create chat: the user turn becomes the chat's only message
2. Inject assistant message: an empty assistant slot for the backend to stream into
3. Trigger completion: ask the backend to generate the assistant content
4. Update model details (optional): refresh the assistant turn's model metadata
5. Mark completed (optional): advisory bookkeeping for the backend
6. Fetch result (optional): poll until the assistant content is present

WorkflowStep names each step and carries its log/error label. ChatRun is the
per-run context threaded through the steps; it is never shared between runs.
WorkflowConfig holds the model, tool and polling parameters.
"""

import time
import uuid
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from chatflow.models.webui import Chat, ChatEnvelope, History, Message


class WorkflowStep(str, Enum):
    """Kinds of step in the chat workflow."""

    CREATE_CHAT = "create_chat"
    INJECT_ASSISTANT_MESSAGE = "inject_assistant_message"
    TRIGGER_COMPLETION = "trigger_completion"
    UPDATE_MODEL_DETAILS = "update_model_details"
    MARK_COMPLETED = "mark_completed"
    FETCH_RESULT = "fetch_result"

    @property
    def label(self) -> str:
        """Human-readable description used in logs and error messages."""
        return _STEP_LABELS[self]

    @property
    def number(self) -> int:
        return list(WorkflowStep).index(self) + 1


_STEP_LABELS = {
    WorkflowStep.CREATE_CHAT: "create chat",
    WorkflowStep.INJECT_ASSISTANT_MESSAGE: "inject empty assistant message",
    WorkflowStep.TRIGGER_COMPLETION: "trigger completion",
    WorkflowStep.UPDATE_MODEL_DETAILS: "update chat with model details",
    WorkflowStep.MARK_COMPLETED: "mark completion",
    WorkflowStep.FETCH_RESULT: "fetch chat result",
}


def new_message_id() -> str:
    return str(uuid.uuid4())


def now_millis() -> int:
    return int(time.time() * 1000)


class WorkflowConfig(BaseModel):
    """
    Runtime parameters for the chat workflow and the completion poller.

    Built from Settings via ``Settings.workflow_config``.
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_name: str = Field(description="Model used for the chat and the completion")
    tools: list[str] = Field(
        default_factory=list,
        description="Tool names enabled on the chat",
    )
    user_language: str = Field(default="en-US", description="{{USER_LANGUAGE}} variable")
    user_timezone: str = Field(default="Europe", description="{{CURRENT_TIMEZONE}} variable")
    poll_interval: float = Field(
        default=1.0,
        ge=0.0,
        description="Seconds to wait between chat state fetches",
    )
    max_poll_attempts: int = Field(
        default=15,
        ge=1,
        description="Number of chat state fetches before reporting a poll timeout",
    )


class ChatRun(BaseModel):
    """
    State of one workflow run.

    The user turn is fixed once the chat is created. The assistant turn is
    rebuilt for each update (fresh timestamp, empty content); its content is
    only ever filled in by the backend and observed through polling.
    """

    question: str
    user_message: Message
    assistant_message_id: str = Field(default_factory=new_message_id)
    chat_id: str | None = None
    completion_triggered: bool = False

    @classmethod
    def start(cls, question: str, config: WorkflowConfig) -> "ChatRun":
        """Begin a run for ``question`` with a freshly identified user turn."""
        user_message = Message(
            id=new_message_id(),
            role="user",
            content=question,
            timestamp=now_millis(),
            models=[config.model_name],
        )
        return cls(question=question, user_message=user_message)

    def build_assistant_message(self, config: WorkflowConfig) -> Message:
        """Empty assistant turn answering the user turn, stamped now."""
        return Message(
            id=self.assistant_message_id,
            role="assistant",
            content="",
            parent_id=self.user_message.id,
            timestamp=now_millis(),
            model_name=config.model_name,
            model_idx=0,
            models=[config.model_name],
        )

    def new_chat_payload(self, config: WorkflowConfig) -> ChatEnvelope:
        """Create-chat body: the user turn as the sole message and history entry."""
        user = self.user_message
        return ChatEnvelope(
            chat=Chat(
                title=self.question,
                models=[config.model_name],
                messages=[user],
                tools=list(config.tools),
                history=History(current_id=user.id, messages={user.id: user}),
            )
        )

    def update_chat_payload(self, config: WorkflowConfig) -> ChatEnvelope:
        """
        Update-chat body carrying the full message pair and full history.

        The backend replaces the stored chat with this document, so partial
        updates would drop turns.
        """
        user = self.user_message
        assistant = self.build_assistant_message(config)
        return ChatEnvelope(
            chat=Chat(
                id=self.chat_id,
                title=self.question,
                models=[config.model_name],
                messages=[user, assistant],
                tools=list(config.tools),
                history=History(
                    current_id=assistant.id,
                    messages={user.id: user, assistant.id: assistant},
                ),
            )
        )


class WorkflowResult(BaseModel):
    """Outcome handed back to the caller of a workflow run."""

    chat_id: str
    user_message_id: str
    assistant_message_id: str
    status: str = "chat process initiated"
    content: str | None = None
