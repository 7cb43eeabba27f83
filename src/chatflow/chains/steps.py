"""
Step functions for the chat workflow.

Each step performs exactly one Open WebUI call for a ChatRun:

1. create_chat_step: POST /api/v1/chats/new with the user turn
2. inject_assistant_step: POST /api/v1/chats/{id} adding the empty assistant turn
3. trigger_completion_step: POST /api/chat/completions (once per assistant turn)
4. update_model_details_step: POST /api/v1/chats/{id}, same payload as step 2
5. mark_completed_step: POST /api/chat/completed

Steps raise the client's errors unchanged; ChatWorkflow adds the step context.
Payloads are built at call time so every request carries a fresh timestamp.
"""

from datetime import datetime

from chatflow.models.chains import ChatRun, WorkflowConfig, WorkflowStep
from chatflow.models.webui import (
    BackgroundTasks,
    ChatCreatedResponse,
    CompletedRequest,
    CompletionRequest,
    CompletionVariables,
    Features,
    FileReference,
)
from chatflow.utils.errors import CompletionAlreadyTriggeredError
from chatflow.utils.logging import get_logger
from chatflow.webui.client import WebUIClient

logger = get_logger(__name__)

NEW_CHAT_PATH = "/api/v1/chats/new"
COMPLETIONS_PATH = "/api/chat/completions"
COMPLETED_PATH = "/api/chat/completed"


def chat_path(chat_id: str) -> str:
    return f"/api/v1/chats/{chat_id}"


def _require_chat_id(run: ChatRun) -> str:
    if not run.chat_id:
        raise ValueError("chat has not been created for this run")
    return run.chat_id


def build_file_references(
    knowledge_id: str | None = None,
    document_id: str | None = None,
) -> list[FileReference]:
    """File references for a completion: the collection first, then the document."""
    files = []
    if knowledge_id:
        files.append(FileReference(type="collection", id=knowledge_id))
    if document_id:
        files.append(FileReference(type="file", id=document_id))
    return files


def build_completion_request(
    run: ChatRun,
    config: WorkflowConfig,
    files: list[FileReference] | None = None,
) -> CompletionRequest:
    """
    Build the completion request for the run's assistant turn.

    Only the user turn is sent as context; the backend streams the answer into
    the assistant slot injected by step 2.
    """
    chat_id = _require_chat_id(run)
    return CompletionRequest(
        chat_id=chat_id,
        message_id=run.assistant_message_id,
        messages=[run.user_message],
        model=config.model_name,
        stream=True,
        background_tasks=BackgroundTasks(
            title_generation=True,
            tags_generation=False,
            follow_up_generation=False,
        ),
        features=Features(),
        variables=CompletionVariables(
            user_name="",
            user_language=config.user_language,
            current_datetime=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            current_timezone=config.user_timezone,
        ),
        session_id=chat_id,
        files=files or None,
    )


async def create_chat_step(client: WebUIClient, run: ChatRun, config: WorkflowConfig) -> str:
    """
    Step 1: create the chat with the user turn as its only message.

    Returns:
        The chat ID assigned by the backend (also stored on the run)

    Raises:
        ResponseShapeError: If the response carries no chat ID
    """
    created = await client.call_api(
        "POST",
        NEW_CHAT_PATH,
        run.new_chat_payload(config),
        ChatCreatedResponse,
    )
    run.chat_id = created.id

    logger.info(
        "Chat created",
        extra={
            "step": WorkflowStep.CREATE_CHAT.value,
            "chat_id": run.chat_id,
            "user_message_id": run.user_message.id,
        },
    )
    return run.chat_id


async def update_chat_step(
    client: WebUIClient,
    run: ChatRun,
    config: WorkflowConfig,
    step: WorkflowStep,
) -> None:
    """
    Send the full chat document: both turns and the complete history map.

    Shared by step 2 (inject the empty assistant turn) and step 4 (refresh the
    assistant turn's model details).
    """
    chat_id = _require_chat_id(run)
    await client.call_api("POST", chat_path(chat_id), run.update_chat_payload(config))

    logger.info(
        f"Step {step.number}: {step.label} done",
        extra={
            "step": step.value,
            "chat_id": chat_id,
            "assistant_message_id": run.assistant_message_id,
        },
    )


async def inject_assistant_step(client: WebUIClient, run: ChatRun, config: WorkflowConfig) -> None:
    """Step 2: give the backend an empty assistant slot to stream into."""
    await update_chat_step(client, run, config, WorkflowStep.INJECT_ASSISTANT_MESSAGE)


async def update_model_details_step(
    client: WebUIClient, run: ChatRun, config: WorkflowConfig
) -> None:
    """Step 4: refresh the assistant turn's model metadata."""
    await update_chat_step(client, run, config, WorkflowStep.UPDATE_MODEL_DETAILS)


async def trigger_completion_step(
    client: WebUIClient,
    run: ChatRun,
    config: WorkflowConfig,
    files: list[FileReference] | None = None,
) -> None:
    """
    Step 3: ask the backend to generate the assistant content.

    Success only means the backend accepted the job. A run triggers its
    assistant turn at most once; a second call is refused before any request
    is sent, since resubmitting would start a second generation.

    Raises:
        CompletionAlreadyTriggeredError: If this run already triggered a completion
    """
    if run.completion_triggered:
        raise CompletionAlreadyTriggeredError(run.assistant_message_id)

    request = build_completion_request(run, config, files)
    run.completion_triggered = True
    await client.call_api("POST", COMPLETIONS_PATH, request)

    logger.info(
        "Completion triggered",
        extra={
            "step": WorkflowStep.TRIGGER_COMPLETION.value,
            "chat_id": run.chat_id,
            "assistant_message_id": run.assistant_message_id,
            "file_count": len(request.files or []),
        },
    )


async def mark_completed_step(client: WebUIClient, run: ChatRun, config: WorkflowConfig) -> None:
    """Step 5: tell the backend the completion is done (advisory bookkeeping)."""
    chat_id = _require_chat_id(run)
    await client.call_api(
        "POST",
        COMPLETED_PATH,
        CompletedRequest(
            chat_id=chat_id,
            message_id=run.assistant_message_id,
            model=config.model_name,
            session_id=chat_id,
        ),
    )

    logger.info(
        "Completion marked as done",
        extra={
            "step": WorkflowStep.MARK_COMPLETED.value,
            "chat_id": chat_id,
            "assistant_message_id": run.assistant_message_id,
        },
    )
