"""Chat endpoints: start a chat workflow and fetch its result."""

import uuid

from fastapi import APIRouter, Depends, Query, Request, Response

from chatflow.api.dependencies import (
    get_settings,
    get_webui_client,
    get_workflow,
    verify_bearer_token,
)
from chatflow.api.limiter import limiter
from chatflow.chains.workflow import ChatWorkflow
from chatflow.config import Settings
from chatflow.models.api import ChatResultResponse, CreateChatRequest, CreateChatResponse
from chatflow.utils.errors import (
    ChatflowError,
    DocumentStagingError,
    ExternalServiceError,
    ValidationError,
)
from chatflow.utils.logging import get_logger
from chatflow.webui.client import WebUIClient
from chatflow.webui.knowledge import add_file_to_knowledge_collection

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["chat"])


@router.post("/chat", response_model=CreateChatResponse)
@limiter.limit("10/minute")
async def create_chat(
    request: Request,
    response: Response,
    body: CreateChatRequest,
    workflow: ChatWorkflow = Depends(get_workflow),
    client: WebUIClient = Depends(get_webui_client),
    settings: Settings = Depends(get_settings),
    token: dict = Depends(verify_bearer_token),
) -> CreateChatResponse:
    """
    Start a chat: create it, inject the assistant slot and trigger the completion.

    When ``content`` is supplied it is first ingested into ``knowledge_id`` and
    the resulting file is attached to the completion alongside the collection.
    The response carries the assistant message ID for ``GET .../result``.
    """
    if not body.prompt.strip():
        raise ValidationError("prompt must not be empty")

    knowledge_id = body.knowledge_id
    document_id = body.document_id

    logger.info(
        "Chat request",
        extra={
            "user": token.get("sub", "unknown"),
            "has_content": bool(body.content),
            "knowledge_id": knowledge_id,
        },
    )

    if body.content:
        if not knowledge_id:
            raise ValidationError("knowledge_id is required when providing content")
        filename = f"chat-content-{uuid.uuid4()}.md"
        try:
            document_id = await add_file_to_knowledge_collection(
                client, body.content, filename, knowledge_id, settings.temp_dir_path
            )
        except (ExternalServiceError, DocumentStagingError) as exc:
            raise ChatflowError(
                f"failed to add content to knowledge collection: {exc.message}",
                error_code="KNOWLEDGE_INGESTION_FAILED",
            ) from exc

    run = await workflow.start(body.prompt, knowledge_id=knowledge_id, document_id=document_id)

    return CreateChatResponse(
        chat_id=run.chat_id or "",
        status="chat process initiated",
        message_id=run.assistant_message_id,
    )


@router.get("/chat/{chat_id}/result", response_model=ChatResultResponse)
@limiter.limit("10/minute")
async def get_chat_result(
    request: Request,
    response: Response,
    chat_id: str,
    message_id: str = Query(min_length=1, description="Assistant message ID from POST /chat"),
    workflow: ChatWorkflow = Depends(get_workflow),
    token: dict = Depends(verify_bearer_token),
) -> ChatResultResponse:
    """
    Wait for the assistant's answer.

    Polls the chat on a fixed interval; answers 504 when the budget runs out.
    """
    content = await workflow.resolve(chat_id, message_id)
    return ChatResultResponse(chat_id=chat_id, message_id=message_id, content=content)
