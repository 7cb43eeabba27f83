"""File ingestion endpoint."""

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile

from chatflow.api.dependencies import get_settings, get_webui_client, verify_bearer_token
from chatflow.api.limiter import limiter
from chatflow.config import Settings
from chatflow.models.api import FileUploadResult
from chatflow.utils.errors import ValidationError
from chatflow.utils.logging import get_logger
from chatflow.webui.client import WebUIClient
from chatflow.webui.knowledge import add_file_to_knowledge_collection

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["files"])


@router.post("/files", response_model=FileUploadResult)
@limiter.limit("30/minute")
async def add_file(
    request: Request,
    response: Response,
    file: UploadFile | None = File(default=None),
    knowledge_id: str | None = Form(default=None, alias="knowledgeID"),
    client: WebUIClient = Depends(get_webui_client),
    settings: Settings = Depends(get_settings),
    token: dict = Depends(verify_bearer_token),
) -> FileUploadResult:
    """Upload a document and add it to the ``knowledgeID`` collection."""
    if file is None:
        raise ValidationError("Error Retrieving the File")
    if not knowledge_id:
        raise ValidationError("knowledgeID is required")

    try:
        content = await file.read()
    finally:
        await file.close()

    logger.info(
        "File upload request",
        extra={"upload_name": file.filename, "size_bytes": len(content), "knowledge_id": knowledge_id},
    )

    file_id = await add_file_to_knowledge_collection(
        client,
        content,
        file.filename or "upload.md",
        knowledge_id,
        settings.temp_dir_path,
    )
    return FileUploadResult(file_id=file_id)
