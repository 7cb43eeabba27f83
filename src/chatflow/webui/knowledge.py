"""
Knowledge collection ingestion.

Stages supporting content as a markdown file, uploads it to Open WebUI and adds
the uploaded file to a knowledge collection so completions can reference it.
Every call stages into its own temporary file, so concurrent uploads that share
a name never touch each other's content.
"""

import os
import tempfile
from pathlib import Path

from chatflow.models.webui import FileUploadResponse, KnowledgeFileAddRequest
from chatflow.utils.errors import DocumentStagingError, ValidationError
from chatflow.utils.logging import get_logger
from chatflow.webui.client import WebUIClient

logger = get_logger(__name__)

FILES_PATH = "/api/v1/files/"
STAGING_PREFIX = "upload-"


def knowledge_file_add_path(knowledge_id: str) -> str:
    return f"/api/v1/knowledge/{knowledge_id}/file/add"


def upload_name(filename: str) -> str:
    """Return the base name of ``filename``; ``""`` for names with no usable part."""
    name = Path(filename).name
    if name in ("", ".", ".."):
        return ""
    return name


def stage_document(data: bytes, staging_dir: Path, suffix: str) -> Path:
    """Write ``data`` to a new uniquely named file in ``staging_dir``."""
    staging_dir.mkdir(parents=True, exist_ok=True)
    fd, staged_name = tempfile.mkstemp(prefix=STAGING_PREFIX, suffix=suffix, dir=staging_dir)
    staged_file = Path(staged_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
    except OSError:
        staged_file.unlink(missing_ok=True)
        raise
    return staged_file


async def add_file_to_knowledge_collection(
    client: WebUIClient,
    content: str | bytes,
    filename: str,
    knowledge_id: str,
    temp_dir: str | Path,
) -> str:
    """
    Upload ``content`` as ``filename`` and add it to a knowledge collection.

    Args:
        client: Open WebUI client
        content: Document body (text is written as UTF-8)
        filename: Name the uploaded file carries; any directory part is ignored
        knowledge_id: Target knowledge collection ID
        temp_dir: Directory used to stage the file; created if missing

    Returns:
        ID of the uploaded file

    Raises:
        ValidationError: If knowledge_id or filename is empty
        DocumentStagingError: If the staging file cannot be written or read
        ExternalServiceError: If the upload or the collection update fails
    """
    if not knowledge_id:
        raise ValidationError("knowledge_id is required when providing content")

    name = upload_name(filename)
    if not name:
        raise ValidationError("filename is required")

    data = content.encode("utf-8") if isinstance(content, str) else content
    try:
        staged_file = stage_document(data, Path(temp_dir), Path(name).suffix)
    except OSError as exc:
        logger.error("Failed to stage document", extra={"upload_name": name, "error": str(exc)})
        raise DocumentStagingError(exc) from exc

    logger.debug(
        "Staged document for upload",
        extra={"staged_file": str(staged_file), "size_bytes": len(data)},
    )

    try:
        uploaded = await client.upload_file(
            FILES_PATH, staged_file, FileUploadResponse, filename=name
        )
        logger.info("File uploaded", extra={"file_id": uploaded.id, "upload_name": name})

        await client.call_api(
            "POST",
            knowledge_file_add_path(knowledge_id),
            KnowledgeFileAddRequest(file_id=uploaded.id),
        )
    except OSError as exc:
        raise DocumentStagingError(exc) from exc
    finally:
        staged_file.unlink(missing_ok=True)

    logger.info(
        "File added to knowledge collection",
        extra={"file_id": uploaded.id, "knowledge_id": knowledge_id},
    )
    return uploaded.id
