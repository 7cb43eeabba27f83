"""Request and response bodies of the public /api/v1 endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class CreateChatRequest(BaseModel):
    """Start a chat, optionally with supporting content for a knowledge collection."""

    prompt: str = Field(min_length=1, description="Question put to the assistant")
    content: str | None = Field(
        default=None,
        description="Supporting document content; ingested into knowledge_id first",
    )
    knowledge_id: str | None = Field(default=None, description="Knowledge collection ID")
    document_id: str | None = Field(default=None, description="Already uploaded file ID")


class CreateChatResponse(BaseModel):
    chat_id: str
    status: str
    message_id: str = Field(description="Assistant message ID to poll for the answer")


class ChatResultResponse(BaseModel):
    chat_id: str
    message_id: str
    content: str


class FileUploadResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(serialization_alias="fileID")


class ProcessImageBody(BaseModel):
    image_base64: str


class RegistrationResult(BaseModel):
    registration_id: str


class VehicleLookupRequest(BaseModel):
    registration_id: str


class VehicleLookupResponse(BaseModel):
    owner_id: str
