"""
Open WebUI wire models.

Request and response bodies exchanged with the Open WebUI chat backend. Field
names follow the backend's JSON (camelCase where the backend uses it) through
aliases; payloads are always serialized with ``by_alias=True`` and
``exclude_none=True`` so optional fields are omitted rather than sent as null.

Response models only declare the fields this service reads.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Message(BaseModel):
    """A single chat turn as stored in the chat's message list and history map."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", protected_namespaces=())

    id: str
    role: str = ""
    content: str = ""
    timestamp: int = 0
    parent_id: str | None = Field(default=None, alias="parentId")
    model_name: str | None = Field(default=None, alias="modelName")
    model_idx: int | None = Field(default=None, alias="modelIdx")
    models: list[str] | None = None

    @field_validator("content", "role", mode="before")
    @classmethod
    def _none_as_empty(cls, value: object) -> object:
        return "" if value is None else value


class History(BaseModel):
    """Keyed-by-id snapshot of every turn plus a pointer to the current one."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    current_id: str | None = None
    messages: dict[str, Message] = Field(default_factory=dict)


class Chat(BaseModel):
    """Chat document; sent whole on create and on every update."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str | None = None
    title: str = ""
    models: list[str] = Field(default_factory=list)
    messages: list[Message] = Field(default_factory=list)
    tools: list[str] | None = None
    history: History = Field(default_factory=History)


class ChatEnvelope(BaseModel):
    """Body of the create and update chat calls: ``{"chat": {...}}``."""

    chat: Chat


class BackgroundTasks(BaseModel):
    title_generation: bool = True
    tags_generation: bool = False
    follow_up_generation: bool = False


class Features(BaseModel):
    code_interpreter: bool = False
    web_search: bool = False
    image_generation: bool = False
    memory: bool = False


class CompletionVariables(BaseModel):
    """Prompt template variables substituted by the backend."""

    model_config = ConfigDict(populate_by_name=True)

    user_name: str = Field(default="", alias="{{USER_NAME}}")
    user_language: str = Field(default="en-US", alias="{{USER_LANGUAGE}}")
    current_datetime: str = Field(alias="{{CURRENT_DATETIME}}")
    current_timezone: str = Field(default="Europe", alias="{{CURRENT_TIMEZONE}}")


class FileReference(BaseModel):
    """Supporting content attached to a completion: a knowledge collection or a file."""

    type: str
    id: str


class CompletionRequest(BaseModel):
    """Body of ``POST /api/chat/completions``. Built and submitted once per run."""

    model_config = ConfigDict(populate_by_name=True)

    chat_id: str
    message_id: str = Field(alias="id")
    messages: list[Message]
    model: str
    stream: bool = True
    background_tasks: BackgroundTasks = Field(default_factory=BackgroundTasks)
    features: Features = Field(default_factory=Features)
    variables: CompletionVariables
    session_id: str | None = None
    files: list[FileReference] | None = None


class CompletedRequest(BaseModel):
    """Body of ``POST /api/chat/completed``."""

    model_config = ConfigDict(populate_by_name=True)

    chat_id: str
    message_id: str = Field(alias="id")
    model: str
    session_id: str | None = None


class ChatCreatedResponse(BaseModel):
    """The only field read from the create chat response."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)


class FileUploadResponse(BaseModel):
    """The only field read from the file upload response."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)


class KnowledgeFileAddRequest(BaseModel):
    file_id: str
