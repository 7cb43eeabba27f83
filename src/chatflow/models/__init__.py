"""
Data models for chatflow.

Open WebUI wire models, workflow state, tool service shapes and public API bodies.
"""

from chatflow.models.chains import ChatRun, WorkflowConfig, WorkflowResult, WorkflowStep
from chatflow.models.webui import (
    Chat,
    CompletedRequest,
    CompletionRequest,
    FileReference,
    History,
    Message,
)

__all__ = [
    "Chat",
    "ChatRun",
    "CompletedRequest",
    "CompletionRequest",
    "FileReference",
    "History",
    "Message",
    "WorkflowConfig",
    "WorkflowResult",
    "WorkflowStep",
]
