"""
Chat workflow against the Open WebUI backend.

Exports the orchestrator, the completion poller and the individual steps.
"""

from chatflow.chains.polling import CompletionPoller, extract_assistant_content
from chatflow.chains.steps import (
    create_chat_step,
    inject_assistant_step,
    mark_completed_step,
    trigger_completion_step,
    update_model_details_step,
)
from chatflow.chains.workflow import ChatWorkflow

__all__ = [
    "ChatWorkflow",
    "CompletionPoller",
    "extract_assistant_content",
    "create_chat_step",
    "inject_assistant_step",
    "trigger_completion_step",
    "update_model_details_step",
    "mark_completed_step",
]
