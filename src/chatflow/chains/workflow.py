"""
Chat workflow orchestration.

ChatWorkflow sequences the step functions for one conversation:

    create chat -> inject assistant message -> trigger completion
        [-> update model details] [-> mark completed] [-> fetch result]

Steps run strictly in order, each awaiting its HTTP round trip before the next
starts. The first failure aborts the run and is raised as WorkflowStepError,
whose message names the failed step. Nothing is retried except the fetch step,
which polls within its attempt budget.

Every call to ``run`` starts a fresh ChatRun, so concurrent runs on the same
ChatWorkflow instance never share message state.
"""

import time
from collections.abc import Awaitable
from typing import TypeVar

from chatflow.chains.polling import CompletionPoller
from chatflow.chains.steps import (
    build_file_references,
    create_chat_step,
    inject_assistant_step,
    mark_completed_step,
    trigger_completion_step,
    update_model_details_step,
)
from chatflow.models.chains import ChatRun, WorkflowConfig, WorkflowResult, WorkflowStep
from chatflow.utils.errors import ChatflowError, ValidationError, WorkflowStepError
from chatflow.utils.logging import get_logger
from chatflow.webui.client import WebUIClient

logger = get_logger(__name__)

T = TypeVar("T")


class ChatWorkflow:
    """Runs the chat protocol against Open WebUI on behalf of a caller."""

    def __init__(
        self,
        client: WebUIClient,
        config: WorkflowConfig,
        poller: CompletionPoller | None = None,
    ) -> None:
        self.client = client
        self.config = config
        self.poller = poller or CompletionPoller.from_config(client, config)

    async def _execute(self, step: WorkflowStep, run: ChatRun, call: Awaitable[T]) -> T:
        """Await one step, converting any failure into a WorkflowStepError."""
        logger.debug(
            f"Step {step.number}: {step.label}",
            extra={"step": step.value, "chat_id": run.chat_id},
        )
        try:
            return await call
        except (ChatflowError, ValueError) as exc:
            logger.error(
                f"Workflow step failed: {step.label}",
                extra={
                    "step": step.value,
                    "chat_id": run.chat_id,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            raise WorkflowStepError(step, exc) from exc

    def new_run(self, prompt: str) -> ChatRun:
        """
        Start a run for ``prompt``.

        Raises:
            ValidationError: If the prompt is blank
        """
        question = prompt.strip()
        if not question:
            raise ValidationError("prompt must not be empty")
        return ChatRun.start(question, self.config)

    async def start(
        self,
        prompt: str,
        knowledge_id: str | None = None,
        document_id: str | None = None,
    ) -> ChatRun:
        """
        Run steps 1-3: create the chat, inject the assistant slot, trigger completion.

        Args:
            prompt: The user's question
            knowledge_id: Optional knowledge collection to attach to the completion
            document_id: Optional uploaded file to attach to the completion

        Returns:
            The run, with chat_id set and the completion triggered

        Raises:
            ValidationError: If the prompt is blank
            WorkflowStepError: If any step fails
        """
        run = self.new_run(prompt)
        await self._execute(
            WorkflowStep.CREATE_CHAT, run, create_chat_step(self.client, run, self.config)
        )
        await self._execute(
            WorkflowStep.INJECT_ASSISTANT_MESSAGE,
            run,
            inject_assistant_step(self.client, run, self.config),
        )
        files = build_file_references(knowledge_id, document_id)
        await self._execute(
            WorkflowStep.TRIGGER_COMPLETION,
            run,
            trigger_completion_step(self.client, run, self.config, files),
        )
        return run

    async def fetch_result(self, run: ChatRun) -> str:
        """Poll for the run's assistant content (step 6)."""
        return await self._execute(
            WorkflowStep.FETCH_RESULT,
            run,
            self.poller.wait_for_content(run.chat_id or "", run.assistant_message_id),
        )

    async def run(
        self,
        prompt: str,
        knowledge_id: str | None = None,
        document_id: str | None = None,
        update_model_details: bool = False,
        mark_completed: bool = False,
        wait_for_result: bool = False,
    ) -> WorkflowResult:
        """
        Execute the workflow for one prompt.

        Steps 1-3 always run. The optional flags add the model-details update,
        the completed marker and the result fetch, in that order.

        Returns:
            WorkflowResult with the chat and message IDs, and the assistant
            content when wait_for_result is set
        """
        start_time = time.time()
        run = await self.start(prompt, knowledge_id=knowledge_id, document_id=document_id)

        if update_model_details:
            await self._execute(
                WorkflowStep.UPDATE_MODEL_DETAILS,
                run,
                update_model_details_step(self.client, run, self.config),
            )

        if mark_completed:
            await self._execute(
                WorkflowStep.MARK_COMPLETED,
                run,
                mark_completed_step(self.client, run, self.config),
            )

        content = None
        if wait_for_result:
            content = await self.fetch_result(run)

        logger.info(
            "Workflow run completed",
            extra={
                "chat_id": run.chat_id,
                "assistant_message_id": run.assistant_message_id,
                "waited_for_result": wait_for_result,
                "elapsed_seconds": time.time() - start_time,
            },
        )

        return WorkflowResult(
            chat_id=run.chat_id or "",
            user_message_id=run.user_message.id,
            assistant_message_id=run.assistant_message_id,
            status="completed" if content is not None else "chat process initiated",
            content=content,
        )

    async def resolve(self, chat_id: str, assistant_message_id: str) -> str:
        """
        Poll a previously started chat for its assistant content.

        Usable on its own after ``start`` returned, e.g. from a separate request.

        Raises:
            PollTimeoutError: If the content did not appear within the budget
            ExternalServiceError: If a fetch fails outright
        """
        return await self.poller.wait_for_content(chat_id, assistant_message_id)
