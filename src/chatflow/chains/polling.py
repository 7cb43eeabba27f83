"""
Completion polling.

The backend streams the assistant content asynchronously after a completion is
triggered, so the content only appears in the stored chat some time later.
CompletionPoller fetches the chat until the assistant turn is present, has the
assistant role and carries non-empty content.

Each unmet condition is reported as a ChatNotReadyError with its own
NotReadyReason and retried on a fixed interval. Exhausting the attempt budget
raises PollTimeoutError. Hard failures (connection, non-2xx, malformed body)
are not retried.
"""

import logging

from pydantic import TypeAdapter
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from chatflow.chains.steps import chat_path
from chatflow.models.chains import WorkflowConfig
from chatflow.models.webui import Chat
from chatflow.utils.errors import ChatNotReadyError, NotReadyReason, PollTimeoutError
from chatflow.utils.logging import get_logger
from chatflow.webui.client import WebUIClient

logger = get_logger(__name__)

_CHAT_LIST = TypeAdapter(list[Chat])


def extract_assistant_content(chats: list[Chat], assistant_message_id: str) -> str:
    """
    Read the assistant content out of one fetched chat state.

    Raises:
        ChatNotReadyError: With the reason the content is not available yet
    """
    if not chats:
        raise ChatNotReadyError(NotReadyReason.EMPTY_RESPONSE)

    message = chats[0].history.messages.get(assistant_message_id)
    if message is None:
        raise ChatNotReadyError(NotReadyReason.MESSAGE_MISSING)

    if message.role != "assistant":
        raise ChatNotReadyError(NotReadyReason.WRONG_ROLE)

    if not message.content:
        raise ChatNotReadyError(NotReadyReason.EMPTY_CONTENT)

    return message.content


class CompletionPoller:
    """Waits for the assistant content of a triggered completion."""

    def __init__(
        self,
        client: WebUIClient,
        interval: float = 1.0,
        max_attempts: int = 15,
    ) -> None:
        """
        Initialize the poller.

        Args:
            client: Open WebUI client
            interval: Seconds to wait between fetches
            max_attempts: Number of fetches before giving up
        """
        self.client = client
        self.interval = interval
        self.max_attempts = max_attempts

    @classmethod
    def from_config(cls, client: WebUIClient, config: WorkflowConfig) -> "CompletionPoller":
        return cls(client, interval=config.poll_interval, max_attempts=config.max_poll_attempts)

    async def fetch_once(self, chat_id: str, assistant_message_id: str) -> str:
        """
        Fetch the chat once and return the assistant content if it is ready.

        Raises:
            ChatNotReadyError: If the content is not available yet
            ExternalServiceError: If the fetch itself fails
        """
        chats = await self.client.call_api("GET", chat_path(chat_id), response_type=_CHAT_LIST)
        return extract_assistant_content(chats, assistant_message_id)

    async def wait_for_content(self, chat_id: str, assistant_message_id: str) -> str:
        """
        Poll until the assistant content is available.

        Returns:
            The assistant message content

        Raises:
            PollTimeoutError: If max_attempts fetches all came back not ready
            ExternalServiceError: If a fetch fails outright
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.interval),
            retry=retry_if_exception_type(ChatNotReadyError),
            before_sleep=before_sleep_log(logger, logging.DEBUG),
        )

        try:
            content = await retrying(self.fetch_once, chat_id, assistant_message_id)
        except RetryError as exc:
            last_error = exc.last_attempt.exception()
            last_reason = last_error.reason if isinstance(last_error, ChatNotReadyError) else None
            logger.warning(
                "Polling budget exhausted",
                extra={
                    "chat_id": chat_id,
                    "assistant_message_id": assistant_message_id,
                    "attempts": self.max_attempts,
                    "last_reason": last_reason.value if last_reason else None,
                },
            )
            raise PollTimeoutError(self.max_attempts, last_reason) from last_error

        attempts = retrying.statistics.get("attempt_number", 1)
        logger.info(
            "Assistant content received",
            extra={
                "chat_id": chat_id,
                "assistant_message_id": assistant_message_id,
                "attempts": attempts,
                "content_length": len(content),
            },
        )
        return content
