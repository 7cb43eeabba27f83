#!/usr/bin/env python3
"""
One-shot console client for the chat workflow.

Runs the full protocol for a single question against Open WebUI (create chat,
inject assistant message, trigger completion, update model details, mark
completed, fetch result) and prints the assistant's answer.

Usage:
    python console_client.py "Who owns vehicle AB12CDE?"
    python console_client.py "Summarise the report" --knowledge-id kb-1
"""

import argparse
import asyncio
import sys

from chatflow.chains.workflow import ChatWorkflow
from chatflow.config import Settings
from chatflow.utils.errors import ChatflowError
from chatflow.utils.logging import setup_logging
from chatflow.webui.client import WebUIClient


async def ask(
    settings: Settings,
    question: str,
    knowledge_id: str | None = None,
    document_id: str | None = None,
) -> str:
    """Run every workflow step for ``question`` and return the assistant content."""
    async with WebUIClient(
        settings.webui_host_url,
        settings.webui_api_token,
        timeout=settings.webui_timeout,
    ) as client:
        workflow = ChatWorkflow(client, settings.workflow_config)
        result = await workflow.run(
            question,
            knowledge_id=knowledge_id,
            document_id=document_id,
            update_model_details=True,
            mark_completed=True,
            wait_for_result=True,
        )

    print(f"\n{'=' * 80}")
    print(f"CHAT ID: {result.chat_id}")
    print(f"ASSISTANT MESSAGE ID: {result.assistant_message_id}")
    print(f"{'=' * 80}\n")
    return result.content or ""


def main() -> int:
    parser = argparse.ArgumentParser(description="Ask Open WebUI a single question")
    parser.add_argument("question", help="Question put to the assistant")
    parser.add_argument("--knowledge-id", default=None, help="Knowledge collection to attach")
    parser.add_argument("--document-id", default=None, help="Uploaded file to attach")
    args = parser.parse_args()

    settings = Settings()
    setup_logging(settings)

    try:
        answer = asyncio.run(ask(settings, args.question, args.knowledge_id, args.document_id))
    except ChatflowError as exc:
        print(f"ERROR: {exc.message}", file=sys.stderr)
        return 1

    print(answer)
    return 0


if __name__ == "__main__":
    sys.exit(main())
