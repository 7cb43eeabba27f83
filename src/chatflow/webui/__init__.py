"""Open WebUI backend access: HTTP client and knowledge ingestion."""

from chatflow.webui.client import WebUIClient
from chatflow.webui.knowledge import add_file_to_knowledge_collection

__all__ = ["WebUIClient", "add_file_to_knowledge_collection"]
