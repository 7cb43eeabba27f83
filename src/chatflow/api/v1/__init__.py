"""Version 1 API routers."""

from chatflow.api.v1.chat import router as chat_router
from chatflow.api.v1.files import router as files_router
from chatflow.api.v1.tools import router as tools_router

__all__ = ["chat_router", "files_router", "tools_router"]
