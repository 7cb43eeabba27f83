"""
chatflow - chat workflow relay for Open WebUI
"""

__version__ = "0.1.0"

from chatflow.config import Settings
from chatflow.main import create_app

__all__ = ["Settings", "create_app", "__version__"]
