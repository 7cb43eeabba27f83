"""
User context management using contextvars for async-safe user tracking.

The user_id is extracted from the JWT sub claim at the authentication boundary
and picked up by the JSON log formatter for every subsequent log entry.
"""

from contextvars import ContextVar

_user_context_var: ContextVar[str | None] = ContextVar("user_context", default=None)


def set_user_context(user_id: str) -> None:
    """
    Set the current user ID in context for automatic propagation.

    Args:
        user_id: The user identifier to store (typically from JWT sub claim)
    """
    _user_context_var.set(user_id)


def get_user_context() -> str | None:
    """
    Get the current user ID from context.

    Returns:
        The stored user ID (from JWT sub claim), or None if not set
    """
    return _user_context_var.get()
