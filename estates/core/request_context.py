"""Request-scoped context variables used for log correlation."""

from contextvars import ContextVar
from typing import Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
user_id_var: ContextVar[Optional[int]] = ContextVar("user_id", default=None)


def set_request_id(request_id: str | None) -> None:
    """Set the current request id."""
    request_id_var.set(request_id)


def get_request_id() -> str | None:
    """Get the current request id."""
    return request_id_var.get()


def set_user_id(user_id: int | None) -> None:
    """Set the authenticated user id for the current request."""
    user_id_var.set(user_id)


def get_user_id() -> int | None:
    """Get the authenticated user id for the current request."""
    return user_id_var.get()


def clear_request_context() -> None:
    """Clear the current request context."""
    request_id_var.set(None)
    user_id_var.set(None)
