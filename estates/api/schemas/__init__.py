"""API schemas package."""

from estates.api.schemas.common import MessageResponse, Pagination, UserSummary

__all__ = [
    "MessageResponse",
    "Pagination",
    "UserSummary",
]
