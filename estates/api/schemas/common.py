"""Schemas shared across routes."""

import math

from pydantic import BaseModel


class Pagination(BaseModel):
    """Page metadata for list endpoints."""

    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        page = max(1, page)
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)


class UserSummary(BaseModel):
    """Minimal user reference embedded in other responses."""

    id: int
    name: str
    email: str

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    success: bool = True
    message: str
