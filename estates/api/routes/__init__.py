"""API routes."""

from fastapi import APIRouter

from estates.api.routes import auth, leads, notifications, public_queries, queries

api_router = APIRouter()

# Public routes (no auth required)
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(public_queries.router, prefix="/queries", tags=["queries"])

# Protected routes (admin required)
api_router.include_router(queries.router, prefix="/admin/queries", tags=["admin-queries"])
api_router.include_router(leads.router, prefix="/leads", tags=["leads"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
