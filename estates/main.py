"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from estates.api.middleware import RequestIdMiddleware
from estates.api.routes import api_router
from estates.core.errors import (
    EstatesError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from estates.logging_config import setup_logging
from estates.persistence.database import AsyncSessionLocal, engine
from estates.settings import settings
from estates.workers.notification_dispatcher import NotificationDispatcher

# Setup logging
setup_logging()

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    ValidationError: 400,
    NotFoundError: 404,
    PersistenceError: 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    dispatcher = NotificationDispatcher(AsyncSessionLocal)
    app.state.notification_dispatcher = dispatcher
    logger.info(f"{settings.app_name} API starting, environment={settings.environment}")

    yield

    # Shutdown: let in-flight notifications finish before the pool goes away
    await dispatcher.drain()
    await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title=f"{settings.app_name} API",
    description="Admin backend for property enquiries, leads and follow-ups",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request id middleware
app.add_middleware(RequestIdMiddleware)


@app.exception_handler(EstatesError)
async def estates_error_handler(request: Request, exc: EstatesError) -> JSONResponse:
    """Render domain errors as {"success": false, "message": ...}."""
    status_code = ERROR_STATUS_CODES.get(type(exc), 500)
    if status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}", exc_info=exc)
    return JSONResponse(status_code=status_code, content={"success": False, "message": exc.message})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Unexpected store failures become a generic 500."""
    logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"success": False, "message": "Database error"})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render auth, permission and routing errors in the same envelope as domain errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


# Include API routes
app.include_router(api_router, prefix=settings.api_v1_prefix)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": f"{settings.app_name} API",
        "version": "0.1.0",
        "docs": "/docs",
    }
