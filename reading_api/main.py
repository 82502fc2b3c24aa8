"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from reading_api.api import analytics, bookmarks, progress, ratings, users
from reading_api.config import get_settings
from reading_api.errors import (
    EngagementError,
    database_error_handler,
    engagement_error_handler,
    http_exception_handler,
    request_validation_handler,
    unhandled_error_handler,
)

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    logger.info(f"Starting story reading API ({settings.environment})")
    yield
    logger.info("Shutting down story reading API")


app = FastAPI(
    title="Story Reading API",
    description="Reading progress, ratings, bookmarks and analytics for bilingual stories",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for development
if settings.is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://localhost:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Error envelope
app.add_exception_handler(EngagementError, engagement_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(SQLAlchemyError, database_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

# Register routers
app.include_router(progress.router)
app.include_router(users.router)
app.include_router(ratings.router)
app.include_router(bookmarks.router)
app.include_router(analytics.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
