"""FastAPI dependencies for authentication, database and services."""

from typing import Annotated

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from reading_api.config import get_settings
from reading_api.database import get_db
from reading_api.errors import ForbiddenError
from reading_api.models import User
from reading_api.services.analytics_service import AnalyticsService
from reading_api.services.auth import decode_access_token, get_user_by_id
from reading_api.services.bookmark_service import BookmarkService
from reading_api.services.progress_service import ProgressService
from reading_api.services.rating_service import RatingService

security = HTTPBearer(auto_error=False)
settings = get_settings()


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(credentials.credentials)
    user_id = payload.get("sub") if payload else None
    if user_id is None or not str(user_id).isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = get_user_by_id(db, int(user_id))
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def get_admin_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Require an administrator."""
    if not current_user.is_admin:
        raise ForbiddenError("Administrator access required")
    return current_user


class PageParams:
    """Page number and size query parameters."""

    def __init__(
        self,
        page: Annotated[int, Query(ge=1)] = 1,
        limit: Annotated[int | None, Query(ge=1, le=settings.max_page_size)] = None,
    ):
        self.page = page
        self.limit = limit or settings.default_page_size


def get_progress_service(
    db: Annotated[Session, Depends(get_db)],
) -> ProgressService:
    """Get progress service with dependencies."""
    return ProgressService(db)


def get_rating_service(
    db: Annotated[Session, Depends(get_db)],
) -> RatingService:
    """Get rating service with dependencies."""
    return RatingService(db)


def get_bookmark_service(
    db: Annotated[Session, Depends(get_db)],
) -> BookmarkService:
    """Get bookmark service with dependencies."""
    return BookmarkService(db)


def get_analytics_service(
    db: Annotated[Session, Depends(get_db)],
) -> AnalyticsService:
    """Get analytics service with dependencies."""
    return AnalyticsService(db)
