"""Bookmark API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from reading_api.api.dependencies import PageParams, get_bookmark_service, get_current_user
from reading_api.models import User
from reading_api.schemas.bookmark import (
    BookmarkListResponse,
    BookmarkStatusResponse,
    BookmarkToggle,
)
from reading_api.schemas.common import Envelope
from reading_api.schemas.progress import DeletedResponse
from reading_api.services.bookmark_service import BookmarkService

router = APIRouter(prefix="/api/v1/bookmarks", tags=["bookmarks"])


@router.get("", response_model=Envelope[BookmarkListResponse])
def list_bookmarks(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[BookmarkService, Depends(get_bookmark_service)],
    pages: Annotated[PageParams, Depends()],
):
    """List the user's bookmarks, newest first."""
    data = service.list_bookmarks(current_user.id, pages.page, pages.limit)
    return {"success": True, "data": data}


@router.post("/toggle", response_model=Envelope[BookmarkStatusResponse])
def toggle_bookmark(
    body: BookmarkToggle,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[BookmarkService, Depends(get_bookmark_service)],
):
    """Bookmark a published story, or remove the bookmark if present."""
    return {"success": True, "data": service.toggle_bookmark(current_user.id, body.story_id)}


@router.get("/{story_id}", response_model=Envelope[BookmarkStatusResponse])
def get_bookmark_status(
    story_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[BookmarkService, Depends(get_bookmark_service)],
):
    return {"success": True, "data": service.bookmark_status(current_user.id, story_id)}


@router.delete("/{story_id}", response_model=Envelope[DeletedResponse])
def remove_bookmark(
    story_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[BookmarkService, Depends(get_bookmark_service)],
):
    """Remove a bookmark."""
    service.remove_bookmark(current_user.id, story_id)
    return {"success": True, "data": {"deleted": True}}
