"""Reading progress API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from reading_api.api.dependencies import PageParams, get_current_user, get_progress_service
from reading_api.models import User
from reading_api.models.enums import ReadingStatus
from reading_api.schemas.common import Envelope
from reading_api.schemas.progress import (
    DeletedResponse,
    ProgressListResponse,
    ProgressResponse,
    ProgressUpdate,
)
from reading_api.services.progress_service import ProgressService

router = APIRouter(prefix="/api/v1/progress", tags=["progress"])


@router.get("", response_model=Envelope[ProgressListResponse])
def list_progress(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ProgressService, Depends(get_progress_service)],
    pages: Annotated[PageParams, Depends()],
    status: ReadingStatus | None = None,
):
    """List the current user's progress, most recently read first."""
    data = service.list_progress(current_user.id, status, pages.page, pages.limit)
    return {"success": True, "data": data}


@router.post("", response_model=Envelope[ProgressResponse])
def update_progress(
    update: ProgressUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ProgressService, Depends(get_progress_service)],
):
    """Create or update progress on a published story.

    Only the fields present in the body change.
    """
    progress = service.record_progress(current_user.id, update.story_id, update.supplied_fields())
    return {"success": True, "data": progress}


@router.get("/{story_id}", response_model=Envelope[ProgressResponse | None])
def get_progress(
    story_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ProgressService, Depends(get_progress_service)],
):
    """Get progress on a story; data is null if the user has not started it."""
    return {"success": True, "data": service.get_progress(current_user.id, story_id)}


@router.delete("/{story_id}", response_model=Envelope[DeletedResponse])
def delete_progress(
    story_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ProgressService, Depends(get_progress_service)],
):
    """Forget the user's progress on a story."""
    service.delete_progress(current_user.id, story_id)
    return {"success": True, "data": {"deleted": True}}
