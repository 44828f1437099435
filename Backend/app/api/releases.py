import logging
import uuid
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.security import get_current_user
from app.models.user import User
from app.schemas.release import (
    ArtworkAttach,
    ChecklistItem,
    ChecklistResponse,
    ReleaseCreate,
    ReleaseDetailResponse,
    ReleaseResponse,
    ReleaseUpdate,
)
from app.schemas.split_share import SplitShareResponse
from app.schemas.track import TrackOrder, TrackResponse
from app.services.catalog_service import CatalogService
from app.services.database import get_db
from app.services.release_lifecycle import ReleaseLifecycleService
from app.services.track_service import TrackService


logger = logging.getLogger(__name__)


router = APIRouter()

@router.post("/releases", response_model=ReleaseResponse, status_code=status.HTTP_201_CREATED)
async def create_release(
    release_data: ReleaseCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a new release in DRAFT"""
    return await CatalogService(db).create_release(current_user, release_data)

@router.get("/releases", response_model=List[ReleaseResponse])
async def list_my_releases(
    limit: int = 50,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Releases of every organization the current user belongs to, newest first"""
    return await CatalogService(db).list_releases_for_user(current_user, limit=min(limit, 100))

@router.get("/releases/{release_id}", response_model=ReleaseDetailResponse)
async def read_release(
    release_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await CatalogService(db).get_release_for_read(current_user, release_id)

@router.patch("/releases/{release_id}", response_model=ReleaseResponse)
async def update_release(
    release_id: uuid.UUID,
    release_data: ReleaseUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Owner edit; only while the release is DRAFT or REJECTED"""
    return await CatalogService(db).update_release(current_user, release_id, release_data)

@router.put("/releases/{release_id}/artwork", response_model=ReleaseResponse)
async def attach_artwork(
    release_id: uuid.UUID,
    artwork: ArtworkAttach,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await CatalogService(db).attach_artwork(current_user, release_id, artwork)

@router.get("/releases/{release_id}/checklist", response_model=ChecklistResponse)
async def read_checklist(
    release_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """The pre-submission checklist, every check with its outcome"""
    results = await ReleaseLifecycleService(db).checklist(current_user, release_id)
    return ChecklistResponse(
        release_id=release_id,
        ready=all(r.passed for r in results),
        checks=[ChecklistItem.model_validate(r) for r in results],
    )

@router.post("/releases/{release_id}/submit", response_model=ReleaseResponse)
async def submit_release(
    release_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Send the release to quality control. Fails with every unmet checklist item."""
    logger.info(f"User {current_user.id} submitting release {release_id}")
    return await ReleaseLifecycleService(db).submit(current_user, release_id)

@router.get("/releases/{release_id}/tracks", response_model=List[TrackResponse])
async def list_release_tracks(
    release_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await TrackService(db).list_tracks(current_user, release_id)

@router.put("/releases/{release_id}/tracks/order", response_model=List[TrackResponse])
async def reorder_tracks(
    release_id: uuid.UUID,
    order: TrackOrder,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await TrackService(db).reorder_tracks(current_user, release_id, order.track_ids)

@router.get("/releases/{release_id}/splits", response_model=List[SplitShareResponse])
async def list_release_splits(
    release_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await TrackService(db).list_release_splits(current_user, release_id)
