import uuid
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import get_current_user
from app.models.user import User
from app.schemas.split_share import SplitShareCreate, SplitShareResponse
from app.schemas.track import TrackAudioAttach, TrackCreate, TrackResponse, TrackUpdate
from app.services.database import get_db
from app.services.track_service import TrackService

router = APIRouter()

@router.post("/tracks", response_model=TrackResponse, status_code=status.HTTP_201_CREATED)
async def create_track(
    track_data: TrackCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Append a track to the end of a release"""
    return await TrackService(db).create_track(current_user, track_data)

@router.get("/tracks/{track_id}", response_model=TrackResponse)
async def read_track(
    track_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await TrackService(db).get_track_for_read(current_user, track_id)

@router.patch("/tracks/{track_id}", response_model=TrackResponse)
async def update_track(
    track_id: uuid.UUID,
    track_data: TrackUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await TrackService(db).update_track(current_user, track_id, track_data)

@router.put("/tracks/{track_id}/audio", response_model=TrackResponse)
async def attach_audio(
    track_id: uuid.UUID,
    audio: TrackAudioAttach,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await TrackService(db).attach_audio(current_user, track_id, audio)

@router.delete("/tracks/{track_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_track(
    track_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Remove a track; the ones after it move up"""
    await TrackService(db).delete_track(current_user, track_id)


@router.post("/splits", response_model=SplitShareResponse, status_code=status.HTTP_201_CREATED)
async def create_split(
    split_data: SplitShareCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await TrackService(db).create_split(current_user, split_data)

@router.delete("/splits/{split_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_split(
    split_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await TrackService(db).delete_split(current_user, split_id)
