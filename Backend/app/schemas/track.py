from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from typing import Annotated, Any, List, Optional
from uuid import UUID

from app.services.identifiers import normalize_isrc

ISRC = Annotated[str, AfterValidator(normalize_isrc)]


class TrackBase(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    isrc: Optional[ISRC] = None
    explicit: bool = False
    lyrics: Optional[str] = None
    version: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0)
    participants: Optional[Any] = None  # opaque contributor list

class TrackCreate(TrackBase):
    release_id: UUID

class TrackUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    isrc: Optional[ISRC] = None
    explicit: Optional[bool] = None
    lyrics: Optional[str] = None
    version: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0)
    participants: Optional[Any] = None

class TrackAudioAttach(BaseModel):
    audio_url: str = Field(min_length=1)
    original_name: str
    content_type: Optional[str] = None
    size: int = Field(ge=0)
    duration: Optional[int] = Field(default=None, ge=0)

class TrackOrder(BaseModel):
    # Every track of the release, in the new order
    track_ids: List[UUID]

class TrackResponse(TrackBase):
    id: UUID
    release_id: UUID
    isrc: Optional[str] = None
    track_index: int
    audio_url: Optional[str] = None
    audio_original_name: Optional[str] = None
    audio_size: Optional[int] = None
    status: str

    model_config = ConfigDict(from_attributes=True)
