# In app/schemas/release.py
import datetime
from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from typing import Annotated, Any, List, Optional
from uuid import UUID

from app.core.territories import normalize_territories
from app.models.release import ReleaseStatus, ReleaseType
from app.services.identifiers import is_valid_upc
from .artist import ArtistResponse
from .track import TrackResponse
from .split_share import SplitShareResponse
from .qc_item import QCItemResponse
from .delivery_job import DeliveryJobResponse


def _check_upc(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not is_valid_upc(value):
        raise ValueError("UPC must be 12 digits with a valid check digit")
    return value


def _to_utc(value: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
    # Stored as naive UTC so every backend compares the same instant.
    if value is not None and value.tzinfo is not None:
        value = value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return value


UPC = Annotated[str, AfterValidator(_check_upc)]
Territories = Annotated[List[str], AfterValidator(normalize_territories)]
UTCDateTime = Annotated[datetime.datetime, AfterValidator(_to_utc)]
ReleaseTime = Annotated[str, Field(pattern=r"^([01]\d|2[0-3]):[0-5]\d$")]


class Performer(BaseModel):
    name: str
    role: Optional[str] = None


class ReleaseBase(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    primary_genre: Optional[str] = None
    secondary_genre: Optional[str] = None
    language: Optional[str] = None
    album_version: Optional[str] = None
    original_release_date: Optional[UTCDateTime] = None
    release_date: Optional[UTCDateTime] = None
    release_time: Optional[ReleaseTime] = None
    sub_label: Optional[str] = None
    territories: Territories = []
    rights_owner: Optional[str] = None
    label_name: Optional[str] = None
    p_copyright: Optional[str] = None
    performers: Optional[List[Performer]] = None


class ReleaseCreate(ReleaseBase):
    type: ReleaseType
    upc: Optional[UPC] = None
    # Both default to the caller's first organization / the org's first artist
    org_id: Optional[UUID] = None
    artist_id: Optional[UUID] = None


class ReleaseUpdate(BaseModel):
    """Owner edits while the release is still a draft (or was rejected)."""
    model_config = ConfigDict(extra="forbid")

    type: Optional[ReleaseType] = None
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    upc: Optional[UPC] = None
    primary_genre: Optional[str] = None
    secondary_genre: Optional[str] = None
    language: Optional[str] = None
    album_version: Optional[str] = None
    original_release_date: Optional[UTCDateTime] = None
    release_date: Optional[UTCDateTime] = None
    release_time: Optional[ReleaseTime] = None
    sub_label: Optional[str] = None
    territories: Optional[Territories] = None
    rights_owner: Optional[str] = None
    label_name: Optional[str] = None
    p_copyright: Optional[str] = None
    performers: Optional[List[Performer]] = None


class AdminReleaseUpdate(BaseModel):
    """
    The only fields an administrator may change. Anything else in the payload
    is a validation error rather than being dropped.
    """
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    upc: Optional[UPC] = None
    primary_genre: Optional[str] = None
    secondary_genre: Optional[str] = None
    language: Optional[str] = None
    album_version: Optional[str] = None
    original_release_date: Optional[UTCDateTime] = None
    release_date: Optional[UTCDateTime] = None
    release_time: Optional[ReleaseTime] = None
    sub_label: Optional[str] = None
    status: Optional[ReleaseStatus] = None
    territories: Optional[Territories] = None
    label_name: Optional[str] = None
    p_copyright: Optional[str] = None


class ArtworkAttach(BaseModel):
    artwork_url: str = Field(min_length=1)
    original_name: str
    content_type: Optional[str] = None
    size: int = Field(ge=0)
    width: int
    height: int


class ReleaseRejectRequest(BaseModel):
    reason: Optional[str] = None


class ReleaseResponse(BaseModel):
    id: UUID
    org_id: UUID
    artist_id: UUID
    type: ReleaseType
    title: str
    upc: Optional[str] = None
    primary_genre: Optional[str] = None
    secondary_genre: Optional[str] = None
    language: Optional[str] = None
    album_version: Optional[str] = None
    original_release_date: Optional[datetime.datetime] = None
    release_date: Optional[datetime.datetime] = None
    release_time: Optional[str] = None
    sub_label: Optional[str] = None
    status: ReleaseStatus
    territories: List[str] = []
    rights_owner: Optional[str] = None
    artwork_url: Optional[str] = None
    artwork_original_name: Optional[str] = None
    artwork_size: Optional[int] = None
    artwork_width: Optional[int] = None
    artwork_height: Optional[int] = None
    label_name: Optional[str] = None
    p_copyright: Optional[str] = None
    performers: Optional[List[Any]] = None
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ReleaseDetailResponse(ReleaseResponse):
    # These will automatically include the nested objects in the API response
    artist: Optional[ArtistResponse] = None
    tracks: List[TrackResponse] = []
    split_shares: List[SplitShareResponse] = []
    qc_items: List[QCItemResponse] = []
    delivery_jobs: List[DeliveryJobResponse] = []


class ChecklistItem(BaseModel):
    id: str
    label: str
    passed: bool
    message: str = ""

    model_config = ConfigDict(from_attributes=True)


class ChecklistResponse(BaseModel):
    release_id: UUID
    ready: bool
    checks: List[ChecklistItem]
