from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from uuid import UUID

class ArtistBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    upc_prefix: Optional[str] = Field(default=None, pattern=r"^\d{1,11}$")

class ArtistCreate(ArtistBase):
    org_id: UUID

class ArtistResponse(ArtistBase): # Named to match the import in release.py
    id: UUID
    org_id: UUID

    model_config = ConfigDict(from_attributes=True)
