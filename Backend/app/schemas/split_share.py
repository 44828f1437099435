import datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from typing import Optional
from uuid import UUID

class SplitShareCreate(BaseModel):
    release_id: Optional[UUID] = None
    track_id: Optional[UUID] = None
    email: EmailStr
    percent: Decimal = Field(gt=0, le=100, max_digits=5, decimal_places=2)
    role: Optional[str] = None

    @model_validator(mode="after")
    def _needs_a_target(self):
        if self.release_id is None and self.track_id is None:
            raise ValueError("A split must reference a release or a track")
        return self

class SplitShareResponse(BaseModel):
    id: UUID
    release_id: Optional[UUID] = None
    track_id: Optional[UUID] = None
    user_id: Optional[UUID] = None
    email: str
    percent: Decimal
    role: Optional[str] = None
    created_at: Optional[datetime.datetime] = None

    model_config = ConfigDict(from_attributes=True)
