import datetime
from pydantic import BaseModel, ConfigDict
from typing import Optional
from uuid import UUID

class QCItemResponse(BaseModel):
    id: UUID
    release_id: UUID
    track_id: Optional[UUID] = None
    severity: str
    message: str
    resolved: bool
    created_at: Optional[datetime.datetime] = None

    model_config = ConfigDict(from_attributes=True)
