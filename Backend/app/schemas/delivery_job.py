from pydantic import BaseModel, ConfigDict
import uuid
from typing import Literal, Optional, Any
from datetime import datetime

# Properties the delivery worker reports back; a job never returns to PENDING
class DeliveryJobUpdate(BaseModel):
    status: Literal["SENT", "FAILED"]
    response: Optional[dict] = None

# Properties to return to client
class DeliveryJobResponse(BaseModel):
    id: uuid.UUID
    release_id: uuid.UUID
    target: str
    status: str
    payload: Optional[Any] = None
    response: Optional[Any] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
