from pydantic import BaseModel, Field
from typing import Literal, Optional

class PresignRequest(BaseModel):
    kind: Literal["artwork", "audio"]
    filename: str = Field(min_length=1)
    content_type: str = Field(min_length=1)
    size: int = Field(ge=0)
    # Required for artwork; the client reads them from the image before uploading
    width: Optional[int] = None
    height: Optional[int] = None

class PresignResponse(BaseModel):
    upload_url: str
    # Store this on the release/track once the upload has finished
    download_url: str
    key: str
    content_type: str
    original_filename: str
    size: int

class GeneratedUPC(BaseModel):
    upc: str

class GeneratedISRC(BaseModel):
    isrc: str
