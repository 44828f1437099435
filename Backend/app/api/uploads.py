import uuid
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.exceptions import NotFoundException
from app.core.security import get_current_user
from app.models.artist import Artist
from app.models.user import User
from app.schemas.upload import GeneratedISRC, GeneratedUPC, PresignRequest, PresignResponse
from app.services.catalog_service import CatalogService
from app.services.database import get_db
from app.services.identifiers import generate_isrc, generate_upc
from app.services.object_storage import create_presigned_upload

router = APIRouter()

@router.post("/upload/presign", response_model=PresignResponse)
async def presign_upload(
    request: PresignRequest,
    current_user: User = Depends(get_current_user),
):
    """
    Validate a file before it is uploaded and return a presigned PUT URL for it.
    The returned download_url is what gets attached to the release or track.
    """
    return create_presigned_upload(request, current_user.id)

@router.post("/generate-upc", response_model=GeneratedUPC)
async def generate_upc_code(
    artist_id: Optional[uuid.UUID] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Suggest a UPC, using the artist's prefix when one is given"""
    prefix = None
    if artist_id:
        artist = await db.get(Artist, artist_id)
        if not artist:
            raise NotFoundException("Artist", str(artist_id))
        await CatalogService(db).ensure_member(current_user, artist.org_id)
        prefix = artist.upc_prefix
    return GeneratedUPC(upc=generate_upc(prefix))

@router.post("/generate-isrc", response_model=GeneratedISRC)
async def generate_isrc_code(current_user: User = Depends(get_current_user)):
    return GeneratedISRC(isrc=generate_isrc())
