import uuid
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.core.security import get_current_user
from app.models.user import User
from app.schemas.artist import ArtistCreate, ArtistResponse
from app.schemas.organization import (
    OrganizationCreate,
    OrganizationResponse,
    OrgMemberCreate,
    OrgMemberResponse,
)
from app.schemas.release import ReleaseResponse
from app.schemas.report import OrgStats, ReportRowResponse, ReportsResponse
from app.services import reporting_service
from app.services.catalog_service import CatalogService
from app.services.database import get_db

router = APIRouter()


async def _readable_org(db: AsyncSession, user: User, org_id: uuid.UUID) -> CatalogService:
    catalog = CatalogService(db)
    await catalog.get_organization(org_id)
    await catalog.ensure_member(user, org_id)
    return catalog


@router.post("/organizations", response_model=OrganizationResponse, status_code=status.HTTP_201_CREATED)
async def create_organization(
    org_data: OrganizationCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create an organization owned by the current user"""
    return await CatalogService(db).create_organization(current_user, org_data)

@router.get("/organizations", response_model=List[OrganizationResponse])
async def list_my_organizations(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await CatalogService(db).get_user_organizations(current_user.id)

@router.get("/organizations/{org_id}", response_model=OrganizationResponse)
async def read_organization(
    org_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    catalog = await _readable_org(db, current_user, org_id)
    return await catalog.get_organization(org_id)

@router.get("/organizations/{org_id}/members", response_model=List[OrgMemberResponse])
async def list_members(
    org_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await CatalogService(db).list_members(current_user, org_id)

@router.post("/organizations/{org_id}/members", response_model=OrgMemberResponse, status_code=status.HTTP_201_CREATED)
async def add_member(
    org_id: uuid.UUID,
    member_data: OrgMemberCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Owners and managers add an existing user to the organization"""
    return await CatalogService(db).add_member(current_user, org_id, member_data)

@router.get("/organizations/{org_id}/artists", response_model=List[ArtistResponse])
async def list_artists(
    org_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await CatalogService(db).list_artists(current_user, org_id)

@router.post("/artists", response_model=ArtistResponse, status_code=status.HTTP_201_CREATED)
async def create_artist(
    artist_data: ArtistCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await CatalogService(db).create_artist(current_user, artist_data)

@router.get("/organizations/{org_id}/releases", response_model=List[ReleaseResponse])
async def list_org_releases(
    org_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await CatalogService(db).list_org_releases(current_user, org_id)

@router.get("/organizations/{org_id}/reports", response_model=ReportsResponse)
async def read_reports(
    org_id: uuid.UUID,
    period: Optional[str] = Query(default=None, pattern=r"^\d{4}-(0[1-9]|1[0-2])$"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Revenue report rows, newest period first, with their totals"""
    await _readable_org(db, current_user, org_id)
    rows = await reporting_service.get_report_rows(db, org_id, period)
    return ReportsResponse(
        report_rows=[ReportRowResponse.model_validate(r) for r in rows],
        summary=reporting_service.summarize(rows),
    )

@router.get("/organizations/{org_id}/stats", response_model=OrgStats)
async def read_stats(
    org_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await _readable_org(db, current_user, org_id)
    return await reporting_service.get_org_stats(db, org_id)

@router.get("/organizations/{org_id}/recent-releases", response_model=List[ReleaseResponse])
async def read_recent_releases(
    org_id: uuid.UUID,
    limit: int = Query(default=5, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await _readable_org(db, current_user, org_id)
    return await reporting_service.get_recent_releases(db, org_id, limit)
