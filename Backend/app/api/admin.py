import logging
import uuid
from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.core.exceptions import NotFoundException
from app.core.security import require_admin
from app.models.delivery_job import DeliveryStatus
from app.models.release import Release
from app.models.user import User
from app.schemas.delivery_job import DeliveryJobResponse, DeliveryJobUpdate
from app.schemas.release import (
    AdminReleaseUpdate,
    ReleaseDetailResponse,
    ReleaseRejectRequest,
    ReleaseResponse,
)
from app.schemas.report import ReportRowCreate, ReportRowResponse
from app.schemas.user import UserResponse, UserRoleUpdate
from app.services import reporting_service
from app.services.audit import log_action
from app.services.catalog_service import CatalogService
from app.services.database import commit_or_rollback, get_db
from app.services.delivery_service import DeliveryService
from app.services.release_lifecycle import ReleaseLifecycleService

logger = logging.getLogger(__name__)

# Every route here requires User.role == ADMIN
router = APIRouter(prefix="/admin")

@router.get("/qc-queue", response_model=List[ReleaseResponse])
async def read_qc_queue(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Releases waiting for review, oldest first"""
    return await ReleaseLifecycleService(db).qc_queue()

@router.get("/releases", response_model=List[ReleaseResponse])
async def list_all_releases(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    result = await db.execute(select(Release).order_by(Release.created_at.desc()).limit(100))
    return result.scalars().all()

@router.get("/releases/{release_id}", response_model=ReleaseDetailResponse)
async def read_release_details(
    release_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return await CatalogService(db).get_release_details(release_id)

@router.post("/releases/{release_id}/approve", response_model=ReleaseResponse)
async def approve_release(
    release_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Approve a release in review and queue its deliveries"""
    return await ReleaseLifecycleService(db).approve(admin, release_id)

@router.post("/releases/{release_id}/reject", response_model=ReleaseResponse)
async def reject_release(
    release_id: uuid.UUID,
    reject_data: Optional[ReleaseRejectRequest] = None,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Send a release in review back to its owner with the reason as a QC item"""
    reason = reject_data.reason if reject_data else None
    return await ReleaseLifecycleService(db).reject(admin, release_id, reason)

@router.put("/releases/{release_id}", response_model=ReleaseResponse)
async def update_release(
    release_id: uuid.UUID,
    release_data: AdminReleaseUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Edit the allow-listed release fields, including a manual status override"""
    return await ReleaseLifecycleService(db).update_admin_fields(admin, release_id, release_data)

@router.get("/delivery-jobs", response_model=List[DeliveryJobResponse])
async def list_delivery_jobs(
    job_status: DeliveryStatus = DeliveryStatus.PENDING,
    limit: int = 100,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return await DeliveryService(db).list_jobs(job_status, limit=min(limit, 500))

@router.patch("/delivery-jobs/{job_id}", response_model=DeliveryJobResponse)
async def update_delivery_job(
    job_id: uuid.UUID,
    job_update: DeliveryJobUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Where the delivery worker reports SENT or FAILED"""
    return await DeliveryService(db).update_job(admin, job_id, job_update)

@router.patch("/users/{user_id}/role", response_model=UserResponse)
async def set_user_role(
    user_id: uuid.UUID,
    role_data: UserRoleUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundException("User", str(user_id))

    previous = user.role
    user.role = role_data.role
    log_action(
        db, action="SET_USER_ROLE", user_id=admin.id, entity="user", entity_id=user.id,
        data={"from": previous.value, "to": role_data.role.value},
    )
    await commit_or_rollback(db, "update user role")
    await db.refresh(user)
    logger.info(f"Admin {admin.id} changed role of user {user.id} from {previous.value} to {user.role.value}")
    return user

@router.post(
    "/organizations/{org_id}/reports",
    response_model=List[ReportRowResponse],
    status_code=status.HTTP_201_CREATED,
)
async def ingest_reports(
    org_id: uuid.UUID,
    rows: List[ReportRowCreate],
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Load store report rows for an organization"""
    await CatalogService(db).get_organization(org_id)
    return await reporting_service.ingest_report_rows(db, admin, org_id, rows)
