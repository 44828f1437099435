import logging
import uuid
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.exceptions import NotFoundException, ValidationError
from app.models.delivery_job import DeliveryJob, DeliveryStatus
from app.models.user import User
from app.schemas.delivery_job import DeliveryJobUpdate
from app.services.audit import log_action
from app.services.database import commit_or_rollback

logger = logging.getLogger(__name__)


class DeliveryService:
    """The boundary the external delivery worker reports through."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get_job(self, job_id: uuid.UUID) -> DeliveryJob:
        """Retrieve a delivery job by its ID."""
        result = await self.db.execute(
            select(DeliveryJob).where(DeliveryJob.id == job_id)
        )
        job = result.scalar_one_or_none()
        if not job:
            raise NotFoundException("Delivery job", str(job_id))
        return job

    async def list_jobs(self, status: DeliveryStatus = DeliveryStatus.PENDING, limit: int = 100) -> List[DeliveryJob]:
        """Jobs in the given state, oldest first. PENDING is the worker's queue."""
        result = await self.db.execute(
            select(DeliveryJob)
            .where(DeliveryJob.status == status.value)
            .order_by(DeliveryJob.created_at, DeliveryJob.id)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def update_job(self, admin: User, job_id: uuid.UUID, job_update: DeliveryJobUpdate) -> DeliveryJob:
        """Record the outcome of a delivery attempt. The release status is not touched."""
        job = await self.get_job(job_id)
        if job.status == DeliveryStatus.SENT.value:
            raise ValidationError.single("status", "Delivery job was already sent")

        update_data = job_update.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(job, field, value)

        log_action(
            self.db, action="UPDATE_DELIVERY_JOB", user_id=admin.id,
            entity="delivery_job", entity_id=job.id,
            data={"release_id": str(job.release_id), "target": job.target, "status": job.status},
        )
        await commit_or_rollback(self.db, "update delivery job")
        await self.db.refresh(job)
        logger.info(f"Delivery job {job.id} ({job.target}) for release {job.release_id} is now {job.status}")
        return job
