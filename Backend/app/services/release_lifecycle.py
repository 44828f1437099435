"""
Release state machine.

    DRAFT / REJECTED --submit--> IN_REVIEW --approve--> APPROVED
                                           --reject---> REJECTED

Every transition locks the release row, checks its preconditions against the
locked state and writes the new status, its side records (QC items, delivery
jobs) and the audit entry in one commit.
"""
import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundException, ValidationError
from app.models.artist import Artist
from app.models.delivery_job import DELIVERY_TARGETS, DeliveryJob, DeliveryStatus
from app.models.qc_item import QCItem, QCSeverity
from app.models.release import EDITABLE_STATUSES, Release, ReleaseStatus
from app.models.user import User
from app.schemas.release import AdminReleaseUpdate
from app.services.audit import log_action
from app.services.catalog_service import (
    REQUIRED_RELEASE_FIELDS,
    CatalogService,
    check_upc_change,
    ensure_upc_unused,
    reject_cleared_fields,
)
from app.services.database import commit_or_rollback
from app.services.identifiers import generate_upc
from app.services.release_validation import CheckResult, failed_checks, run_submission_checklist
from app.services.track_service import TrackService

logger = logging.getLogger(__name__)

SUBMITTED_QC_MESSAGE = "Release submitted for quality control review"
DEFAULT_REJECT_REASON = "Release rejected by admin"

# Attempts at drawing a UPC nobody else holds before giving up.
_UPC_ATTEMPTS = 10


class ReleaseLifecycleService:
    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.catalog = CatalogService(db_session)
        self.tracks = TrackService(db_session)

    async def _lock_release(self, release_id: uuid.UUID) -> Release:
        result = await self.db.execute(
            select(Release)
            .where(Release.id == release_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        release = result.scalar_one_or_none()
        if not release:
            raise NotFoundException("Release", str(release_id))
        return release

    async def checklist(self, user: User, release_id: uuid.UUID) -> List[CheckResult]:
        release = await self.catalog.get_release(release_id)
        await self.catalog.ensure_member(user, release.org_id)
        return await self._run_checklist(release)

    async def _run_checklist(self, release: Release) -> List[CheckResult]:
        tracks = await self.catalog.get_release_tracks(release.id)
        splits = await self.tracks.get_release_splits(release.id)
        return run_submission_checklist(release, tracks, splits)

    async def _assign_upc(self, release: Release) -> str:
        artist = await self.db.get(Artist, release.artist_id)
        prefix = artist.upc_prefix if artist else None
        for _ in range(_UPC_ATTEMPTS):
            candidate = generate_upc(prefix)
            taken = await self.db.execute(select(Release.id).where(Release.upc == candidate))
            if taken.first() is None:
                return candidate
        raise ValidationError.single("upc", "Could not generate a unique UPC, set one manually")

    async def submit(self, user: User, release_id: uuid.UUID) -> Release:
        """
        DRAFT or REJECTED -> IN_REVIEW, only when every checklist item passes.
        A failed submission changes nothing and lists all failing checks.
        """
        release = await self._lock_release(release_id)
        await self.catalog.ensure_member(user, release.org_id, editing=True)

        if release.status not in EDITABLE_STATUSES:
            raise ValidationError.single(
                "status", f"Only draft or rejected releases can be submitted (current: {release.status.value})"
            )

        errors = failed_checks(await self._run_checklist(release))
        if errors:
            logger.warning(f"Submission of release {release.id} blocked by {[e['id'] for e in errors]}")
            raise ValidationError(errors, message="Release is not ready for submission")

        previous = release.status
        if not release.upc:
            release.upc = await self._assign_upc(release)

        release.status = ReleaseStatus.IN_REVIEW
        self.db.add(QCItem(
            release_id=release.id,
            severity=QCSeverity.INFO.value,
            message=SUBMITTED_QC_MESSAGE,
        ))
        log_action(
            self.db, action="SUBMIT_RELEASE", user_id=user.id, org_id=release.org_id,
            entity="release", entity_id=release.id,
            data={"from": previous.value, "to": release.status.value, "upc": release.upc},
        )
        await commit_or_rollback(self.db, "submit release")
        await self.db.refresh(release)
        logger.info(f"Release {release.id} submitted for review")
        return release

    async def approve(self, admin: User, release_id: uuid.UUID) -> Release:
        """IN_REVIEW -> APPROVED with one PENDING delivery job per target."""
        release = await self._lock_release(release_id)
        if release.status != ReleaseStatus.IN_REVIEW:
            raise ValidationError.single(
                "status", f"Only releases in review can be approved (current: {release.status.value})"
            )

        release.status = ReleaseStatus.APPROVED
        for target in DELIVERY_TARGETS:
            self.db.add(DeliveryJob(
                release_id=release.id,
                target=target,
                status=DeliveryStatus.PENDING.value,
                payload={"release_id": str(release.id), "target": target},
            ))
        log_action(
            self.db, action="APPROVE_RELEASE", user_id=admin.id, org_id=release.org_id,
            entity="release", entity_id=release.id,
            data={"from": ReleaseStatus.IN_REVIEW.value, "to": release.status.value,
                  "targets": list(DELIVERY_TARGETS)},
        )
        await commit_or_rollback(self.db, "approve release")
        await self.db.refresh(release)
        logger.info(f"Release {release.id} approved, {len(DELIVERY_TARGETS)} delivery jobs queued")
        return release

    async def reject(self, admin: User, release_id: uuid.UUID, reason: Optional[str] = None) -> Release:
        """IN_REVIEW -> REJECTED, leaving the reason as an ERROR QC item for the owner."""
        release = await self._lock_release(release_id)
        if release.status != ReleaseStatus.IN_REVIEW:
            raise ValidationError.single(
                "status", f"Only releases in review can be rejected (current: {release.status.value})"
            )

        message = (reason or "").strip() or DEFAULT_REJECT_REASON
        release.status = ReleaseStatus.REJECTED
        self.db.add(QCItem(
            release_id=release.id,
            severity=QCSeverity.ERROR.value,
            message=message,
        ))
        log_action(
            self.db, action="REJECT_RELEASE", user_id=admin.id, org_id=release.org_id,
            entity="release", entity_id=release.id,
            data={"from": ReleaseStatus.IN_REVIEW.value, "to": release.status.value, "reason": message},
        )
        await commit_or_rollback(self.db, "reject release")
        await self.db.refresh(release)
        logger.info(f"Release {release.id} rejected: {message}")
        return release

    async def update_admin_fields(self, admin: User, release_id: uuid.UUID, release_data: AdminReleaseUpdate) -> Release:
        """
        Applies the allow-listed fields only. Setting ``status`` here is the
        manual override for moves the state machine does not cover, e.g. TAKEDOWN.
        """
        release = await self._lock_release(release_id)
        update_data = release_data.model_dump(exclude_unset=True)

        reject_cleared_fields(update_data, REQUIRED_RELEASE_FIELDS)

        if "upc" in update_data:
            check_upc_change(release, update_data["upc"])
            if update_data["upc"]:
                await ensure_upc_unused(self.db, update_data["upc"], release.id)

        previous = release.status
        for field, value in update_data.items():
            setattr(release, field, value)

        audit_data = release_data.model_dump(mode="json", exclude_unset=True)
        if "status" in update_data:
            audit_data["previous_status"] = previous.value
        log_action(
            self.db, action="UPDATE_RELEASE", user_id=admin.id, org_id=release.org_id,
            entity="release", entity_id=release.id, data=audit_data,
        )
        await commit_or_rollback(self.db, "update release")
        await self.db.refresh(release)
        return release

    async def qc_queue(self) -> List[Release]:
        """Releases waiting for review, oldest submission first."""
        result = await self.db.execute(
            select(Release)
            .where(Release.status == ReleaseStatus.IN_REVIEW)
            .order_by(Release.updated_at, Release.created_at)
        )
        return list(result.scalars().all())
