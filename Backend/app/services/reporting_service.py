import logging
import uuid
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.release import Release, ReleaseStatus
from app.models.report_row import ReportRow
from app.models.user import User
from app.schemas.report import OrgStats, ReportRowCreate, RevenueSummary
from app.services.audit import log_action
from app.services.database import commit_or_rollback

logger = logging.getLogger(__name__)

# Releases that are live or on their way to the stores.
ACTIVE_STATUSES = (ReleaseStatus.DELIVERING, ReleaseStatus.DELIVERED)


def cents_to_units(cents: int) -> float:
    return round((cents or 0) / 100, 2)


async def get_report_rows(db: AsyncSession, org_id: uuid.UUID, period: Optional[str] = None) -> List[ReportRow]:
    """Report rows of an organization, newest period first."""
    stmt = select(ReportRow).where(ReportRow.org_id == org_id)
    if period:
        stmt = stmt.where(ReportRow.period == period)
    stmt = stmt.order_by(ReportRow.period.desc(), ReportRow.created_at.desc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


def summarize(rows: List[ReportRow]) -> RevenueSummary:
    return RevenueSummary(
        total_revenue=cents_to_units(sum(r.revenue_cents or 0 for r in rows)),
        streams=sum(r.units or 0 for r in rows),
    )


async def get_org_stats(db: AsyncSession, org_id: uuid.UUID) -> OrgStats:
    totals = await db.execute(
        select(
            func.coalesce(func.sum(ReportRow.revenue_cents), 0),
            func.coalesce(func.sum(ReportRow.units), 0),
        ).where(ReportRow.org_id == org_id)
    )
    revenue_cents, streams = totals.one()

    active = await db.scalar(
        select(func.count(Release.id)).where(Release.org_id == org_id, Release.status.in_(ACTIVE_STATUSES))
    )
    pending = await db.scalar(
        select(func.count(Release.id)).where(Release.org_id == org_id, Release.status == ReleaseStatus.IN_REVIEW)
    )
    return OrgStats(
        total_revenue=cents_to_units(revenue_cents),
        active_releases=active or 0,
        total_streams=int(streams),
        pending_review=pending or 0,
    )


async def get_recent_releases(db: AsyncSession, org_id: uuid.UUID, limit: int = 5) -> List[Release]:
    result = await db.execute(
        select(Release)
        .where(Release.org_id == org_id)
        .order_by(Release.created_at.desc(), Release.id)
        .limit(limit)
    )
    return list(result.scalars().all())


async def ingest_report_rows(
    db: AsyncSession,
    admin: User,
    org_id: uuid.UUID,
    rows: List[ReportRowCreate],
) -> List[ReportRow]:
    """Stores a batch of store report rows for an organization in one commit."""
    db_rows = []
    for row in rows:
        db_row = ReportRow(org_id=org_id, **row.model_dump())
        db_row.source = row.source.value
        db_row.territory = row.territory.upper()
        db.add(db_row)
        db_rows.append(db_row)

    log_action(
        db, action="INGEST_REPORTS", user_id=admin.id, org_id=org_id,
        entity="organization", entity_id=org_id,
        data={"rows": len(db_rows), "periods": sorted({r.period for r in rows})},
    )
    await commit_or_rollback(db, "store report rows")
    for db_row in db_rows:
        await db.refresh(db_row)
    logger.info(f"Ingested {len(db_rows)} report rows for organization {org_id}")
    return db_rows
