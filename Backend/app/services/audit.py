import logging
import uuid
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def log_action(
    db: AsyncSession,
    *,
    action: str,
    user_id: Optional[uuid.UUID],
    org_id: Optional[uuid.UUID] = None,
    entity: Optional[str] = None,
    entity_id: Optional[Any] = None,
    data: Optional[dict] = None,
) -> AuditLog:
    """
    Append an audit entry to the current transaction. The caller commits, so the
    entry lands together with the change it describes or not at all.
    """
    entry = AuditLog(
        org_id=org_id,
        user_id=user_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        data=data,
    )
    db.add(entry)
    logger.info(f"audit {action} {entity}={entity_id} by user={user_id}")
    return entry
