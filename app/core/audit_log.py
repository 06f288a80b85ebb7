"""Audit trail for admin mutations"""
import logging
from typing import Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.audit import Audit
from app.core.enums import AuditAction
from app.core.metrics import audit_logs_created
from app.utils.hashing import payload_hash

logger = logging.getLogger(__name__)


async def log_audit(
    db: AsyncSession,
    user_id: int,
    action: AuditAction,
    payload: Any = None,
    resource: Optional[str] = None,
) -> None:

    try:
        audit_record = Audit(
            user_id=int(user_id),
            action=str(action),
            resource=resource,
            payload_hash=payload_hash(payload or {}),
        )
        db.add(audit_record)
        await db.flush()
        audit_logs_created.labels(action=str(action)).inc()

    except Exception as e:
        logger.error(f"Audit logging failed for action {action}: {e}", exc_info=True)


async def log_login(
    db: AsyncSession,
    user_id: int,
    username: str
) -> None:
    await log_audit(db, user_id, AuditAction.LOGIN, {"username": username}, resource="users")
