import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.core.audit_decorator import audit_log
from app.core.auth_utils import check_not_found, rate_limited_admin
from app.core.enums import AuditAction
from app.core.response_builders import success_response
from app.services import notifications

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin/notifications", tags=["admin"])


@router.get("")
async def list_notifications(
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(rate_limited_admin),
):
    created = await notifications.record_new_events(db)
    await db.commit()
    if created:
        logger.info(f"Recorded {len(created)} new admin notifications")

    items = await notifications.list_notifications(db, limit=limit, unread_only=unread_only)
    return success_response({
        "notifications": items,
        "total": len(items),
        "unread_count": sum(1 for n in items if not n.read),
    })


@router.patch("/{notification_id}/read")
async def mark_notification_read(
    notification_id: str,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(rate_limited_admin),
):
    found = await notifications.mark_read(db, notification_id)
    check_not_found(found, "Notification", notification_id)
    await db.commit()
    return success_response({"id": notification_id, "read": True}, "Notification marked as read")


@router.post("/read-all")
async def mark_all_notifications_read(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(rate_limited_admin),
):
    count = await notifications.mark_all_read(db)
    await db.commit()
    return success_response({"count": count}, f"Marked {count} notifications as read")


@router.delete("/{notification_id}")
@audit_log(AuditAction.DELETE_NOTIFICATION, "notifications")
async def delete_notification(
    notification_id: str,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(rate_limited_admin),
):
    deleted = await notifications.delete_notification(db, notification_id)
    check_not_found(deleted, "Notification", notification_id)
    await db.commit()
    return success_response({"id": notification_id}, "Notification deleted")
