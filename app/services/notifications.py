"""Admin notifications stored as JSON documents in the settings table.

Event checks derive notifications from recent leads and inventory levels.
Event notifications get deterministic ids, so repeated checks record each
event once.
"""
import logging
import secrets
import time
from datetime import datetime, timedelta, timezone
from typing import Optional, List
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from app.core.enums import LeadStatus, NotificationType, NotificationCategory, VehicleStatus
from app.models.contact import Contact, VehicleInquiry
from app.models.vehicle import Vehicle
from app.schemas.notification import Notification
from app.services import settings_store

logger = logging.getLogger(__name__)

NOTIFICATION_PREFIX = "notification."
NOTIFICATION_CATEGORY = "notifications"
EVENT_WINDOW = timedelta(hours=24)
EVENT_BATCH = 5
LOW_INVENTORY_THRESHOLD = 5


def _key(notification_id: str) -> str:
    return f"{NOTIFICATION_PREFIX}{notification_id}"


def new_notification_id() -> str:
    return f"notif_{int(time.time() * 1000)}_{secrets.token_hex(5)}"


async def create_notification(
    db: AsyncSession,
    type: NotificationType,
    category: NotificationCategory,
    title: str,
    message: str,
    action_url: Optional[str] = None,
    metadata: Optional[dict] = None,
    notification_id: Optional[str] = None,
) -> Optional[Notification]:
    """Store a notification; returns None when ``notification_id`` already exists."""
    notification_id = notification_id or new_notification_id()
    if await settings_store.get_document(db, _key(notification_id)) is not None:
        return None

    notification = Notification(
        id=notification_id,
        type=type,
        category=category,
        title=title,
        message=message,
        action_url=action_url,
        metadata=metadata or {},
        timestamp=datetime.now(timezone.utc),
        read=False,
    )
    await settings_store.put_document(
        db, _key(notification_id), notification.model_dump(mode="json"), NOTIFICATION_CATEGORY
    )
    return notification


async def record_new_events(db: AsyncSession, now: Optional[datetime] = None) -> List[Notification]:
    now = now or datetime.now(timezone.utc)
    since = now - EVENT_WINDOW
    created: List[Notification] = []

    res = await db.execute(
        select(VehicleInquiry)
        .options(selectinload(VehicleInquiry.vehicle))
        .where(VehicleInquiry.status == LeadStatus.NEW, VehicleInquiry.created_at >= since)
        .order_by(VehicleInquiry.created_at.desc())
        .limit(EVENT_BATCH)
    )
    for inquiry in res.scalars().all():
        vehicle = inquiry.vehicle
        notification = await create_notification(
            db,
            NotificationType.SUCCESS,
            NotificationCategory.INQUIRY,
            "New Vehicle Inquiry",
            f"{inquiry.name} inquired about {vehicle.make} {vehicle.model} {vehicle.year}",
            action_url="/admin?tab=customers",
            metadata={
                "inquiry_id": inquiry.id,
                "vehicle_id": inquiry.vehicle_id,
                "customer_email": inquiry.email,
            },
            notification_id=f"notif_inquiry_{inquiry.id}",
        )
        if notification:
            created.append(notification)

    res = await db.execute(
        select(Contact)
        .where(Contact.status == LeadStatus.NEW, Contact.created_at >= since)
        .order_by(Contact.created_at.desc())
        .limit(EVENT_BATCH)
    )
    for contact in res.scalars().all():
        notification = await create_notification(
            db,
            NotificationType.INFO,
            NotificationCategory.SYSTEM,
            "New Contact Message",
            f"{contact.name} sent a message: {contact.subject or 'General Inquiry'}",
            action_url="/admin?tab=customers",
            metadata={"contact_id": contact.id, "customer_email": contact.email},
            notification_id=f"notif_contact_{contact.id}",
        )
        if notification:
            created.append(notification)

    res = await db.execute(
        select(Vehicle.body_type, func.count(Vehicle.id))
        .where(Vehicle.status == VehicleStatus.AVAILABLE)
        .group_by(Vehicle.body_type)
    )
    for body_type, count in res.all():
        if count >= LOW_INVENTORY_THRESHOLD:
            continue
        notification = await create_notification(
            db,
            NotificationType.WARNING,
            NotificationCategory.VEHICLE,
            "Low Inventory Alert",
            f"Only {count} vehicles available in {body_type} category",
            action_url="/admin?tab=inventory",
            metadata={"body_type": str(body_type), "count": count},
            notification_id=f"notif_low_inventory_{body_type}_{now.date().isoformat()}",
        )
        if notification:
            created.append(notification)

    return created


async def _load_notifications(db: AsyncSession) -> List[Notification]:
    documents = await settings_store.list_documents(db, NOTIFICATION_PREFIX, NOTIFICATION_CATEGORY)
    loaded = []
    for document in documents:
        try:
            loaded.append(Notification.model_validate(document))
        except ValueError as e:
            ref = document.get("id") if isinstance(document, dict) else None
            logger.warning(f"Skipping malformed notification {ref}: {e}")
    return loaded


async def list_notifications(db: AsyncSession, limit: int = 20, unread_only: bool = False) -> List[Notification]:
    items = await _load_notifications(db)
    if unread_only:
        items = [n for n in items if not n.read]
    return items[:limit]


async def mark_read(db: AsyncSession, notification_id: str) -> bool:
    document = await settings_store.get_document(db, _key(notification_id))
    if document is None:
        return False
    document["read"] = True
    await settings_store.put_document(db, _key(notification_id), document, NOTIFICATION_CATEGORY)
    return True


async def mark_all_read(db: AsyncSession) -> int:
    count = 0
    for notification in await _load_notifications(db):
        if notification.read:
            continue
        notification.read = True
        await settings_store.put_document(
            db, _key(notification.id), notification.model_dump(mode="json"), NOTIFICATION_CATEGORY
        )
        count += 1
    return count


async def delete_notification(db: AsyncSession, notification_id: str) -> bool:
    return await settings_store.delete_document(db, _key(notification_id))
