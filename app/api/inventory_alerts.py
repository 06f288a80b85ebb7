import logging
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.db.session import get_db
from app.models.inventory_alert import InventoryAlert
from app.models.vehicle import Vehicle
from app.schemas.inventory_alert import InventoryAlertCreate, AlertMatchRequest
from app.core.auth_utils import check_not_found
from app.core.enums import VehicleStatus
from app.core.errors import APIError
from app.core.response_builders import (
    success_response,
    build_alert_response,
    build_vehicle_response_list,
)
from app.services.alert_matcher import match_vehicle, find_similar_active_alert, immediate_matches
from app.services.email import send_inventory_alert

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/inventory-alerts", tags=["inventory-alerts"])


@router.get("")
async def list_alerts(
    customer_email: Optional[str] = Query(None),
    active: Optional[bool] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    q = select(InventoryAlert)
    if customer_email:
        q = q.where(InventoryAlert.customer_email == customer_email)
    if active is not None:
        q = q.where(InventoryAlert.is_active.is_(active))
    q = q.order_by(InventoryAlert.created_at.desc(), InventoryAlert.id.desc()).limit(limit)
    res = await db.execute(q)
    alerts = res.scalars().all()
    return success_response({
        "alerts": [build_alert_response(a) for a in alerts],
        "total": len(alerts),
    })


@router.post("")
async def create_alert(payload: InventoryAlertCreate, db: AsyncSession = Depends(get_db)):
    if await find_similar_active_alert(db, payload):
        raise APIError(status_code=409, message="You already have a similar alert active", code="ALERT_EXISTS")

    alert = InventoryAlert(**payload.model_dump(), is_active=True)
    db.add(alert)
    await db.commit()
    await db.refresh(alert)

    matches = await immediate_matches(db, alert)
    logger.info(f"New inventory alert {alert.id} for {alert.customer_email}, {len(matches)} immediate matches")
    return success_response(
        {
            "alert": build_alert_response(alert),
            "immediate_matches": len(matches),
            "matches": build_vehicle_response_list(matches),
        },
        "Inventory alert created successfully!",
    )


@router.patch("")
async def process_vehicle_alerts(
    payload: AlertMatchRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    res = await db.execute(
        select(Vehicle).where(Vehicle.id == payload.vehicle_id, Vehicle.status == VehicleStatus.AVAILABLE)
    )
    vehicle = res.scalars().first()
    check_not_found(vehicle, "Vehicle", payload.vehicle_id)

    result = await match_vehicle(db, vehicle)
    for alert in result.alerts:
        background_tasks.add_task(send_inventory_alert, alert, vehicle)

    return success_response(
        {
            "matching_alerts": len(result.alerts),
            "notifications": len(result.notifications),
        },
        f"Found {len(result.alerts)} matching alerts",
    )
