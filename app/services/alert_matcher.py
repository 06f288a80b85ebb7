"""Match inventory alerts against vehicles.

Every alert criterion is optional; a null criterion places no constraint.
Make compares case-insensitively, model matches when equal or when the
vehicle's model contains the alert's model.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy import and_, func, literal, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from app.core.enums import VehicleStatus
from app.core.metrics import alert_matches, track_db_operation
from app.models.inventory_alert import InventoryAlert, AlertNotification
from app.models.vehicle import Vehicle
from app.schemas.inventory_alert import InventoryAlertCreate

logger = logging.getLogger(__name__)

IMMEDIATE_MATCH_LIMIT = 5


@dataclass
class MatchResult:
    vehicle: Vehicle
    alerts: List[InventoryAlert] = field(default_factory=list)
    notifications: List[AlertNotification] = field(default_factory=list)


def _like_literal(expr):
    """Escape LIKE wildcards in a column value so it matches literally."""
    for char in ("/", "%", "_"):
        expr = func.replace(expr, char, f"/{char}")
    return expr


def alert_predicate(vehicle: Vehicle):
    make = literal(vehicle.make)
    model = literal(vehicle.model)
    return and_(
        InventoryAlert.is_active.is_(True),
        or_(InventoryAlert.vehicle_make.is_(None),
            func.lower(InventoryAlert.vehicle_make) == func.lower(make)),
        or_(InventoryAlert.vehicle_model.is_(None),
            func.lower(InventoryAlert.vehicle_model) == func.lower(model),
            func.lower(model).contains(_like_literal(func.lower(InventoryAlert.vehicle_model)), escape="/")),
        or_(InventoryAlert.max_price.is_(None), InventoryAlert.max_price >= vehicle.price),
        or_(InventoryAlert.min_year.is_(None), InventoryAlert.min_year <= vehicle.year),
        or_(InventoryAlert.max_mileage.is_(None), InventoryAlert.max_mileage >= vehicle.mileage),
        or_(InventoryAlert.body_type.is_(None), InventoryAlert.body_type == vehicle.body_type),
        or_(InventoryAlert.fuel_type.is_(None), InventoryAlert.fuel_type == vehicle.fuel_type),
    )


async def find_matching_alerts(db: AsyncSession, vehicle: Vehicle) -> List[InventoryAlert]:
    res = await db.execute(
        select(InventoryAlert).where(alert_predicate(vehicle)).order_by(InventoryAlert.id)
    )
    return res.scalars().all()


@track_db_operation("match", "inventory_alerts")
async def match_vehicle(db: AsyncSession, vehicle: Vehicle, now: Optional[datetime] = None) -> MatchResult:
    """Record one notification per matching alert in a single transaction.

    Any database error rolls the whole batch back and propagates.
    """
    now = now or datetime.now(timezone.utc)
    result = MatchResult(vehicle=vehicle)
    try:
        result.alerts = await find_matching_alerts(db, vehicle)
        for alert in result.alerts:
            notification = AlertNotification(
                alert_id=alert.id,
                vehicle_id=vehicle.id,
                method="email",
                sent_at=now,
            )
            db.add(notification)
            alert.last_notified = now
            result.notifications.append(notification)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Alert matching failed for vehicle {vehicle.id}: {e}", exc_info=True)
        raise

    alert_matches.inc(len(result.alerts))
    logger.info(f"Found {len(result.alerts)} matching alerts for vehicle {vehicle.make} {vehicle.model}")
    return result


async def find_similar_active_alert(db: AsyncSession, payload: InventoryAlertCreate) -> Optional[InventoryAlert]:
    res = await db.execute(
        select(InventoryAlert).where(
            InventoryAlert.customer_email == payload.customer_email,
            InventoryAlert.vehicle_make.is_not_distinct_from(payload.vehicle_make),
            InventoryAlert.vehicle_model.is_not_distinct_from(payload.vehicle_model),
            InventoryAlert.max_price.is_not_distinct_from(payload.max_price),
            InventoryAlert.is_active.is_(True),
        ).limit(1)
    )
    return res.scalars().first()


async def immediate_matches(db: AsyncSession, alert: InventoryAlert) -> List[Vehicle]:
    """AVAILABLE vehicles that already satisfy a freshly created alert."""
    q = select(Vehicle).where(Vehicle.status == VehicleStatus.AVAILABLE)
    if alert.vehicle_make:
        q = q.where(func.lower(Vehicle.make) == alert.vehicle_make.lower())
    if alert.vehicle_model:
        q = q.where(func.lower(Vehicle.model).contains(alert.vehicle_model.lower(), autoescape=True))
    if alert.max_price is not None:
        q = q.where(Vehicle.price <= alert.max_price)
    if alert.min_year is not None:
        q = q.where(Vehicle.year >= alert.min_year)
    if alert.max_mileage is not None:
        q = q.where(Vehicle.mileage <= alert.max_mileage)
    if alert.body_type is not None:
        q = q.where(Vehicle.body_type == alert.body_type)
    if alert.fuel_type is not None:
        q = q.where(Vehicle.fuel_type == alert.fuel_type)
    res = await db.execute(q.order_by(Vehicle.id).limit(IMMEDIATE_MATCH_LIMIT))
    return res.scalars().all()
