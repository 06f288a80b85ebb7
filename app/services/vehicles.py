import logging
from typing import List, Optional, Tuple, Type
from enum import Enum
from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from app.core.cache import performance_cache
from app.core.enums import VehicleStatus, FuelType, Transmission, BodyType
from app.core.metrics import track_db_operation
from app.models.vehicle import Vehicle
from app.schemas.vehicle import VehicleFilters

logger = logging.getLogger(__name__)

SIMILAR_LIMIT = 4

SORT_ORDERS = {
    "featured": [Vehicle.featured.desc(), Vehicle.created_at.desc()],
    "newest": [Vehicle.created_at.desc()],
    "recent": [Vehicle.created_at.desc()],
    "price-low": [Vehicle.price.asc()],
    "price-high": [Vehicle.price.desc()],
    "year-new": [Vehicle.year.desc()],
    "year-old": [Vehicle.year.asc()],
    "mileage-low": [Vehicle.mileage.asc()],
    "mileage-high": [Vehicle.mileage.desc()],
}
DEFAULT_SORT = "featured"


def sort_order(sort_by: Optional[str]) -> list:
    # id breaks ties so pages never overlap
    return SORT_ORDERS.get(sort_by or DEFAULT_SORT, SORT_ORDERS[DEFAULT_SORT]) + [Vehicle.id.desc()]


def _enum_contains(enum_cls: Type[Enum], term: str) -> List[Enum]:
    term = term.lower()
    return [member for member in enum_cls if term in member.value.lower()]


def _contains(column, term: str):
    return func.lower(column).contains(term.lower(), autoescape=True)


def apply_filters(q, filters: VehicleFilters):
    if filters.status:
        q = q.where(Vehicle.status.in_(filters.status))
    if filters.featured is not None:
        q = q.where(Vehicle.featured == filters.featured)
    if filters.query:
        q = q.where(or_(
            _contains(Vehicle.make, filters.query),
            _contains(Vehicle.model, filters.query),
            _contains(Vehicle.description, filters.query),
        ))
    if filters.make:
        q = q.where(_contains(Vehicle.make, filters.make))
    if filters.model:
        q = q.where(_contains(Vehicle.model, filters.model))
    if filters.color:
        q = q.where(_contains(Vehicle.color, filters.color))
    if filters.body_type:
        q = q.where(Vehicle.body_type.in_(_enum_contains(BodyType, filters.body_type)))
    if filters.fuel_type:
        q = q.where(Vehicle.fuel_type.in_(_enum_contains(FuelType, filters.fuel_type)))
    if filters.transmission:
        q = q.where(Vehicle.transmission.in_(_enum_contains(Transmission, filters.transmission)))
    if filters.min_price is not None:
        q = q.where(Vehicle.price >= filters.min_price)
    if filters.max_price is not None:
        q = q.where(Vehicle.price <= filters.max_price)
    if filters.min_year is not None:
        q = q.where(Vehicle.year >= filters.min_year)
    if filters.max_year is not None:
        q = q.where(Vehicle.year <= filters.max_year)
    if filters.min_mileage is not None:
        q = q.where(Vehicle.mileage >= filters.min_mileage)
    if filters.max_mileage is not None:
        q = q.where(Vehicle.mileage <= filters.max_mileage)
    return q


@track_db_operation("select", "vehicles")
async def find_vehicles(
    db: AsyncSession,
    filters: VehicleFilters,
    sort_by: Optional[str],
    page: int,
    limit: int,
) -> Tuple[List[Vehicle], int]:
    count_q = apply_filters(select(func.count(Vehicle.id)), filters)
    total = (await db.execute(count_q)).scalar_one()

    q = apply_filters(select(Vehicle), filters).order_by(*sort_order(sort_by))
    q = q.limit(limit).offset((page - 1) * limit)
    res = await db.execute(q)
    return res.scalars().all(), total


def canonical_ref(ref: str) -> str:
    """Numeric refs collapse to the plain id so `0001` and `1` share one cache entry."""
    return str(int(ref)) if ref.isascii() and ref.isdigit() else ref


async def get_available_vehicle(db: AsyncSession, ref: str) -> Optional[Vehicle]:
    """Look a vehicle up by numeric id or slug; only AVAILABLE ones are public."""
    match = Vehicle.slug == ref
    if ref.isascii() and ref.isdigit():
        match = or_(Vehicle.id == int(ref), match)
    res = await db.execute(
        select(Vehicle).where(match, Vehicle.status == VehicleStatus.AVAILABLE)
    )
    return res.scalars().first()


async def similar_vehicles(db: AsyncSession, vehicle: Vehicle) -> List[Vehicle]:
    res = await db.execute(
        select(Vehicle)
        .where(
            Vehicle.id != vehicle.id,
            Vehicle.status == VehicleStatus.AVAILABLE,
            or_(Vehicle.make == vehicle.make, Vehicle.body_type == vehicle.body_type),
        )
        .order_by(Vehicle.featured.desc(), Vehicle.created_at.desc(), Vehicle.id.desc())
        .limit(SIMILAR_LIMIT)
    )
    return res.scalars().all()


async def invalidate_vehicle_cache(vehicle: Optional[Vehicle] = None) -> None:
    """Drop cached listings, searches and the vehicle's own detail entries."""
    await performance_cache.clear_pattern("vehicles:")
    await performance_cache.clear_pattern("search:")
    if vehicle is not None:
        await performance_cache.clear_pattern(f"vehicle:{vehicle.id}")
        if vehicle.slug:
            await performance_cache.clear_pattern(f"vehicle:{vehicle.slug}")
