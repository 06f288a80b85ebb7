import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.db.session import get_db, get_session_factory
from app.models.vehicle import Vehicle
from app.schemas.vehicle import VehicleCreate, VehicleUpdate, VehicleFilters
from app.core.audit_decorator import audit_log
from app.core.auth_utils import check_not_found, rate_limited_admin
from app.core.cache import performance_cache, cache_keys
from app.core.config import settings
from app.core.enums import AuditAction, VehicleStatus
from app.core.errors import APIError
from app.core.response_builders import (
    success_response,
    build_pagination,
    build_vehicle_response,
    build_vehicle_response_list,
)
from app.services.vehicles import canonical_ref, find_vehicles, get_available_vehicle, similar_vehicles, invalidate_vehicle_cache
from app.utils.slug import vehicle_slug

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/vehicles", tags=["vehicles"])


def _parse_statuses(raw: Optional[str]) -> list:
    if not raw:
        return [VehicleStatus.AVAILABLE]
    statuses = []
    for token in raw.split(","):
        token = token.strip().upper()
        try:
            statuses.append(VehicleStatus(token))
        except ValueError:
            raise APIError(
                status_code=400,
                message="Validation failed",
                code="VALIDATION_ERROR",
                details=[{"field": "status", "message": f"Unknown status '{token}'"}],
            )
    return statuses


async def _search_page(db: AsyncSession, filters: VehicleFilters, sort_by: Optional[str], page: int, limit: int) -> dict:
    vehicles, total = await find_vehicles(db, filters, sort_by, page, limit)
    return {
        "vehicles": [v.model_dump(mode="json") for v in build_vehicle_response_list(vehicles)],
        "total": total,
        "pagination": build_pagination(page, limit, total).model_dump(),
    }


@router.get("")
async def list_vehicles(
    make: Optional[str] = Query(None),
    model: Optional[str] = Query(None),
    body_type: Optional[str] = Query(None),
    fuel_type: Optional[str] = Query(None),
    transmission: Optional[str] = Query(None),
    min_price: Optional[int] = Query(None, ge=0),
    max_price: Optional[int] = Query(None, ge=0),
    min_year: Optional[int] = Query(None),
    max_year: Optional[int] = Query(None),
    featured: bool = Query(False),
    sort_by: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    filters = VehicleFilters(
        make=make,
        model=model,
        body_type=body_type,
        fuel_type=fuel_type,
        transmission=transmission,
        min_price=min_price,
        max_price=max_price,
        min_year=min_year,
        max_year=max_year,
        featured=True if featured else None,
    )
    params = {**filters.model_dump(mode="json", exclude_none=True), "sort_by": sort_by, "page": page, "limit": limit}

    data = await performance_cache.get_or_compute(
        cache_keys.vehicles(params),
        lambda: _search_page(db, filters, sort_by, page, limit),
        settings.VEHICLES_LIST_CACHE_TTL,
    )
    return success_response(data)


@router.get("/search")
async def search_vehicles(
    q: Optional[str] = Query(None),
    make: Optional[str] = Query(None),
    model: Optional[str] = Query(None),
    body_type: Optional[str] = Query(None),
    fuel_type: Optional[str] = Query(None),
    transmission: Optional[str] = Query(None),
    color: Optional[str] = Query(None),
    min_price: Optional[int] = Query(None, ge=0),
    max_price: Optional[int] = Query(None, ge=0),
    min_year: Optional[int] = Query(None),
    max_year: Optional[int] = Query(None),
    min_mileage: Optional[int] = Query(None, ge=0),
    max_mileage: Optional[int] = Query(None, ge=0),
    status: Optional[str] = Query(None),
    featured: Optional[bool] = Query(None),
    sort_by: str = Query("newest"),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    filters = VehicleFilters(
        query=q,
        make=make,
        model=model,
        body_type=body_type,
        fuel_type=fuel_type,
        transmission=transmission,
        color=color,
        min_price=min_price,
        max_price=max_price,
        min_year=min_year,
        max_year=max_year,
        min_mileage=min_mileage,
        max_mileage=max_mileage,
        featured=featured,
        status=_parse_statuses(status),
    )
    applied = filters.model_dump(mode="json", exclude_none=True)
    params = {**applied, "sort_by": sort_by, "page": page, "limit": limit}

    result = await performance_cache.get_or_compute(
        cache_keys.vehicle_search(params),
        lambda: _search_page(db, filters, sort_by, page, limit),
        settings.VEHICLES_LIST_CACHE_TTL,
    )
    logger.info(f"Vehicle search '{q or ''}' matched {result['total']} vehicles")
    return success_response({
        "vehicles": result["vehicles"],
        "pagination": result["pagination"],
        "filters": {"applied": applied},
        "query": q or "",
        "total": result["total"],
    })


@router.get("/{ref}")
async def get_vehicle(ref: str, session_factory=Depends(get_session_factory)):
    """Vehicle by id or slug, with up to four similar vehicles."""
    ref = canonical_ref(ref)

    async def load():
        async with session_factory() as db:
            vehicle = await get_available_vehicle(db, ref)
            check_not_found(vehicle, "Vehicle")
            similar = await similar_vehicles(db, vehicle)
        return {
            "vehicle": build_vehicle_response(vehicle).model_dump(mode="json"),
            "similar_vehicles": [v.model_dump(mode="json") for v in build_vehicle_response_list(similar)],
        }

    data = await performance_cache.get_stale_while_revalidate(
        cache_keys.vehicle(ref),
        load,
        ttl=settings.VEHICLE_DETAIL_CACHE_TTL,
    )
    return success_response(data)


@router.post("")
@audit_log(AuditAction.CREATE_VEHICLE, "vehicles")
async def create_vehicle(
    payload: VehicleCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(rate_limited_admin),
):
    slug = payload.slug or vehicle_slug(payload.year, payload.make, payload.model)
    res = await db.execute(select(Vehicle.id).where(Vehicle.slug == slug))
    if res.scalars().first() is not None:
        raise APIError(status_code=409, message="A vehicle with this slug already exists", code="SLUG_EXISTS")

    vehicle = Vehicle(**payload.model_dump(exclude={"slug"}), slug=slug)
    db.add(vehicle)
    await db.commit()
    await db.refresh(vehicle)

    await invalidate_vehicle_cache(vehicle)
    logger.info(f"Vehicle {vehicle.id} created by user {current_user.id}")
    return success_response(build_vehicle_response(vehicle), "Vehicle created successfully")


@router.patch("/{vehicle_id}")
@audit_log(AuditAction.UPDATE_VEHICLE, "vehicles")
async def update_vehicle(
    vehicle_id: int,
    update: VehicleUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(rate_limited_admin),
):
    res = await db.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
    vehicle = res.scalars().first()
    check_not_found(vehicle, "Vehicle", vehicle_id)

    updates = update.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in updates.items():
        setattr(vehicle, field, value)

    db.add(vehicle)
    await db.commit()
    await db.refresh(vehicle)

    await invalidate_vehicle_cache(vehicle)
    return success_response({"id": vehicle.id, "updates": update.model_dump(mode="json", exclude_unset=True, exclude_none=True)})
