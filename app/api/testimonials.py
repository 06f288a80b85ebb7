import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.db.session import get_db
from app.models.testimonial import Testimonial
from app.models.vehicle import Vehicle
from app.schemas.testimonial import TestimonialCreate
from app.core.auth_utils import check_not_found
from app.core.cache import performance_cache, cache_keys, CACHE_TTL
from app.core.response_builders import success_response, build_testimonial_response

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/testimonials", tags=["testimonials"])


@router.get("")
async def list_testimonials(
    approved: bool = Query(False),
    vehicle_id: Optional[int] = Query(None),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    async def load():
        q = select(Testimonial).options(selectinload(Testimonial.vehicle))
        if approved:
            q = q.where(Testimonial.is_approved.is_(True), Testimonial.is_public.is_(True))
        if vehicle_id is not None:
            q = q.where(Testimonial.vehicle_id == vehicle_id)
        q = q.order_by(Testimonial.rating.desc(), Testimonial.created_at.desc(), Testimonial.id.desc()).limit(limit)
        res = await db.execute(q)
        testimonials = res.scalars().all()
        return {
            "testimonials": [
                build_testimonial_response(t, t.vehicle).model_dump(mode="json") for t in testimonials
            ],
            "total": len(testimonials),
        }

    params = {"approved": approved, "vehicle_id": vehicle_id, "limit": limit}
    data = await performance_cache.get_or_compute(cache_keys.testimonials(params), load, CACHE_TTL["SHORT"])
    return success_response(data)


@router.post("")
async def create_testimonial(payload: TestimonialCreate, db: AsyncSession = Depends(get_db)):
    vehicle = None
    if payload.vehicle_id is not None:
        res = await db.execute(select(Vehicle).where(Vehicle.id == payload.vehicle_id))
        vehicle = res.scalars().first()
        check_not_found(vehicle, "Vehicle", payload.vehicle_id, code="VEHICLE_NOT_FOUND")

    testimonial = Testimonial(
        **payload.model_dump(),
        is_verified=False,
        is_approved=False,
        is_public=True,
    )
    db.add(testimonial)
    await db.commit()
    await db.refresh(testimonial)

    logger.info(f"Testimonial {testimonial.id} submitted by {testimonial.customer_name}")
    return success_response(
        build_testimonial_response(testimonial, vehicle),
        "Thank you! Your testimonial has been submitted for review.",
    )
