import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.db.session import get_db
from app.models.contact import Contact, VehicleInquiry
from app.models.testimonial import Testimonial
from app.schemas.contact import LeadStatusUpdate
from app.schemas.testimonial import TestimonialModeration
from app.core.audit_decorator import audit_log
from app.core.auth_utils import check_not_found, rate_limited_admin
from app.core.cache import performance_cache
from app.core.enums import AuditAction, LeadStatus
from app.core.response_builders import (
    success_response,
    build_contact_response,
    build_inquiry_response,
    build_testimonial_response,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/contacts")
async def list_contacts(
    status: Optional[LeadStatus] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(rate_limited_admin),
):
    q = select(Contact)
    if status:
        q = q.where(Contact.status == status)
    q = q.order_by(Contact.created_at.desc(), Contact.id.desc()).limit(limit)
    res = await db.execute(q)
    contacts = res.scalars().all()
    return success_response({
        "contacts": [build_contact_response(c) for c in contacts],
        "total": len(contacts),
    })


@router.patch("/contacts/{contact_id}")
@audit_log(AuditAction.UPDATE_CONTACT, "contacts")
async def update_contact(
    contact_id: int,
    update: LeadStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(rate_limited_admin),
):
    res = await db.execute(select(Contact).where(Contact.id == contact_id))
    contact = res.scalars().first()
    check_not_found(contact, "Contact", contact_id)

    contact.status = update.status
    await db.commit()
    await db.refresh(contact)
    return success_response(build_contact_response(contact), "Contact updated successfully")


@router.get("/inquiries")
async def list_inquiries(
    status: Optional[LeadStatus] = Query(None),
    vehicle_id: Optional[int] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(rate_limited_admin),
):
    q = select(VehicleInquiry)
    if status:
        q = q.where(VehicleInquiry.status == status)
    if vehicle_id is not None:
        q = q.where(VehicleInquiry.vehicle_id == vehicle_id)
    q = q.order_by(VehicleInquiry.created_at.desc(), VehicleInquiry.id.desc()).limit(limit)
    res = await db.execute(q)
    inquiries = res.scalars().all()
    return success_response({
        "inquiries": [build_inquiry_response(i) for i in inquiries],
        "total": len(inquiries),
    })


@router.patch("/inquiries/{inquiry_id}")
@audit_log(AuditAction.UPDATE_INQUIRY, "vehicle_inquiries")
async def update_inquiry(
    inquiry_id: int,
    update: LeadStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(rate_limited_admin),
):
    res = await db.execute(select(VehicleInquiry).where(VehicleInquiry.id == inquiry_id))
    inquiry = res.scalars().first()
    check_not_found(inquiry, "Inquiry", inquiry_id)

    inquiry.status = update.status
    await db.commit()
    await db.refresh(inquiry)
    return success_response(build_inquiry_response(inquiry), "Inquiry updated successfully")


@router.get("/testimonials")
async def list_testimonials_for_moderation(
    pending: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(rate_limited_admin),
):
    q = select(Testimonial).options(selectinload(Testimonial.vehicle))
    if pending:
        q = q.where(Testimonial.is_approved.is_(False))
    q = q.order_by(Testimonial.created_at.desc(), Testimonial.id.desc()).limit(limit)
    res = await db.execute(q)
    testimonials = res.scalars().all()
    return success_response({
        "testimonials": [build_testimonial_response(t, t.vehicle) for t in testimonials],
        "total": len(testimonials),
    })


@router.patch("/testimonials/{testimonial_id}")
@audit_log(AuditAction.MODERATE_TESTIMONIAL, "testimonials")
async def moderate_testimonial(
    testimonial_id: int,
    update: TestimonialModeration,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(rate_limited_admin),
):
    res = await db.execute(
        select(Testimonial).options(selectinload(Testimonial.vehicle)).where(Testimonial.id == testimonial_id)
    )
    testimonial = res.scalars().first()
    check_not_found(testimonial, "Testimonial", testimonial_id)

    for field, value in update.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(testimonial, field, value)
    await db.commit()
    await db.refresh(testimonial)

    await performance_cache.clear_pattern("testimonials:")
    logger.info(f"Testimonial {testimonial_id} moderated by user {current_user.id}")
    return success_response(
        build_testimonial_response(testimonial, testimonial.vehicle),
        "Testimonial updated successfully",
    )
