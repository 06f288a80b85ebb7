import logging
from typing import Optional
from datetime import datetime, timezone
from fastapi import APIRouter, BackgroundTasks, Depends, Header, Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.db.session import get_db
from app.models.contact import Contact, VehicleInquiry
from app.models.vehicle import Vehicle
from app.schemas.contact import ContactIn
from app.core.auth_utils import check_not_found
from app.core.enums import LeadStatus, InquiryType
from app.core.errors import APIError
from app.core.rate_limit import check_contact_rate_limit
from app.core.response_builders import success_response
from app.services.email import send_contact_notification, send_contact_auto_reply
from app.services.sms import send_contact_acknowledgement
from app.utils.client import client_ip
from app.utils.idempotency import get_idempotent, set_idempotent
from app.utils.sanitize import sanitize_text, sanitize_email, sanitize_phone

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/contact", tags=["contact"])

SUCCESS_MESSAGE = "Your message has been sent successfully. We will get back to you within 24 hours."


async def enforce_contact_rate_limit(request: Request) -> None:
    ip = client_ip(request)
    try:
        await check_contact_rate_limit(ip)
    except APIError:
        logger.warning(f"Rate limit exceeded for contact form submission from {ip}")
        raise


@router.post("", dependencies=[Depends(enforce_contact_rate_limit)])
async def submit_contact(
    payload: ContactIn,
    request: Request,
    background_tasks: BackgroundTasks,
    idempotency_key: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    ip = client_ip(request)
    user_agent = request.headers.get("user-agent", "unknown")

    if payload.honeypot:
        logger.warning(f"Contact form honeypot triggered from {ip}")
        return success_response({"message": "Success", "submission_id": "honeypot"})

    if idempotency_key:
        prev = await get_idempotent(idempotency_key)
        if prev:
            return prev

    name = sanitize_text(payload.name)
    email = sanitize_email(payload.email)
    phone = sanitize_phone(payload.phone) if payload.phone else None
    message = sanitize_text(payload.message)

    vehicle = None
    if payload.vehicle_id:
        res = await db.execute(select(Vehicle).where(Vehicle.id == payload.vehicle_id))
        vehicle = res.scalars().first()
        check_not_found(vehicle, "Vehicle", payload.vehicle_id, code="VEHICLE_NOT_FOUND")

    contact = Contact(
        name=name,
        email=email,
        phone=phone,
        message=message,
        subject=f"Vehicle Inquiry - ID: {vehicle.id}" if vehicle else "General Inquiry",
        client_ip=ip,
        user_agent=user_agent,
        status=LeadStatus.NEW,
    )
    db.add(contact)

    if vehicle:
        db.add(VehicleInquiry(
            vehicle_id=vehicle.id,
            name=name,
            email=email,
            phone=phone or "",
            message=message,
            inquiry_type=InquiryType.CONTACT_FORM,
            client_ip=ip,
            status=LeadStatus.NEW,
        ))

    await db.commit()
    await db.refresh(contact)

    logger.info(
        f"Contact form submitted: id={contact.id} vehicle={bool(vehicle)} phone={bool(phone)} ip={ip}"
    )

    background_tasks.add_task(send_contact_notification, contact, vehicle)
    background_tasks.add_task(send_contact_auto_reply, contact)
    if phone:
        background_tasks.add_task(send_contact_acknowledgement, contact)

    out = success_response(
        {"message": SUCCESS_MESSAGE, "submission_id": contact.id},
        "Contact form submitted successfully",
    )
    if idempotency_key:
        await set_idempotent(idempotency_key, out)
    return out


@router.get("")
async def contact_health(db: AsyncSession = Depends(get_db)):
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Contact form API health check failed: {e}")
        raise APIError(
            status_code=503,
            message="Contact form API is not operational",
            code="HEALTH_CHECK_FAILED",
        )
    return success_response({
        "status": "Contact form API is operational",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })
