"""Transactional email through the Resend HTTP API"""
import logging
from html import escape
from typing import Optional
from app.core.config import settings
from app.core.metrics import integration_deliveries
from app.services.delivery import deliver

logger = logging.getLogger(__name__)


async def send_email(to: str, subject: str, html: str, reply_to: Optional[str] = None) -> bool:
    if not settings.email_configured:
        logger.info(f"Email not configured, skipping '{subject}' to {to}")
        integration_deliveries.labels(channel="email", status="skipped").inc()
        return False

    payload = {"from": settings.EMAIL_FROM, "to": [to], "subject": subject, "html": html}
    if reply_to:
        payload["reply_to"] = reply_to
    return await deliver(
        "email",
        settings.RESEND_API_URL,
        json=payload,
        headers={"Authorization": f"Bearer {settings.RESEND_API_KEY}"},
    )


async def send_contact_notification(contact, vehicle=None) -> bool:
    if not settings.ADMIN_EMAIL:
        logger.info("ADMIN_EMAIL not set, skipping contact notification")
        return False
    about = f"{vehicle.year} {vehicle.make} {vehicle.model}" if vehicle else "General Inquiry"
    html = (
        f"<h2>New contact message</h2>"
        f"<p><strong>From:</strong> {escape(contact.name)} &lt;{escape(contact.email)}&gt;</p>"
        f"<p><strong>Phone:</strong> {escape(contact.phone or '-')}</p>"
        f"<p><strong>About:</strong> {escape(about)}</p>"
        f"<p>{escape(contact.message)}</p>"
    )
    return await send_email(settings.ADMIN_EMAIL, f"New inquiry: {about}", html, reply_to=contact.email)


async def send_contact_auto_reply(contact) -> bool:
    html = (
        f"<p>Hi {escape(contact.name)},</p>"
        "<p>Thanks for getting in touch. We have received your message and will "
        "get back to you within 24 hours.</p>"
    )
    return await send_email(contact.email, "We received your message", html)


async def send_inventory_alert(alert, vehicle) -> bool:
    title = f"{vehicle.year} {vehicle.make} {vehicle.model}"
    url = f"{settings.SITE_URL}/vehicles/{vehicle.slug or vehicle.id}"
    html = (
        f"<p>Hi {escape(alert.customer_name)},</p>"
        f"<p>A vehicle matching your alert just arrived: <strong>{escape(title)}</strong> "
        f"for ${vehicle.price:,} with {vehicle.mileage:,} km.</p>"
        f'<p><a href="{escape(url)}">View vehicle</a></p>'
    )
    return await send_email(alert.customer_email, f"New match: {title}", html)
