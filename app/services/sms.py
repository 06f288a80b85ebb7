"""SMS through the Twilio REST API"""
import logging
from app.core.config import settings
from app.core.metrics import integration_deliveries
from app.services.delivery import deliver

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


async def send_sms(to: str, body: str) -> bool:
    if not settings.sms_configured:
        logger.info(f"SMS not configured, skipping message to {to}")
        integration_deliveries.labels(channel="sms", status="skipped").inc()
        return False

    return await deliver(
        "sms",
        TWILIO_MESSAGES_URL.format(sid=settings.TWILIO_ACCOUNT_SID),
        data={"From": settings.TWILIO_PHONE_NUMBER, "To": to, "Body": body},
        auth=(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN),
    )


async def send_contact_acknowledgement(contact) -> bool:
    if not contact.phone:
        return False
    first_name = contact.name.split()[0] if contact.name else "there"
    return await send_sms(
        contact.phone,
        f"Hi {first_name}, thanks for contacting us. We will get back to you within 24 hours.",
    )
