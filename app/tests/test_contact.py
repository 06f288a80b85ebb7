"""
Tests for the public contact form
"""

import pytest
from sqlalchemy.future import select

from app.core.enums import InquiryType, LeadStatus
from app.models.contact import Contact, VehicleInquiry
from app.services import email, sms


@pytest.fixture
def outbox(monkeypatch):
    """Capture integration calls instead of sending anything."""
    sent = []

    async def fake_send_email(to, subject, html, reply_to=None):
        sent.append(("email", to, subject))
        return True

    async def fake_send_sms(to, body):
        sent.append(("sms", to, body))
        return True

    monkeypatch.setattr(email, "send_email", fake_send_email)
    monkeypatch.setattr(sms, "send_sms", fake_send_sms)
    monkeypatch.setattr(email.settings, "ADMIN_EMAIL", "sales@dealer.test")
    return sent


@pytest.mark.integration
class TestContactSubmission:

    @pytest.mark.asyncio
    async def test_general_inquiry_is_stored_sanitised(self, test_client, db_session, valid_contact_data):
        payload = {**valid_contact_data, "message": "Hello <b>there</b>, is financing available?"}

        response = await test_client.post("/api/contact", json=payload)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Contact form submitted successfully"
        contact_id = body["data"]["submission_id"]

        contact = (await db_session.execute(select(Contact).where(Contact.id == contact_id))).scalars().first()
        assert contact.email == "john@example.com"
        assert contact.name == "John ONeil"
        assert contact.message == "Hello there, is financing available?"
        assert contact.subject == "General Inquiry"
        assert contact.status == LeadStatus.NEW
        assert contact.client_ip == "127.0.0.1"

        inquiries = (await db_session.execute(select(VehicleInquiry))).scalars().all()
        assert inquiries == []

    @pytest.mark.asyncio
    async def test_vehicle_inquiry_creates_linked_record(self, test_client, db_session, vehicle_factory, valid_contact_data):
        vehicle = await vehicle_factory()

        response = await test_client.post("/api/contact", json={**valid_contact_data, "vehicle_id": vehicle.id})

        assert response.status_code == 200
        contact = (await db_session.execute(select(Contact))).scalars().first()
        assert contact.subject == f"Vehicle Inquiry - ID: {vehicle.id}"
        inquiry = (await db_session.execute(select(VehicleInquiry))).scalars().first()
        assert inquiry.vehicle_id == vehicle.id
        assert inquiry.inquiry_type == InquiryType.CONTACT_FORM

    @pytest.mark.asyncio
    async def test_unknown_vehicle(self, test_client, valid_contact_data):
        response = await test_client.post("/api/contact", json={**valid_contact_data, "vehicle_id": 4242})

        assert response.status_code == 404
        assert response.json()["code"] == "VEHICLE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_honeypot_pretends_success(self, test_client, db_session, valid_contact_data):
        response = await test_client.post("/api/contact", json={**valid_contact_data, "honeypot": "http://spam"})

        assert response.status_code == 200
        assert response.json()["data"]["submission_id"] == "honeypot"
        assert (await db_session.execute(select(Contact))).scalars().all() == []

    @pytest.mark.asyncio
    async def test_notifications_sent_in_background(self, test_client, outbox, vehicle_factory, valid_contact_data):
        vehicle = await vehicle_factory(make="Honda", model="Civic", year=2021)

        await test_client.post("/api/contact", json={**valid_contact_data, "vehicle_id": vehicle.id})

        kinds = [(kind, to) for kind, to, _ in outbox]
        assert ("email", "sales@dealer.test") in kinds
        assert ("email", "john@example.com") in kinds
        assert ("sms", "+1 (555) 123-4567") in kinds
        admin_subject = next(s for kind, to, s in outbox if to == "sales@dealer.test")
        assert admin_subject == "New inquiry: 2021 Honda Civic"

    @pytest.mark.asyncio
    async def test_no_sms_without_phone(self, test_client, outbox, valid_contact_data):
        payload = {k: v for k, v in valid_contact_data.items() if k != "phone"}

        response = await test_client.post("/api/contact", json=payload)

        assert response.status_code == 200
        assert all(kind == "email" for kind, _, _ in outbox)

    @pytest.mark.asyncio
    async def test_unconfigured_integrations_do_not_fail_request(self, test_client, valid_contact_data):
        response = await test_client.post("/api/contact", json=valid_contact_data)
        assert response.status_code == 200

    @pytest.mark.idempotency
    @pytest.mark.asyncio
    async def test_idempotency_key_replays_first_response(self, test_client, db_session, valid_contact_data, valid_idempotency_key):
        headers = {"Idempotency-Key": valid_idempotency_key}

        first = await test_client.post("/api/contact", json=valid_contact_data, headers=headers)
        second = await test_client.post("/api/contact", json=valid_contact_data, headers=headers)

        assert first.json() == second.json()
        assert len((await db_session.execute(select(Contact))).scalars().all()) == 1


@pytest.mark.integration
class TestContactValidation:

    @pytest.mark.parametrize("field,value", [
        ("name", "J"),
        ("name", "John123"),
        ("email", "not-an-email"),
        ("phone", "12345"),
        ("phone", "555-CALL-NOW"),
        ("message", "too short"),
        ("consent", False),
    ])
    @pytest.mark.asyncio
    async def test_invalid_field_is_reported(self, test_client, valid_contact_data, field, value):
        response = await test_client.post("/api/contact", json={**valid_contact_data, field: value})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Validation failed"
        assert body["code"] == "VALIDATION_ERROR"
        assert field in [d["field"] for d in body["details"]]

    @pytest.mark.asyncio
    async def test_missing_fields_all_reported(self, test_client):
        response = await test_client.post("/api/contact", json={})

        fields = {d["field"] for d in response.json()["details"]}
        assert {"name", "email", "message", "consent"} <= fields

    @pytest.mark.asyncio
    async def test_message_upper_bound(self, test_client, valid_contact_data):
        response = await test_client.post("/api/contact", json={**valid_contact_data, "message": "x" * 1001})
        assert response.status_code == 400


@pytest.mark.integration
@pytest.mark.rate_limit
class TestContactRateLimit:

    @pytest.mark.asyncio
    async def test_fourth_submission_in_window_is_rejected(self, test_client, valid_contact_data):
        for _ in range(3):
            assert (await test_client.post("/api/contact", json=valid_contact_data)).status_code == 200

        response = await test_client.post("/api/contact", json=valid_contact_data)

        assert response.status_code == 429
        assert response.json() == {
            "success": False,
            "error": "Too many requests. Please try again later.",
            "code": "RATE_LIMIT",
        }

    @pytest.mark.asyncio
    async def test_limit_applies_before_validation(self, test_client, valid_contact_data):
        for _ in range(3):
            await test_client.post("/api/contact", json=valid_contact_data)

        response = await test_client.post("/api/contact", json={})

        assert response.status_code == 429

    @pytest.mark.asyncio
    async def test_keyed_on_first_forwarded_address(self, test_client, valid_contact_data):
        for _ in range(3):
            await test_client.post("/api/contact", json=valid_contact_data, headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"})

        blocked = await test_client.post("/api/contact", json=valid_contact_data, headers={"X-Forwarded-For": "203.0.113.9"})
        other = await test_client.post("/api/contact", json=valid_contact_data, headers={"X-Forwarded-For": "198.51.100.7"})

        assert blocked.status_code == 429
        assert other.status_code == 200


@pytest.mark.integration
class TestContactHealth:

    @pytest.mark.asyncio
    async def test_operational(self, test_client):
        response = await test_client.get("/api/contact")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "Contact form API is operational"
