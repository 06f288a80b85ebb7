import pytest
from sqlalchemy.future import select

from app.core.audit_log import log_audit
from app.core.enums import AuditAction
from app.models import Audit
from app.utils.hashing import payload_hash


async def audit_rows(db_session):
    res = await db_session.execute(select(Audit).order_by(Audit.id))
    return res.scalars().all()


@pytest.mark.audit
class TestAuditLogging:

    @pytest.mark.asyncio
    async def test_log_audit_hashes_payload(self, db_session, admin_user):
        await log_audit(db_session, admin_user.id, AuditAction.UPDATE_CONTACT, {"status": "CLOSED"}, resource="contacts")
        await db_session.commit()

        rows = await audit_rows(db_session)
        assert len(rows) == 1
        assert rows[0].action == "update_contact"
        assert rows[0].resource == "contacts"
        assert rows[0].payload_hash == payload_hash({"status": "CLOSED"})

    def test_payload_hash_is_order_independent(self):
        assert payload_hash({"a": 1, "b": 2}) == payload_hash({"b": 2, "a": 1})
        assert payload_hash(None) == payload_hash({})
        assert len(payload_hash({"a": 1})) == 64

    @pytest.mark.asyncio
    @pytest.mark.integration
    async def test_login_is_audited(self, test_client, db_session, admin_user):
        response = await test_client.post(
            "/api/auth/login",
            data={"username": "admin", "password": "correct-horse"},
        )
        assert response.status_code == 200

        rows = await audit_rows(db_session)
        assert [(r.action, r.resource, r.user_id) for r in rows] == [("login", "users", admin_user.id)]

    @pytest.mark.asyncio
    @pytest.mark.integration
    async def test_admin_mutation_is_audited(self, test_client, db_session, admin_headers, admin_user, lead_factory):
        contact, _ = await lead_factory()

        await test_client.patch(
            f"/api/admin/contacts/{contact.id}",
            json={"status": "CLOSED"},
            headers=admin_headers,
        )

        rows = await audit_rows(db_session)
        assert len(rows) == 1
        assert rows[0].action == AuditAction.UPDATE_CONTACT.value
        assert rows[0].user_id == admin_user.id

    @pytest.mark.asyncio
    @pytest.mark.integration
    async def test_failed_mutation_not_audited(self, test_client, db_session, admin_headers):
        response = await test_client.patch("/api/admin/contacts/999", json={"status": "CLOSED"}, headers=admin_headers)

        assert response.status_code == 404
        assert await audit_rows(db_session) == []

    @pytest.mark.asyncio
    @pytest.mark.integration
    async def test_reads_not_audited(self, test_client, db_session, admin_headers):
        await test_client.get("/api/admin/contacts", headers=admin_headers)
        assert await audit_rows(db_session) == []
