import pytest

from app.core.security import create_access_token, hash_password, verify_password


@pytest.mark.unit
@pytest.mark.auth
class TestPasswords:

    def test_hash_and_verify(self):
        hashed = hash_password("s3cret")

        assert hashed != "s3cret"
        assert verify_password("s3cret", hashed)
        assert not verify_password("wrong", hashed)

    def test_malformed_hash(self):
        assert verify_password("s3cret", "not-a-hash") is False


@pytest.mark.integration
@pytest.mark.auth
class TestLogin:

    @pytest.mark.asyncio
    async def test_login_returns_token(self, test_client, admin_user):
        response = await test_client.post(
            "/api/auth/login",
            data={"username": "admin", "password": "correct-horse"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"

        listed = await test_client.get(
            "/api/admin/contacts",
            headers={"Authorization": f"Bearer {body['access_token']}"},
        )
        assert listed.status_code == 200

    @pytest.mark.asyncio
    async def test_wrong_password(self, test_client, admin_user):
        response = await test_client.post(
            "/api/auth/login",
            data={"username": "admin", "password": "battery-staple"},
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid credentials", "code": "INVALID_CREDENTIALS"}

    @pytest.mark.asyncio
    async def test_unknown_user(self, test_client):
        response = await test_client.post(
            "/api/auth/login",
            data={"username": "ghost", "password": "correct-horse"},
        )
        assert response.status_code == 400


@pytest.mark.integration
@pytest.mark.auth
class TestTokens:

    @pytest.mark.asyncio
    async def test_missing_token(self, test_client):
        response = await test_client.get("/api/admin/contacts")

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Not authenticated", "code": "UNAUTHORIZED"}

    @pytest.mark.asyncio
    async def test_expired_token(self, test_client, expired_token):
        response = await test_client.get(
            "/api/admin/contacts",
            headers={"Authorization": f"Bearer {expired_token}"},
        )

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid token"

    @pytest.mark.asyncio
    async def test_garbage_token(self, test_client):
        response = await test_client.get("/api/admin/contacts", headers={"Authorization": "Bearer abc.def.ghi"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_token_for_deleted_user(self, test_client):
        token = create_access_token("4242", "ADMIN")

        response = await test_client.get("/api/admin/contacts", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["error"] == "User not found"

    @pytest.mark.asyncio
    async def test_staff_is_forbidden(self, test_client, staff_headers):
        response = await test_client.get("/api/admin/pricing/rules", headers=staff_headers)

        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"


@pytest.mark.integration
class TestErrorEnvelope:

    @pytest.mark.asyncio
    async def test_unknown_route(self, test_client):
        response = await test_client.get("/api/nowhere")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Not Found"}

    @pytest.mark.asyncio
    async def test_wrong_method(self, test_client):
        response = await test_client.delete("/api/vehicles")

        assert response.status_code == 405
        assert response.json()["success"] is False
