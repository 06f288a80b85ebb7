import pytest

from app.core.redis import set_redis
from app.db.session import get_db
from app.main import app


class FailingSession:
    async def execute(self, *args, **kwargs):
        raise ConnectionError("database is gone")


class UnreachableRedis:
    async def ping(self):
        raise ConnectionError("connection refused")


@pytest.fixture
def broken_db():
    async def override_get_db():
        yield FailingSession()

    return override_get_db


@pytest.mark.integration
class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        response = await test_client.get("/api/health")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert data["services"]["database"]["status"] == "healthy"
        assert data["services"]["cache"]["mode"] == "memory"
        assert "memory_items" in data["services"]["cache"]
        assert data["uptime"] >= 0

    @pytest.mark.asyncio
    async def test_degraded_when_redis_unreachable(self, test_client):
        set_redis(UnreachableRedis())

        response = await test_client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "degraded"
        assert response.json()["data"]["services"]["cache"]["healthy"] is False

    @pytest.mark.asyncio
    async def test_unhealthy_when_database_down(self, test_client, broken_db):
        app.dependency_overrides[get_db] = broken_db

        response = await test_client.get("/api/health")

        assert response.status_code == 503
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "HEALTH_CHECK_FAILED"
        assert body["data"]["services"]["database"]["error"] == "database is gone"

    @pytest.mark.asyncio
    async def test_db_probe(self, test_client, broken_db):
        ok = await test_client.get("/api/health/db")
        assert ok.status_code == 200
        assert ok.json()["data"]["status"] == "healthy"

        app.dependency_overrides[get_db] = broken_db
        failed = await test_client.get("/api/health/db")
        assert failed.status_code == 503
        assert failed.json()["error"] == "Database unavailable"

    @pytest.mark.asyncio
    async def test_redis_probe(self, test_client):
        response = await test_client.get("/api/health/redis")
        assert response.json()["data"] == {"healthy": True, "mode": "memory"}


@pytest.mark.integration
class TestMonitoring:

    @pytest.mark.asyncio
    async def test_metrics(self, test_client):
        await test_client.get("/api/health")

        response = await test_client.get("/metrics")

        assert response.status_code == 200
        assert "http_requests_total" in response.text
        assert 'endpoint="/api/health"' in response.text

    @pytest.mark.asyncio
    async def test_readiness(self, test_client):
        response = await test_client.get("/readiness")
        assert response.json() == {"ready": True, "cache": "memory"}

    @pytest.mark.asyncio
    async def test_root(self, test_client):
        response = await test_client.get("/")
        assert response.json()["health"] == "/api/health"
