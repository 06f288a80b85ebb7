"""
Tests for the public vehicle catalog and admin vehicle management
"""

import pytest
from datetime import datetime, timedelta, timezone
from sqlalchemy.future import select

from app.core.cache import performance_cache, cache_keys
from app.core.enums import BodyType, FuelType, Transmission, VehicleStatus
from app.models.audit import Audit


@pytest.mark.integration
class TestVehicleList:

    @pytest.mark.asyncio
    async def test_only_available_vehicles_are_listed(self, test_client, vehicle_factory):
        available = await vehicle_factory()
        await vehicle_factory(status=VehicleStatus.SOLD)

        response = await test_client.get("/api/vehicles")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [v["id"] for v in body["data"]["vehicles"]] == [available.id]
        assert body["data"]["total"] == 1

    @pytest.mark.asyncio
    async def test_pagination_block(self, test_client, vehicle_factory):
        for _ in range(5):
            await vehicle_factory()

        response = await test_client.get("/api/vehicles", params={"page": 2, "limit": 2})

        pagination = response.json()["data"]["pagination"]
        assert pagination == {
            "page": 2,
            "limit": 2,
            "total": 5,
            "total_pages": 3,
            "has_next": True,
            "has_prev": True,
        }
        assert len(response.json()["data"]["vehicles"]) == 2

    @pytest.mark.asyncio
    async def test_default_order_is_featured_then_newest(self, test_client, vehicle_factory):
        now = datetime.now(timezone.utc)
        old = await vehicle_factory(created_at=now - timedelta(days=3))
        new = await vehicle_factory(created_at=now - timedelta(days=1))
        featured = await vehicle_factory(featured=True, created_at=now - timedelta(days=10))

        response = await test_client.get("/api/vehicles")

        assert [v["id"] for v in response.json()["data"]["vehicles"]] == [featured.id, new.id, old.id]

    @pytest.mark.asyncio
    async def test_price_sort(self, test_client, vehicle_factory):
        mid = await vehicle_factory(price=20000)
        low = await vehicle_factory(price=10000)
        high = await vehicle_factory(price=30000)

        response = await test_client.get("/api/vehicles", params={"sort_by": "price-low"})
        assert [v["id"] for v in response.json()["data"]["vehicles"]] == [low.id, mid.id, high.id]

        response = await test_client.get("/api/vehicles", params={"sort_by": "price-high"})
        assert [v["id"] for v in response.json()["data"]["vehicles"]] == [high.id, mid.id, low.id]

    @pytest.mark.asyncio
    async def test_filters_are_case_insensitive_contains(self, test_client, vehicle_factory):
        bmw = await vehicle_factory(make="BMW", model="X5", body_type=BodyType.SUV, transmission=Transmission.AUTOMATIC)
        await vehicle_factory(make="Toyota", model="Yaris", body_type=BodyType.HATCHBACK)

        response = await test_client.get("/api/vehicles", params={"make": "bm", "body_type": "suv", "transmission": "auto"})

        assert [v["id"] for v in response.json()["data"]["vehicles"]] == [bmw.id]

    @pytest.mark.asyncio
    async def test_price_and_year_ranges(self, test_client, vehicle_factory):
        hit = await vehicle_factory(price=15000, year=2019)
        await vehicle_factory(price=25000, year=2019)
        await vehicle_factory(price=15000, year=2015)

        response = await test_client.get(
            "/api/vehicles",
            params={"min_price": 10000, "max_price": 20000, "min_year": 2018, "max_year": 2020},
        )

        assert [v["id"] for v in response.json()["data"]["vehicles"]] == [hit.id]

    @pytest.mark.asyncio
    async def test_limit_out_of_range_is_validation_error(self, test_client):
        response = await test_client.get("/api/vehicles", params={"limit": 101})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"][0]["field"] == "limit"

    @pytest.mark.asyncio
    async def test_listing_is_cached_until_invalidated(self, test_client, vehicle_factory):
        await vehicle_factory()
        first = await test_client.get("/api/vehicles")
        assert first.json()["data"]["total"] == 1

        # a row written behind the API's back is not visible until the cache is dropped
        await vehicle_factory()
        cached = await test_client.get("/api/vehicles")
        assert cached.json()["data"]["total"] == 1

        await performance_cache.clear_pattern("vehicles:")
        fresh = await test_client.get("/api/vehicles")
        assert fresh.json()["data"]["total"] == 2


@pytest.mark.integration
class TestVehicleSearch:

    @pytest.mark.asyncio
    async def test_free_text_query(self, test_client, vehicle_factory):
        hit = await vehicle_factory(make="Volvo", model="XC60", description="Panoramic roof and heated seats")
        await vehicle_factory(make="Volvo", model="V40", description="Compact")

        response = await test_client.get("/api/vehicles/search", params={"q": "panoramic"})

        data = response.json()["data"]
        assert [v["id"] for v in data["vehicles"]] == [hit.id]
        assert data["query"] == "panoramic"
        assert data["total"] == 1
        assert data["filters"]["applied"]["query"] == "panoramic"

    @pytest.mark.asyncio
    async def test_wildcards_in_terms_match_literally(self, test_client, vehicle_factory):
        await vehicle_factory(make="Volvo", model="XC60")

        by_query = await test_client.get("/api/vehicles/search", params={"q": "%"})
        by_make = await test_client.get("/api/vehicles/search", params={"make": "V_lvo"})

        assert by_query.json()["data"]["total"] == 0
        assert by_make.json()["data"]["total"] == 0

    @pytest.mark.asyncio
    async def test_status_list_and_mileage(self, test_client, vehicle_factory):
        sold = await vehicle_factory(status=VehicleStatus.SOLD, mileage=10000)
        reserved = await vehicle_factory(status=VehicleStatus.RESERVED, mileage=20000)
        await vehicle_factory(mileage=5000)

        response = await test_client.get(
            "/api/vehicles/search",
            params={"status": "sold,reserved", "sort_by": "mileage-low", "max_mileage": 50000},
        )

        assert [v["id"] for v in response.json()["data"]["vehicles"]] == [sold.id, reserved.id]

    @pytest.mark.asyncio
    async def test_unknown_status_is_rejected(self, test_client):
        response = await test_client.get("/api/vehicles/search", params={"status": "SCRAPPED"})

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "status"

    @pytest.mark.asyncio
    async def test_fuel_type_and_color(self, test_client, vehicle_factory):
        hit = await vehicle_factory(fuel_type=FuelType.PLUGIN_HYBRID, color="Midnight Blue")
        await vehicle_factory(fuel_type=FuelType.DIESEL, color="Blue")

        response = await test_client.get("/api/vehicles/search", params={"fuel_type": "hybrid", "color": "blue"})

        assert [v["id"] for v in response.json()["data"]["vehicles"]] == [hit.id]


@pytest.mark.integration
class TestVehicleDetail:

    @pytest.mark.asyncio
    async def test_by_id_and_slug(self, test_client, vehicle_factory):
        vehicle = await vehicle_factory(slug="2020-toyota-corolla-abc123")

        by_id = await test_client.get(f"/api/vehicles/{vehicle.id}")
        by_slug = await test_client.get("/api/vehicles/2020-toyota-corolla-abc123")

        assert by_id.status_code == 200
        assert by_id.json()["data"]["vehicle"]["id"] == vehicle.id
        assert by_slug.json()["data"]["vehicle"]["id"] == vehicle.id

    @pytest.mark.asyncio
    async def test_similar_vehicles_share_make_or_body(self, test_client, vehicle_factory):
        vehicle = await vehicle_factory(make="Audi", body_type=BodyType.SEDAN)
        same_make = await vehicle_factory(make="Audi", body_type=BodyType.SUV)
        same_body = await vehicle_factory(make="Kia", body_type=BodyType.SEDAN)
        await vehicle_factory(make="Kia", body_type=BodyType.VAN)
        await vehicle_factory(make="Audi", status=VehicleStatus.SOLD)

        response = await test_client.get(f"/api/vehicles/{vehicle.id}")

        similar = {v["id"] for v in response.json()["data"]["similar_vehicles"]}
        assert similar == {same_make.id, same_body.id}

    @pytest.mark.asyncio
    async def test_similar_vehicles_capped_at_four(self, test_client, vehicle_factory):
        vehicle = await vehicle_factory()
        for _ in range(6):
            await vehicle_factory()

        response = await test_client.get(f"/api/vehicles/{vehicle.id}")

        assert len(response.json()["data"]["similar_vehicles"]) == 4

    @pytest.mark.asyncio
    async def test_unavailable_vehicle_is_not_found(self, test_client, vehicle_factory):
        sold = await vehicle_factory(status=VehicleStatus.SOLD)

        response = await test_client.get(f"/api/vehicles/{sold.id}")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Vehicle not found", "code": "NOT_FOUND"}

    @pytest.mark.asyncio
    async def test_detail_lands_in_cache(self, test_client, vehicle_factory):
        vehicle = await vehicle_factory()
        await test_client.get(f"/api/vehicles/{vehicle.id}")

        cached = await performance_cache.get(cache_keys.vehicle(str(vehicle.id)))
        assert cached["vehicle"]["id"] == vehicle.id

    @pytest.mark.asyncio
    async def test_padded_id_sees_price_update(self, test_client, admin_headers, vehicle_factory):
        vehicle = await vehicle_factory(price=20000)
        padded = f"/api/vehicles/{vehicle.id:04d}"

        first = await test_client.get(padded)
        assert first.json()["data"]["vehicle"]["price"] == 20000

        await test_client.patch(f"/api/vehicles/{vehicle.id}", json={"price": 18500}, headers=admin_headers)

        second = await test_client.get(padded)
        assert second.json()["data"]["vehicle"]["id"] == vehicle.id
        assert second.json()["data"]["vehicle"]["price"] == 18500


@pytest.mark.integration
@pytest.mark.auth
class TestVehicleAdmin:

    @pytest.fixture
    def new_vehicle(self):
        return {
            "make": "Tesla",
            "model": "Model 3",
            "year": 2023,
            "price": 42000,
            "mileage": 1200,
            "fuel_type": "ELECTRIC",
            "transmission": "AUTOMATIC",
            "body_type": "SEDAN",
            "drivetrain": "AWD",
        }

    @pytest.mark.asyncio
    async def test_create_requires_token(self, test_client, new_vehicle):
        response = await test_client.post("/api/vehicles", json=new_vehicle)

        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_create_requires_admin_role(self, test_client, new_vehicle, staff_headers):
        response = await test_client.post("/api/vehicles", json=new_vehicle, headers=staff_headers)

        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_create_generates_slug_and_audits(self, test_client, new_vehicle, admin_headers, db_session):
        response = await test_client.post("/api/vehicles", json=new_vehicle, headers=admin_headers)

        assert response.status_code == 200
        vehicle = response.json()["data"]
        assert vehicle["slug"].startswith("2023-tesla-model-3-")
        assert vehicle["status"] == "AVAILABLE"

        res = await db_session.execute(select(Audit).where(Audit.action == "create_vehicle"))
        assert res.scalars().first() is not None

    @pytest.mark.asyncio
    async def test_duplicate_slug_conflicts(self, test_client, new_vehicle, admin_headers, vehicle_factory):
        await vehicle_factory(slug="taken")

        response = await test_client.post("/api/vehicles", json={**new_vehicle, "slug": "taken"}, headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["code"] == "SLUG_EXISTS"

    @pytest.mark.asyncio
    async def test_create_invalidates_listing(self, test_client, new_vehicle, admin_headers):
        assert (await test_client.get("/api/vehicles")).json()["data"]["total"] == 0

        await test_client.post("/api/vehicles", json=new_vehicle, headers=admin_headers)

        assert (await test_client.get("/api/vehicles")).json()["data"]["total"] == 1

    @pytest.mark.asyncio
    async def test_patch_price_and_status(self, test_client, admin_headers, vehicle_factory):
        vehicle = await vehicle_factory(price=20000)
        await test_client.get(f"/api/vehicles/{vehicle.id}")

        response = await test_client.patch(
            f"/api/vehicles/{vehicle.id}",
            json={"price": 18500, "status": "SOLD"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"] == {"id": vehicle.id, "updates": {"price": 18500, "status": "SOLD"}}
        # cached detail was dropped, and sold vehicles are not public
        assert (await test_client.get(f"/api/vehicles/{vehicle.id}")).status_code == 404

    @pytest.mark.asyncio
    async def test_patch_unknown_vehicle(self, test_client, admin_headers):
        response = await test_client.patch("/api/vehicles/999", json={"price": 1000}, headers=admin_headers)
        assert response.status_code == 404
