import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import uuid
import pytest
from datetime import datetime, timedelta, timezone
from httpx import AsyncClient, ASGITransport
from jose import jwt
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker

from app.main import app
from app.api.visitor import get_visitor_storage
from app.db.session import get_db, get_session_factory
from app.models import Base, User, Vehicle, Contact, VehicleInquiry, InventoryAlert
from app.core.cache import performance_cache
from app.core.config import settings
from app.core.enums import UserRole, VehicleStatus, FuelType, Transmission, BodyType, LeadStatus, InquiryType
from app.core.rate_limit import reset_rate_limits
from app.core.redis import set_redis
from app.core.security import create_access_token, hash_password
from app.stores.base import MemoryStorage


@pytest.fixture(autouse=True)
def isolated_state(monkeypatch):
    """No Redis, no outbound integrations, empty caches and counters."""
    set_redis(None)
    monkeypatch.setattr(settings, "RESEND_API_KEY", None)
    monkeypatch.setattr(settings, "TWILIO_ACCOUNT_SID", None)
    reset_rate_limits()
    performance_cache.clear_memory()
    yield
    performance_cache.clear_memory()
    reset_rate_limits()


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def visitor_storage():
    return MemoryStorage()


@pytest.fixture
async def test_client(session_factory, visitor_storage):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_visitor_storage] = lambda: visitor_storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    await performance_cache.wait_for_revalidation()
    app.dependency_overrides.clear()


async def _create_user(db_session, username: str, role: UserRole) -> User:
    user = User(username=username, password_hash=hash_password("correct-horse"), role=role)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def admin_user(db_session):
    return await _create_user(db_session, "admin", UserRole.ADMIN)


@pytest.fixture
async def staff_user(db_session):
    return await _create_user(db_session, "staff", UserRole.STAFF)


@pytest.fixture
def admin_token(admin_user):
    return create_access_token(str(admin_user.id), admin_user.role)


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def staff_headers(staff_user):
    return {"Authorization": f"Bearer {create_access_token(str(staff_user.id), staff_user.role)}"}


@pytest.fixture
def expired_token(admin_user):
    payload = {
        "sub": str(admin_user.id),
        "role": UserRole.ADMIN.value,
        "exp": datetime.now(timezone.utc) - timedelta(hours=1)
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")


@pytest.fixture
def vehicle_factory(db_session):
    counter = {"n": 0}

    async def _create_vehicle(**kwargs):
        counter["n"] += 1
        data = {
            "make": "Toyota",
            "model": "Corolla",
            "year": 2020,
            "price": 20000,
            "mileage": 30000,
            "fuel_type": FuelType.PETROL,
            "transmission": Transmission.AUTOMATIC,
            "body_type": BodyType.SEDAN,
            "status": VehicleStatus.AVAILABLE,
            "images": ["https://cdn.example.com/car.jpg"],
        }
        data.update(kwargs)
        data.setdefault("slug", f"{data['year']}-{data['make']}-{data['model']}-{counter['n']}".lower())
        vehicle = Vehicle(**data)
        db_session.add(vehicle)
        await db_session.commit()
        await db_session.refresh(vehicle)
        return vehicle

    return _create_vehicle


@pytest.fixture
def alert_factory(db_session):
    async def _create_alert(**kwargs):
        data = {
            "customer_email": "buyer@example.com",
            "customer_name": "Jane Buyer",
            "is_active": True,
        }
        data.update(kwargs)
        alert = InventoryAlert(**data)
        db_session.add(alert)
        await db_session.commit()
        await db_session.refresh(alert)
        return alert

    return _create_alert


@pytest.fixture
def lead_factory(db_session):
    async def _create_leads(vehicle=None, created_at=None):
        contact = Contact(
            name="Lead Person",
            email="lead@example.com",
            message="I would like to know more.",
            subject="General Inquiry",
            status=LeadStatus.NEW,
        )
        if created_at:
            contact.created_at = created_at
        db_session.add(contact)
        inquiry = None
        if vehicle is not None:
            inquiry = VehicleInquiry(
                vehicle_id=vehicle.id,
                name="Lead Person",
                email="lead@example.com",
                phone="",
                message="Is it still available?",
                inquiry_type=InquiryType.GENERAL,
                status=LeadStatus.NEW,
            )
            if created_at:
                inquiry.created_at = created_at
            db_session.add(inquiry)
        await db_session.commit()
        return contact, inquiry

    return _create_leads


@pytest.fixture
def valid_contact_data():
    return {
        "name": "John O'Neil",
        "email": "John@Example.com",
        "phone": "+1 (555) 123-4567",
        "message": "I am interested in a test drive this weekend.",
        "consent": True,
    }


@pytest.fixture
def valid_idempotency_key():
    return str(uuid.uuid4())


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: marks tests that drive the HTTP API"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests of a single module"
    )
    config.addinivalue_line(
        "markers", "auth: marks tests related to authentication"
    )
    config.addinivalue_line(
        "markers", "cache: marks tests related to the two-tier cache"
    )
    config.addinivalue_line(
        "markers", "alerts: marks tests related to inventory alerts"
    )
    config.addinivalue_line(
        "markers", "pricing: marks tests related to pricing rules and suggestions"
    )
    config.addinivalue_line(
        "markers", "rate_limit: marks tests related to rate limiting"
    )
    config.addinivalue_line(
        "markers", "audit: marks tests related to audit logging"
    )
    config.addinivalue_line(
        "markers", "idempotency: marks tests related to idempotency"
    )
    config.addinivalue_line(
        "markers", "stores: marks tests related to the visitor list stores"
    )
