"""
Shared fixtures: a fixed clock, an in-memory store and an API client.
"""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
import pytest_asyncio
import pytz
from fastapi.testclient import TestClient

from cafe_orders.app import create_app
from cafe_orders.config import Config
from cafe_orders.database import MemoryDatabase

KOLKATA = pytz.timezone("Asia/Kolkata")


def local_time(year, month, day, hour=0, minute=0, second=0, microsecond=0) -> datetime:
    """Aware datetime in the cafe timezone"""
    return KOLKATA.localize(datetime(year, month, day, hour, minute, second, microsecond))


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime):
        self.now = now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(autouse=True)
def cafe_config(monkeypatch):
    """Pin settings that tests depend on, whatever the environment says."""
    monkeypatch.setattr(Config, "TIMEZONE", "Asia/Kolkata")
    monkeypatch.setattr(Config, "WEEK_START", 6)
    monkeypatch.setattr(Config, "APP_ENV", "development")
    monkeypatch.setattr(Config, "SEED_DEMO_DATA", True)
    monkeypatch.setattr(Config, "OTP_TTL_MINUTES", 5)
    monkeypatch.setattr(Config, "DEFAULT_ADMIN_MOBILE", "9999999999")
    monkeypatch.setattr(Config, "DEFAULT_ADMIN_PASSWORD", "admin123")
    monkeypatch.setattr(Config, "DEFAULT_ADMIN_NAME", "Admin")


@pytest.fixture
def clock() -> FixedClock:
    # Thursday 2024-05-16 12:00 in Kolkata
    return FixedClock(local_time(2024, 5, 16, 12, 0).astimezone(pytz.utc))


@pytest.fixture
def db(clock) -> MemoryDatabase:
    return MemoryDatabase(clock=clock)


@pytest_asyncio.fixture
async def products(db):
    async with db.transaction() as conn:
        coffee = await conn.insert_product({
            "name": "Cold Coffee", "price": Decimal("60.00"), "category": "Beverages"
        })
        samosa = await conn.insert_product({
            "name": "Samosa", "price": Decimal("15.00"), "category": "Snacks"
        })
        burger = await conn.insert_product({
            "name": "Chicken Burger", "price": Decimal("80.00"), "category": "Main",
            "stock_quantity": 20
        })
    return {"coffee": coffee, "samosa": samosa, "burger": burger}


@pytest.fixture
def client(db, clock):
    app = create_app(db, clock)
    with TestClient(app) as test_client:
        yield test_client


def login_admin(client: TestClient) -> dict:
    first = client.post("/api/auth/admin-login", json={"mobile": "9999999999", "password": "admin123"})
    assert first.status_code == 200
    otp = first.json()["otp"]
    second = client.post(
        "/api/auth/admin-login",
        json={"mobile": "9999999999", "password": "admin123", "otp": otp}
    )
    assert second.status_code == 200
    return second.json()["user"]


def login_student(client: TestClient, mobile: str = "9876543210") -> dict:
    sent = client.post("/api/auth/send-otp", json={"mobile": mobile})
    assert sent.status_code == 200
    verified = client.post("/api/auth/verify-otp", json={"mobile": mobile, "otp": sent.json()["otp"]})
    assert verified.status_code == 200
    return verified.json()["user"]
