import os
import sys

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# --- path to backend ---
BASE_DIR = os.path.dirname(os.path.dirname(__file__))
BACKEND_DIR = os.path.join(BASE_DIR, "backend")
sys.path.insert(0, BACKEND_DIR)

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ADMIN_PASSWORD", "secret")
os.environ.setdefault("SECRET_KEY", "test-key")
os.environ.setdefault("TIMEZONE", "Europe/Rome")

from database import Base, init_db  # noqa: E402
from fakes import InMemoryBookingStore, InMemoryDisabledDayStore  # noqa: E402


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(engine, monkeypatch):
    TestingSessionLocal = sessionmaker(bind=engine)
    monkeypatch.setattr("database.SessionLocal", TestingSessionLocal)
    return TestingSessionLocal


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    from main import app

    return TestClient(app)


@pytest.fixture
def admin_client(session_factory):
    from main import app

    admin = TestClient(app)
    response = admin.post("/admin/login", data={"password": "secret"})
    assert response.status_code == 200
    return admin


@pytest.fixture
def service():
    from availability import AvailabilityService

    return AvailabilityService(InMemoryBookingStore(), InMemoryDisabledDayStore())
