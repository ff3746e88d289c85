"""
Shared fixtures: a fresh store per test (in-memory and SQLite-backed),
payload builders and an HTTP client bound to an isolated store.
"""

import itertools
import os

os.environ["STORE_BACKEND"] = "memory"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["HEARTBEAT_INTERVAL_SECONDS"] = "0"
os.environ["SIMULATED_LATENCY_MS"] = "0"
os.environ["DASHBOARD_LATENCY_MS"] = "0"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import create_tables
from dependencies import get_store
from main import app
from services.relationships import RelationshipMaintainer
from services.sql_store import SqlStore
from services.store import InMemoryStore

_emails = itertools.count(1)


def user_payload(role: str = "farmer", **overrides) -> dict:
    n = next(_emails)
    payload = {
        "first_name": f"{role.capitalize()}{n}",
        "last_name": "Tester",
        "email": f"{role}{n}@agrimail.io",
        "phone": "0612345678",
        "role": role,
    }
    payload.update(overrides)
    return payload


def farm_payload(farmer_id: str, name: str = "Green Valley", **overrides) -> dict:
    payload = {
        "name": name,
        "location": "Meknes",
        "gps_coordinates": {"latitude": 33.89, "longitude": -5.55},
        "farmer_id": farmer_id,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def sql_store():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    yield SqlStore(sessionmaker(engine, expire_on_commit=False))
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Every store-level test runs against both backends."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def maintainer(store):
    return RelationshipMaintainer(store)


@pytest.fixture
def engineer(maintainer):
    return maintainer.create_user(user_payload("engineer", status="active"))


@pytest.fixture
def farmer(maintainer):
    return maintainer.create_user(user_payload("farmer"))


@pytest.fixture
def client(memory_store):
    app.dependency_overrides[get_store] = lambda: memory_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
