"""
Shared fixtures for registry sync tests.

Every test gets its own in-memory SQLite database. StaticPool keeps one
connection so the test session and the sessions opened by session_scope see
the same data.
"""
from contextlib import contextmanager
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.vehicle_registry.db.base import Base
from src.vehicle_registry.db.models import RegistryRecord, TrackedVehicle
from src.vehicle_registry.models.registry_facts import RegistryFacts

NOW = datetime(2024, 6, 1, 12, 0, 0)


@pytest.fixture(scope="function")
def engine():
    """In-memory SQLite engine with the registry schema."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture(scope="function")
def test_db(session_factory):
    """Session used by tests to seed and inspect data."""
    session = session_factory()

    yield session

    session.close()


@pytest.fixture(scope="function")
def session_scope(session_factory):
    """Commit-or-rollback unit of work, same contract as get_db_session()."""

    @contextmanager
    def scope():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return scope


@pytest.fixture
def add_vehicle(test_db):
    """Insert a tracked vehicle; created_at is spaced by position for stable ordering."""
    counter = {"n": 0}

    def _add(vehicle_id, registration, tenant_id="dealer-1", is_active=True, created_at=None):
        counter["n"] += 1
        vehicle = TrackedVehicle(
            id=vehicle_id,
            tenant_id=tenant_id,
            registration=registration,
            is_active=is_active,
            created_at=created_at or NOW - timedelta(days=365) + timedelta(minutes=counter["n"]),
        )
        test_db.add(vehicle)
        test_db.commit()
        return vehicle

    return _add


@pytest.fixture
def add_record(test_db):
    """Insert a registry record checked at the given time."""

    def _add(registration, last_checked, mot_status=None):
        record = RegistryRecord(
            registration=registration,
            last_checked=last_checked,
            mot_status=mot_status,
        )
        test_db.add(record)
        test_db.commit()
        return record

    return _add


def make_facts(registration="AB12CDE", mot_status="Valid", **overrides):
    """RegistryFacts as the client would return them."""
    payload = {
        "registrationNumber": registration,
        "make": "FORD",
        "colour": "BLUE",
        "fuelType": "PETROL",
        "yearOfManufacture": 2018,
        "engineCapacity": 1598,
        "co2Emissions": 120,
        "motStatus": mot_status,
        "motExpiryDate": "2025-03-14",
        "taxStatus": "Taxed",
        "taxDueDate": "2025-01-01",
        "markedForExport": False,
        "typeApproval": "M1",
        "wheelplan": "2 AXLE RIGID BODY",
        "monthOfFirstRegistration": "2018-03",
        "dateOfLastV5CIssued": "2022-05-10",
    }
    payload.update(overrides)
    return RegistryFacts.from_response(payload)


@pytest.fixture
def fake_client():
    """Registry client double answering every plate with valid facts."""
    client = MagicMock()
    client.lookup.side_effect = lambda registration: make_facts(registration)
    return client


@pytest.fixture
def facts_factory():
    return make_facts
