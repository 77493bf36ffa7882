"""
Tests for the registry persistence adapter (dual write).
"""
import pytest
from datetime import date, datetime, timedelta
from unittest.mock import MagicMock

from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from src.vehicle_registry.db.models import RegistryRecord, TrackedVehicle
from src.vehicle_registry.db.repository import RegistryRecordRepository
from src.vehicle_registry.exceptions import PersistenceError
from src.vehicle_registry.sync.persistence import RegistryPersistenceAdapter

CHECKED_AT = datetime(2024, 6, 1, 12, 0, 0)


def load_record(session_scope, registration):
    with session_scope() as session:
        return session.execute(
            select(RegistryRecord).where(RegistryRecord.registration == registration)
        ).scalar_one_or_none()


def load_vehicle(session_scope, vehicle_id):
    with session_scope() as session:
        return session.get(TrackedVehicle, vehicle_id)


class TestRegistryPersistenceAdapter:

    def test_commit_inserts_record_and_projection(self, session_scope, add_vehicle, facts_factory):
        add_vehicle("V1", "ab12 cde")
        facts = facts_factory("AB12CDE", mot_status="Valid")

        with session_scope() as session:
            record = RegistryPersistenceAdapter().commit(session, "V1", "ab12 cde", facts, checked_at=CHECKED_AT)
            assert record.registration == "AB12CDE"

        stored = load_record(session_scope, "AB12CDE")
        assert stored.make == "FORD"
        assert stored.mot_status == "Valid"
        assert stored.mot_expiry_date == date(2025, 3, 14)
        assert stored.month_of_first_registration == "2018-03"
        assert stored.last_checked == CHECKED_AT
        assert stored.raw_data["registrationNumber"] == "AB12CDE"

        vehicle = load_vehicle(session_scope, "V1")
        assert vehicle.mot_status == stored.mot_status
        assert vehicle.mot_expiry_date == stored.mot_expiry_date
        assert vehicle.registry_last_checked == stored.last_checked
        assert vehicle.registry_data_raw == stored.raw_data

    def test_upsert_overwrites_without_merge(self, session_scope, add_vehicle, facts_factory):
        add_vehicle("V1", "AB12CDE")
        adapter = RegistryPersistenceAdapter()

        with session_scope() as session:
            adapter.commit(session, "V1", "AB12CDE", facts_factory(colour="RED"), checked_at=CHECKED_AT)

        later = CHECKED_AT + timedelta(days=8)
        newer = facts_factory(mot_status="Not valid", colour=None, make=None)
        with session_scope() as session:
            adapter.commit(session, "V1", "AB12CDE", newer, checked_at=later)

        stored = load_record(session_scope, "AB12CDE")
        assert stored.mot_status == "Not valid"
        assert stored.colour is None
        assert stored.make is None
        assert stored.last_checked == later

        with session_scope() as session:
            assert RegistryRecordRepository().count(session) == 1

        assert load_vehicle(session_scope, "V1").mot_status == "Not valid"

    def test_one_record_per_plate_for_many_vehicles(self, session_scope, add_vehicle, facts_factory):
        add_vehicle("V1", "AB12CDE")
        add_vehicle("V2", "AB12 CDE")
        adapter = RegistryPersistenceAdapter()

        with session_scope() as session:
            adapter.commit(session, "V1", "AB12CDE", facts_factory(), checked_at=CHECKED_AT)
        with session_scope() as session:
            adapter.commit(session, "V2", "AB12 CDE", facts_factory(), checked_at=CHECKED_AT)

        with session_scope() as session:
            assert RegistryRecordRepository().count(session) == 1
        assert load_vehicle(session_scope, "V2").registry_last_checked == CHECKED_AT

    def test_missing_vehicle_rolls_back_record(self, session_scope, facts_factory):
        with pytest.raises(PersistenceError) as exc_info:
            with session_scope() as session:
                RegistryPersistenceAdapter().commit(session, "gone", "AB12CDE", facts_factory(), checked_at=CHECKED_AT)

        assert exc_info.value.vehicle_id == "gone"
        assert exc_info.value.kind.value == "persistence"
        assert load_record(session_scope, "AB12CDE") is None

    def test_blank_registration_rejected(self, facts_factory):
        with pytest.raises(PersistenceError):
            RegistryPersistenceAdapter().commit(MagicMock(), "V1", "  ", facts_factory())

    def test_database_error_wrapped(self, facts_factory):
        session = MagicMock()
        session.get_bind.return_value.dialect.name = "sqlite"
        session.execute.side_effect = OperationalError("INSERT", {}, Exception("disk I/O error"))

        with pytest.raises(PersistenceError) as exc_info:
            RegistryPersistenceAdapter().commit(session, "V1", "AB12CDE", facts_factory(), checked_at=CHECKED_AT)

        assert "disk I/O error" in exc_info.value.message
