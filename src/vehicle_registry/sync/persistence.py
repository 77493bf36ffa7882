"""
Registry Persistence Adapter

Writes a successful lookup into the canonical registry record and the MOT
summary projection on the owning vehicle. Both writes happen in the caller's
session transaction: a failure in either raises PersistenceError and the
caller's rollback discards both.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.vehicle_registry.db.models import RegistryRecord
from src.vehicle_registry.db.repository import (
    RegistryRecordRepository,
    TrackedVehicleRepository,
)
from src.vehicle_registry.exceptions import PersistenceError
from src.vehicle_registry.models.registry_facts import RegistryFacts
from src.vehicle_registry.transformers.registration import normalize_registration
from src.vehicle_registry.utils.logger import get_logger
from src.vehicle_registry.utils.timeutils import utc_now

logger = get_logger(__name__)


class RegistryPersistenceAdapter:
    """Dual write of registry facts: canonical record plus vehicle projection."""

    def __init__(self):
        self.record_repository = RegistryRecordRepository()
        self.vehicle_repository = TrackedVehicleRepository()

    def commit(
        self,
        session: Session,
        vehicle_id: str,
        registration: str,
        facts: RegistryFacts,
        checked_at: Optional[datetime] = None
    ) -> RegistryRecord:
        """
        Upsert the registry record and refresh the vehicle's projection.

        Args:
            session: Database session whose transaction spans both writes
            vehicle_id: Vehicle owning the projection
            registration: Plate the lookup was made for
            facts: Result of the successful lookup
            checked_at: Lookup time (defaults to now)

        Returns:
            The upserted registry record

        Raises:
            PersistenceError: if either write fails or the vehicle is gone
        """
        normalized = normalize_registration(registration)
        if not normalized:
            raise PersistenceError(vehicle_id, registration, "registration is blank")

        checked_at = checked_at or utc_now()

        try:
            record = self.record_repository.upsert(
                session,
                normalized,
                facts.to_record_values(),
                last_checked=checked_at,
            )

            updated = self.vehicle_repository.update_projection(
                session,
                vehicle_id,
                mot_status=facts.mot_status,
                mot_expiry_date=facts.mot_expiry_date,
                last_checked=checked_at,
                raw_data=facts.raw_data,
            )
            session.flush()
        except SQLAlchemyError as e:
            logger.error(
                "registry_persistence_failed",
                vehicle_id=vehicle_id,
                registration=normalized,
                error=str(e),
                error_type=type(e).__name__
            )
            raise PersistenceError(vehicle_id, normalized, f"Database update failed: {e}") from e

        if updated != 1:
            logger.error(
                "registry_projection_vehicle_missing",
                vehicle_id=vehicle_id,
                registration=normalized
            )
            raise PersistenceError(vehicle_id, normalized, f"Vehicle {vehicle_id} not found for projection update")

        logger.info(
            "registry_data_persisted",
            vehicle_id=vehicle_id,
            registration=normalized,
            mot_status=facts.mot_status
        )
        return record
