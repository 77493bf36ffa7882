"""
Registry Statistics

Read-only coverage counts for dashboards. Loads eligible vehicles and their
registry records independently of any sweep and joins them in memory.
"""
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from src.vehicle_registry.db.repository import (
    RegistryRecordRepository,
    TrackedVehicleRepository,
)
from src.vehicle_registry.models.sync_results import RegistryStats, StatusBucket
from src.vehicle_registry.sync.selector import is_stale
from src.vehicle_registry.transformers.registration import normalize_registration
from src.vehicle_registry.utils.logger import get_logger
from src.vehicle_registry.utils.timeutils import utc_now

logger = get_logger(__name__)

_EXPIRED_MARKERS = ("invalid", "not valid", "expired")


def classify_status(status: Optional[str]) -> StatusBucket:
    """
    Bucket an MOT status string.

    "invalid" and "not valid" contain "valid", so the expired test runs first.
    """
    if not status:
        return StatusBucket.UNKNOWN

    lowered = status.lower()
    if any(marker in lowered for marker in _EXPIRED_MARKERS):
        return StatusBucket.EXPIRED
    if "valid" in lowered:
        return StatusBucket.VALID
    return StatusBucket.UNKNOWN


class StatisticsAggregator:
    """Computes RegistryStats for one dealer or across all dealers."""

    def __init__(self, refresh_threshold_days: int = 7):
        self.threshold = timedelta(days=refresh_threshold_days)
        self.vehicle_repository = TrackedVehicleRepository()
        self.record_repository = RegistryRecordRepository()

    def stats(
        self,
        session: Session,
        tenant_id: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> RegistryStats:
        """
        Count eligible vehicles by registry coverage and MOT status.

        Args:
            session: Database session
            tenant_id: Restrict to one dealer
            now: Reference time for staleness (defaults to current UTC time)

        Returns:
            RegistryStats
        """
        now = now or utc_now()

        vehicles = self.vehicle_repository.get_eligible(session, tenant_id=tenant_id)
        records = self.record_repository.get_by_registrations(
            session,
            (normalize_registration(v.registration) for v in vehicles)
        )

        result = RegistryStats(total=len(vehicles))
        for vehicle in vehicles:
            record = records.get(normalize_registration(vehicle.registration))

            if record is not None and record.last_checked is not None:
                result.with_data += 1
            if is_stale(record, now, self.threshold):
                result.needing_refresh += 1

            bucket = classify_status(record.mot_status if record is not None else None)
            if bucket is StatusBucket.VALID:
                result.valid_status += 1
            elif bucket is StatusBucket.EXPIRED:
                result.expired_status += 1
            else:
                result.unknown_status += 1

        logger.info("registry_stats_computed", tenant_id=tenant_id, **result.model_dump())
        return result
