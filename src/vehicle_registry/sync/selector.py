"""
Staleness Selector

Decides which tracked vehicles are due for a registry refresh.
"""
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.vehicle_registry.db.models import RegistryRecord, TrackedVehicle
from src.vehicle_registry.db.repository import (
    RegistryRecordRepository,
    TrackedVehicleRepository,
)
from src.vehicle_registry.exceptions import SelectionError
from src.vehicle_registry.transformers.registration import normalize_registration
from src.vehicle_registry.utils.logger import get_logger
from src.vehicle_registry.utils.timeutils import to_naive_utc, utc_now

logger = get_logger(__name__)


def is_stale(
    record: Optional[RegistryRecord],
    now: datetime,
    threshold: timedelta
) -> bool:
    """
    True when a plate has no successful lookup or its last one is too old.

    A record checked exactly `threshold` ago is still fresh.
    """
    if record is None:
        return True
    last_checked = to_naive_utc(record.last_checked)
    if last_checked is None:
        return True
    return last_checked < to_naive_utc(now) - threshold


class StalenessSelector:
    """
    Selects refresh candidates among active vehicles with a registration.

    Ordering is oldest stock first so repeated sweeps visit vehicles in the
    same, fair order.
    """

    def __init__(self, refresh_threshold_days: int = 7):
        self.threshold = timedelta(days=refresh_threshold_days)
        self.vehicle_repository = TrackedVehicleRepository()
        self.record_repository = RegistryRecordRepository()

    def select(
        self,
        session: Session,
        tenant_id: Optional[str] = None,
        force_all: bool = False,
        now: Optional[datetime] = None
    ) -> List[TrackedVehicle]:
        """
        Return vehicles needing a refresh.

        Args:
            session: Database session
            tenant_id: Restrict to one dealer
            force_all: Return every eligible vehicle regardless of staleness
            now: Reference time (defaults to current UTC time)

        Returns:
            Candidate vehicles; empty when nothing is eligible or all are fresh

        Raises:
            SelectionError: if storage cannot be queried
        """
        now = now or utc_now()

        try:
            eligible = self.vehicle_repository.get_eligible(session, tenant_id=tenant_id)

            if force_all:
                logger.info(
                    "refresh_candidates_selected",
                    tenant_id=tenant_id,
                    force_all=True,
                    eligible=len(eligible),
                    selected=len(eligible)
                )
                return eligible

            records: Dict[str, RegistryRecord] = self.record_repository.get_by_registrations(
                session,
                (normalize_registration(v.registration) for v in eligible)
            )
        except SQLAlchemyError as e:
            logger.error(
                "refresh_candidate_selection_failed",
                tenant_id=tenant_id,
                error=str(e),
                error_type=type(e).__name__
            )
            raise SelectionError(f"Could not select refresh candidates: {e}") from e

        selected = [
            vehicle for vehicle in eligible
            if is_stale(records.get(normalize_registration(vehicle.registration)), now, self.threshold)
        ]

        logger.info(
            "refresh_candidates_selected",
            tenant_id=tenant_id,
            force_all=False,
            eligible=len(eligible),
            selected=len(selected),
            threshold_days=self.threshold.days
        )
        return selected
