"""
Vehicle Refresh

One lookup followed by one persistence unit of work. Used for every vehicle
in a sweep and by the on-demand single-vehicle entry point.
"""
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.vehicle_registry.clients.registry_client import RegistryClient
from src.vehicle_registry.db.repository import TrackedVehicleRepository
from src.vehicle_registry.exceptions import (
    ErrorKind,
    PersistenceError,
    RegistryLookupError,
)
from src.vehicle_registry.models.sync_results import RefreshOutcome, RefreshResult
from src.vehicle_registry.sync.persistence import RegistryPersistenceAdapter
from src.vehicle_registry.transformers.registration import normalize_registration
from src.vehicle_registry.utils.logger import get_logger
from src.vehicle_registry.utils.timeutils import utc_now

logger = get_logger(__name__)

SessionScope = Callable[[], AbstractContextManager[Session]]


def refresh_registration(
    client: RegistryClient,
    adapter: RegistryPersistenceAdapter,
    session_scope: SessionScope,
    vehicle_id: str,
    registration: str,
    clock: Callable[[], datetime] = utc_now,
) -> RefreshOutcome:
    """
    Look up one plate and commit the result for its vehicle.

    Never raises: every failure is classified into the returned outcome.
    """
    normalized = normalize_registration(registration) or ""

    try:
        facts = client.lookup(normalized)
    except RegistryLookupError as e:
        return RefreshOutcome(
            vehicle_id=vehicle_id,
            registration=normalized,
            success=False,
            error=e.kind,
            error_message=e.message,
            attempts=e.attempts,
        )
    except Exception as e:
        logger.exception("registry_refresh_unexpected_error", vehicle_id=vehicle_id, registration=normalized)
        return RefreshOutcome(
            vehicle_id=vehicle_id,
            registration=normalized,
            success=False,
            error=ErrorKind.INTERNAL,
            error_message=f"{type(e).__name__}: {e}",
        )

    try:
        with session_scope() as session:
            adapter.commit(session, vehicle_id, normalized, facts, checked_at=clock())
    except PersistenceError as e:
        return RefreshOutcome(
            vehicle_id=vehicle_id,
            registration=normalized,
            success=False,
            error=ErrorKind.PERSISTENCE,
            error_message=e.message,
        )
    except SQLAlchemyError as e:
        # Commit itself failed after both writes were flushed
        logger.error("registry_commit_failed", vehicle_id=vehicle_id, registration=normalized, error=str(e))
        return RefreshOutcome(
            vehicle_id=vehicle_id,
            registration=normalized,
            success=False,
            error=ErrorKind.PERSISTENCE,
            error_message=f"Database commit failed: {e}",
        )
    except Exception as e:
        logger.exception("registry_persist_unexpected_error", vehicle_id=vehicle_id, registration=normalized)
        return RefreshOutcome(
            vehicle_id=vehicle_id,
            registration=normalized,
            success=False,
            error=ErrorKind.INTERNAL,
            error_message=f"{type(e).__name__}: {e}",
        )

    return RefreshOutcome(
        vehicle_id=vehicle_id,
        registration=normalized,
        success=True,
        mot_status=facts.mot_status,
        mot_expiry_date=facts.mot_expiry_date,
    )


def refresh_single_vehicle(
    client: RegistryClient,
    session_scope: SessionScope,
    vehicle_id: str,
    adapter: Optional[RegistryPersistenceAdapter] = None,
    clock: Callable[[], datetime] = utc_now,
) -> RefreshResult:
    """
    On-demand refresh of one vehicle by stock id.

    Ignores staleness and the active flag; the vehicle only needs a
    registration. Returns a typed result instead of raising.

    Args:
        client: Registry client
        session_scope: Factory for transactional sessions
        vehicle_id: Stock identifier
        adapter: Persistence adapter (a default one is created when omitted)
        clock: Source of the lookup timestamp

    Returns:
        RefreshResult with MOT fields on success or the error kind on failure
    """
    adapter = adapter or RegistryPersistenceAdapter()

    try:
        with session_scope() as session:
            vehicle = TrackedVehicleRepository().get_by_id(session, vehicle_id)
            registration = vehicle.registration if vehicle else None
    except SQLAlchemyError as e:
        logger.error("single_vehicle_lookup_failed", vehicle_id=vehicle_id, error=str(e))
        return RefreshResult(
            success=False,
            vehicle_id=vehicle_id,
            error=ErrorKind.PERSISTENCE,
            error_message=f"Could not load vehicle: {e}",
        )

    if not normalize_registration(registration):
        logger.warning("single_vehicle_not_refreshable", vehicle_id=vehicle_id)
        return RefreshResult(
            success=False,
            vehicle_id=vehicle_id,
            error=ErrorKind.VEHICLE_NOT_FOUND,
            error_message="Vehicle not found or no registration number",
        )

    outcome = refresh_registration(client, adapter, session_scope, vehicle_id, registration, clock=clock)
    logger.info(
        "single_vehicle_refreshed",
        vehicle_id=vehicle_id,
        registration=outcome.registration,
        success=outcome.success,
        error=outcome.error.value if outcome.error else None
    )

    return RefreshResult(
        success=outcome.success,
        vehicle_id=vehicle_id,
        registration=outcome.registration,
        mot_status=outcome.mot_status,
        mot_expiry_date=outcome.mot_expiry_date,
        error=outcome.error,
        error_message=outcome.error_message,
    )
