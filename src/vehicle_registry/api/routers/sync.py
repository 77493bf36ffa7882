"""
Registry Sync Router

Endpoints that trigger a sweep or refresh one vehicle on demand.
"""
import threading

from fastapi import APIRouter, Depends, HTTPException, Path

from src.vehicle_registry.api.dependencies import (
    get_registry_client,
    get_session_scope,
    get_sweep_config,
)
from src.vehicle_registry.api.schemas import (
    SweepRequest,
    SweepResponse,
    VehicleOutcome,
    VehicleRefreshResponse,
)
from src.vehicle_registry.clients.registry_client import RegistryClient
from src.vehicle_registry.exceptions import ErrorKind
from src.vehicle_registry.models.sync_results import SweepOptions
from src.vehicle_registry.sync.config import SweepConfig
from src.vehicle_registry.sync.orchestrator import BatchOrchestrator
from src.vehicle_registry.sync.refresh import SessionScope, refresh_single_vehicle
from src.vehicle_registry.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/registry", tags=["registry"])

# One sweep per process
_sweep_lock = threading.Lock()


@router.post("/sweeps", response_model=SweepResponse)
def trigger_sweep(
    request: SweepRequest,
    client: RegistryClient = Depends(get_registry_client),
    session_scope: SessionScope = Depends(get_session_scope),
    config: SweepConfig = Depends(get_sweep_config),
):
    """
    Run a registry sweep and return its report.

    Args:
        request: Dealer scope, force flag and optional batch size
        client: Registry client
        session_scope: Transactional session factory
        config: Pacing configuration

    Returns:
        Sweep report

    Raises:
        HTTPException: 409 if a sweep is already running
    """
    if not _sweep_lock.acquire(blocking=False):
        logger.warning("sweep_rejected_already_running", tenant_id=request.tenant_id)
        raise HTTPException(status_code=409, detail="A registry sweep is already running")

    try:
        orchestrator = BatchOrchestrator(
            client,
            config=config,
            session_scope=session_scope,
            track_runs=True,
        )
        report = orchestrator.run_sweep(
            SweepOptions(
                tenant_id=request.tenant_id,
                force_refresh=request.force_refresh,
                batch_size=request.batch_size,
            )
        )
    finally:
        _sweep_lock.release()

    return SweepResponse(
        **report.model_dump(mode="json", exclude={"details"}),
        error_counts=report.error_counts(),
        details=[VehicleOutcome(**o.model_dump(mode="json")) for o in report.details],
    )


@router.post("/vehicles/{vehicle_id}/refresh", response_model=VehicleRefreshResponse)
def refresh_vehicle(
    vehicle_id: str = Path(..., min_length=1, max_length=64, description="Stock vehicle id"),
    client: RegistryClient = Depends(get_registry_client),
    session_scope: SessionScope = Depends(get_session_scope),
):
    """
    Refresh one vehicle's registry data regardless of staleness.

    Returns 404 when the vehicle does not exist or has no registration.
    Registry failures come back with success=false and the error kind.
    """
    result = refresh_single_vehicle(client, session_scope, vehicle_id)

    if result.error is ErrorKind.VEHICLE_NOT_FOUND:
        raise HTTPException(status_code=404, detail=result.error_message)

    return VehicleRefreshResponse(**result.model_dump(mode="json"))
