"""
Statistics Router

Registry coverage counts for dashboards.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from src.vehicle_registry.api.dependencies import get_db, get_sweep_config
from src.vehicle_registry.api.schemas import RegistryStatsResponse
from src.vehicle_registry.sync.config import SweepConfig
from src.vehicle_registry.sync.stats import StatisticsAggregator

router = APIRouter(prefix="/api/v1/registry", tags=["statistics"])


@router.get("/stats", response_model=RegistryStatsResponse)
def get_registry_stats(
    tenant_id: Optional[str] = Query(None, description="Restrict counts to one dealer"),
    db: Session = Depends(get_db),
    config: SweepConfig = Depends(get_sweep_config),
):
    """
    Get registry coverage statistics.

    Args:
        tenant_id: Dealer filter
        db: Database session
        config: Supplies the staleness threshold

    Returns:
        Totals, data coverage, refresh backlog and MOT status buckets
    """
    stats = StatisticsAggregator(config.refresh_threshold_days).stats(db, tenant_id=tenant_id)
    return RegistryStatsResponse(tenant_id=tenant_id, **stats.model_dump())
