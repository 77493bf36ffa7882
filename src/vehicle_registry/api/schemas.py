"""
Pydantic Schemas for API Request/Response Models

These schemas define the JSON structure for registry sync endpoints.
"""
from typing import Dict, List, Optional
from datetime import datetime, date
from pydantic import BaseModel, ConfigDict, Field


class SweepRequest(BaseModel):
    """Body of a sweep trigger."""
    tenant_id: Optional[str] = Field(None, description="Restrict the sweep to one dealer")
    force_refresh: bool = Field(False, description="Refresh every eligible vehicle regardless of staleness")
    batch_size: Optional[int] = Field(None, ge=1, le=50, description="Override the configured group size")


class VehicleOutcome(BaseModel):
    """One attempted vehicle in a sweep."""
    vehicle_id: str
    registration: str
    success: bool
    mot_status: Optional[str] = None
    mot_expiry_date: Optional[date] = None
    error: Optional[str] = None
    error_message: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class SweepResponse(BaseModel):
    """Sweep report."""
    success: bool
    cancelled: bool = False
    candidates: int = 0
    processed: int = 0
    updated: int = 0
    errors: int = 0
    error: Optional[str] = None
    error_counts: Dict[str, int] = Field(default_factory=dict)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    details: List[VehicleOutcome] = Field(default_factory=list)


class VehicleRefreshResponse(BaseModel):
    """Single-vehicle refresh result."""
    success: bool
    vehicle_id: str
    registration: Optional[str] = None
    mot_status: Optional[str] = None
    mot_expiry_date: Optional[date] = None
    error: Optional[str] = None
    error_message: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)


class RegistryStatsResponse(BaseModel):
    """Registry coverage for dashboards."""
    tenant_id: Optional[str] = None
    total: int
    with_data: int
    needing_refresh: int
    valid_status: int
    expired_status: int
    unknown_status: int


class HealthCheck(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str
    database: str = "connected"
    registry_configured: bool
    timestamp: datetime
