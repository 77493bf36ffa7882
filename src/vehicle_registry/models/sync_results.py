"""
Sweep Result Models

Options accepted by a sweep, per-vehicle outcomes, the sweep report returned
to callers, the single-vehicle result and the statistics read model.
"""
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from src.vehicle_registry.exceptions import ErrorKind


class StatusBucket(str, Enum):
    """MOT status grouping used by dashboards."""

    VALID = "valid"
    EXPIRED = "expired"
    UNKNOWN = "unknown"


class SweepOptions(BaseModel):
    """Inbound sweep trigger."""

    tenant_id: Optional[str] = Field(None, description="Restrict the sweep to one dealer")
    force_refresh: bool = Field(False, description="Ignore staleness and refresh every eligible vehicle")
    batch_size: Optional[int] = Field(None, ge=1, description="Override the configured group size")


class RefreshOutcome(BaseModel):
    """One attempted lookup during a sweep. Never persisted."""

    vehicle_id: str
    registration: str
    success: bool
    mot_status: Optional[str] = None
    mot_expiry_date: Optional[date] = None
    error: Optional[ErrorKind] = None
    error_message: Optional[str] = None
    attempts: Optional[int] = None


class SweepReport(BaseModel):
    """
    Result of one sweep.

    processed counts attempted vehicles; updated counts vehicles whose lookup
    and persistence both succeeded; errors counts every other outcome.
    """

    success: bool = True
    processed: int = 0
    updated: int = 0
    errors: int = 0
    candidates: int = 0
    cancelled: bool = False
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    details: List[RefreshOutcome] = Field(default_factory=list)

    def record(self, outcome: RefreshOutcome) -> None:
        """Add an outcome and keep the counters consistent."""
        self.details.append(outcome)
        self.processed += 1
        if outcome.success:
            self.updated += 1
        else:
            self.errors += 1

    def error_counts(self) -> Dict[str, int]:
        """Failed outcomes grouped by error kind."""
        counts: Dict[str, int] = {}
        for outcome in self.details:
            if outcome.success or outcome.error is None:
                continue
            counts[outcome.error.value] = counts.get(outcome.error.value, 0) + 1
        return counts

    def outcomes_with(self, kind: ErrorKind) -> List[RefreshOutcome]:
        return [o for o in self.details if o.error == kind]


class RefreshResult(BaseModel):
    """Single-vehicle refresh result."""

    success: bool
    vehicle_id: str
    registration: Optional[str] = None
    mot_status: Optional[str] = None
    mot_expiry_date: Optional[date] = None
    error: Optional[ErrorKind] = None
    error_message: Optional[str] = None

    @model_validator(mode="after")
    def check_error_on_failure(self) -> "RefreshResult":
        if not self.success and self.error is None:
            raise ValueError("failed refresh must carry an error kind")
        return self


class RegistryStats(BaseModel):
    """Registry coverage counts for one dealer (or all dealers)."""

    total: int = 0
    with_data: int = 0
    needing_refresh: int = 0
    valid_status: int = 0
    expired_status: int = 0
    unknown_status: int = 0
