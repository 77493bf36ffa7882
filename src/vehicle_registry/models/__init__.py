"""
Domain Models

Pydantic models for registry facts and sweep results.
"""
from src.vehicle_registry.models.registry_facts import RegistryFacts
from src.vehicle_registry.models.sync_results import (
    StatusBucket,
    SweepOptions,
    RefreshOutcome,
    SweepReport,
    RefreshResult,
    RegistryStats,
)

__all__ = [
    "RegistryFacts",
    "StatusBucket",
    "SweepOptions",
    "RefreshOutcome",
    "SweepReport",
    "RefreshResult",
    "RegistryStats",
]
