"""
Sweep Configuration

Immutable pacing, retry and staleness values handed to the registry client and
the sweep orchestrator at construction.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from config.settings import Settings, settings as default_settings


class SweepConfig(BaseModel):
    """
    Pacing and retry policy for one orchestrator instance.

    Attributes:
        batch_size: Vehicles per group
        request_delay_seconds: Pause between vehicles inside a group
        batch_delay_seconds: Pause between groups
        refresh_threshold_days: Age after which a registry record is stale
        max_attempts: Registry calls allowed per lookup
        retry_base_delay_seconds: Base for the backoff strategies
        request_timeout_seconds: Per-attempt HTTP timeout
    """

    model_config = ConfigDict(frozen=True)

    batch_size: int = Field(5, ge=1)
    request_delay_seconds: float = Field(2.0, ge=0)
    batch_delay_seconds: float = Field(5.0, ge=0)
    refresh_threshold_days: int = Field(7, ge=0)
    max_attempts: int = Field(3, ge=1)
    retry_base_delay_seconds: float = Field(2.0, ge=0)
    request_timeout_seconds: float = Field(20.0, gt=0)

    @classmethod
    def from_settings(cls, app_settings: Optional[Settings] = None) -> "SweepConfig":
        """Build the configuration from environment-backed settings."""
        s = app_settings or default_settings
        return cls(
            batch_size=s.sync_batch_size,
            request_delay_seconds=s.sync_request_delay_seconds,
            batch_delay_seconds=s.sync_batch_delay_seconds,
            refresh_threshold_days=s.sync_refresh_threshold_days,
            max_attempts=s.registry_max_attempts,
            retry_base_delay_seconds=s.registry_retry_base_delay_seconds,
            request_timeout_seconds=s.registry_request_timeout_seconds,
        )
