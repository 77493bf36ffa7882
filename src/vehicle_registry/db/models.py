"""
SQLAlchemy ORM Models

Tracked stock vehicles, the canonical DVLA registry record per registration,
and sweep run tracking. RegistryRecord is keyed by normalized registration;
TrackedVehicle carries a denormalized copy of the MOT fields for fast reads.
"""
from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    String, Integer, Date, DateTime, Boolean, Text, Index, UniqueConstraint
)
from sqlalchemy.orm import Mapped, mapped_column

from src.vehicle_registry.db.base import (
    Base, TimestampMixin, SoftDeleteMixin, JSONPayload
)


class TrackedVehicle(Base, TimestampMixin, SoftDeleteMixin):
    """
    Stock vehicle that can be refreshed from the registry.

    Rows are created and archived by the inventory side of the platform; the
    sync pipeline only writes the MOT summary projection columns.
    """
    __tablename__ = "tracked_vehicles"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Stock identifier"
    )
    tenant_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Owning dealer"
    )
    registration: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        comment="Registration plate as entered in stock (may be blank)"
    )
    make: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    model: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # MOT summary projection (mirrors registry_records)
    mot_status: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="MOT status copied from the registry record"
    )
    mot_expiry_date: Mapped[Optional[date]] = mapped_column(
        Date,
        nullable=True,
        comment="MOT expiry copied from the registry record"
    )
    registry_last_checked: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the registry record was last refreshed"
    )
    registry_data_raw: Mapped[Optional[dict]] = mapped_column(
        JSONPayload,
        nullable=True,
        comment="Raw registry payload from the last refresh"
    )

    __table_args__ = (
        Index("idx_tracked_vehicles_tenant_id", "tenant_id"),
        Index("idx_tracked_vehicles_registration", "registration"),
        Index("idx_tracked_vehicles_is_active", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<TrackedVehicle(id={self.id}, registration={self.registration}, tenant={self.tenant_id})>"


class RegistryRecord(Base, TimestampMixin):
    """
    Canonical DVLA fact sheet for one registration plate.

    One row per plate regardless of how many stock vehicles reference it.
    last_checked is only ever set by a successful lookup.
    """
    __tablename__ = "registry_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    registration: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Normalized registration (no whitespace, upper case)"
    )

    # Technical attributes
    make: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    colour: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    fuel_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    year_of_manufacture: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    engine_capacity: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Engine capacity (cc)"
    )
    co2_emissions: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="CO2 emissions (g/km)"
    )
    type_approval: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    wheelplan: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    revenue_weight: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Revenue weight (kg)"
    )
    marked_for_export: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)

    # Roadworthiness and taxation
    mot_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    mot_expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    tax_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    tax_due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Documents
    date_of_last_v5c_issued: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    month_of_first_registration: Mapped[Optional[str]] = mapped_column(
        String(7),
        nullable=True,
        comment="YYYY-MM"
    )

    raw_data: Mapped[Optional[dict]] = mapped_column(
        JSONPayload,
        nullable=True,
        comment="Registry response as received"
    )
    last_checked: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Time of the last successful lookup"
    )

    __table_args__ = (
        UniqueConstraint("registration", name="uq_registry_records_registration"),
        Index("idx_registry_records_last_checked", "last_checked"),
    )

    def __repr__(self) -> str:
        return f"<RegistryRecord(registration={self.registration}, mot_status={self.mot_status})>"


class RegistrySyncRun(Base, TimestampMixin):
    """Sweep execution metadata and tracking."""
    __tablename__ = "registry_sync_runs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    tenant_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        comment="Dealer scope, NULL for all dealers"
    )
    force_refresh: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Run status: running, success, partial, failure, cancelled"
    )

    records_processed: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    records_updated: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    records_failed: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    error_message: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Error details if failed"
    )
    error_details: Mapped[Optional[dict]] = mapped_column(
        JSONPayload,
        nullable=True,
        comment="Error counts by kind"
    )

    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="Sweep start time"
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Sweep completion time"
    )

    __table_args__ = (
        Index("idx_registry_sync_runs_started_at", "started_at"),
    )

    def __repr__(self) -> str:
        return f"<RegistrySyncRun(status={self.status}, processed={self.records_processed})>"
