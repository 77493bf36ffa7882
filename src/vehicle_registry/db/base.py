"""
SQLAlchemy Base and Mixins

Declarative base shared by the registry tables, plus the timestamp and
archive-flag columns every stock table carries.
"""
from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONPayload = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Declarative base for registry sync models."""

    id: Any


class TimestampMixin:
    """Row creation and last-modification times, maintained by the database."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="Timestamp when record was created"
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        comment="Timestamp when record was last updated"
    )


class SoftDeleteMixin:
    """
    Archive flag for stock rows.

    Sold or withdrawn vehicles keep their row with is_active=False and drop
    out of registry sweeps and statistics.
    """

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        comment="False once the vehicle is archived"
    )


def import_all_models():
    """Register every model on Base.metadata (Alembic autogenerate, create_all)."""
    from src.vehicle_registry.db import models  # noqa: F401
