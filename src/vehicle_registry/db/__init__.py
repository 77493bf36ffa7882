"""
Database Package

Registry tables, connection management and repositories.
"""
from src.vehicle_registry.db.base import Base
from src.vehicle_registry.db.session import (
    engine,
    SessionLocal,
    get_db_session,
    get_db,
    close_connections,
    create_all_tables,
)
from src.vehicle_registry.db.models import (
    TrackedVehicle,
    RegistryRecord,
    RegistrySyncRun,
)
from src.vehicle_registry.db.repository import (
    BaseRepository,
    TrackedVehicleRepository,
    RegistryRecordRepository,
    RegistrySyncRunRepository,
)

__all__ = [
    # Base
    "Base",
    # Session management
    "engine",
    "SessionLocal",
    "get_db_session",
    "get_db",
    "close_connections",
    "create_all_tables",
    # Models
    "TrackedVehicle",
    "RegistryRecord",
    "RegistrySyncRun",
    # Repositories
    "BaseRepository",
    "TrackedVehicleRepository",
    "RegistryRecordRepository",
    "RegistrySyncRunRepository",
]
