"""
FastAPI Dependencies

Provides dependency injection for database sessions, the registry client and
the sweep configuration.
"""
from typing import Generator

from sqlalchemy.orm import Session

from config.settings import settings
from src.vehicle_registry.clients.registry_client import RegistryClient
from src.vehicle_registry.db.session import SessionLocal, get_db_session
from src.vehicle_registry.sync.config import SweepConfig
from src.vehicle_registry.sync.refresh import SessionScope


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields:
        SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_scope() -> SessionScope:
    """Factory for per-vehicle transactional sessions."""
    return get_db_session


def get_sweep_config() -> SweepConfig:
    return SweepConfig.from_settings(settings)


def get_registry_client() -> Generator[RegistryClient, None, None]:
    """
    Registry client dependency.

    Raises:
        RegistryConfigurationError: if no API key is configured
    """
    client = RegistryClient(config=get_sweep_config())
    try:
        yield client
    finally:
        client.close()
