"""
Database Session Management

Engine, session factory and the unit-of-work context manager used by the
sweep, the API and the CLI.
"""
from contextlib import contextmanager
from typing import Any, Dict, Generator

from sqlalchemy import create_engine, event, exc, pool
from sqlalchemy.orm import Session, sessionmaker

from config.settings import settings
from src.vehicle_registry.utils.logger import get_logger

logger = get_logger(__name__)


def _engine_options(database_url: str) -> Dict[str, Any]:
    """Pool options for the configured backend (SQLite pools take no sizing)."""
    options: Dict[str, Any] = {
        "pool_pre_ping": True,
        "echo": settings.database_echo,
    }
    if not database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_timeout=settings.database_pool_timeout,
            pool_recycle=settings.database_pool_recycle,
        )
    return options


engine = create_engine(settings.database_url, **_engine_options(settings.database_url))

# Sessions outlive their commit in the sweep (outcomes read row values afterwards)
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False
)


@event.listens_for(pool.Pool, "invalidate")
def _log_invalidated(dbapi_conn, connection_record, exception):
    logger.warning(
        "database_connection_invalidated",
        exception=str(exception) if exception else None
    )


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Open a session scoped to one unit of work.

    Commits when the block exits normally. Any exception rolls the session
    back and is re-raised, so a failed vehicle write leaves no partial rows.

    Usage:
        with get_db_session() as session:
            adapter.commit(session, vehicle_id, registration, facts)
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(
            "database_session_rollback",
            error=str(e),
            error_type=type(e).__name__,
            database_error=isinstance(e, exc.SQLAlchemyError),
        )
        raise
    finally:
        session.close()


def get_db() -> Session:
    """Bare session; the caller closes it (FastAPI dependency wraps this)."""
    return SessionLocal()


def close_connections():
    """Dispose of the pool on shutdown."""
    logger.info("closing_database_connections")
    engine.dispose()


def create_all_tables():
    """
    Create the registry tables directly from model metadata.

    Alembic owns the schema in deployed environments; this is for local
    setup and tests.
    """
    from src.vehicle_registry.db.base import Base, import_all_models

    import_all_models()
    Base.metadata.create_all(bind=engine)
    logger.info("database_tables_created")
