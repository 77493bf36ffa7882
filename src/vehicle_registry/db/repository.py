"""
Repository Pattern for Data Access

Queries and writes used by the registry sync pipeline.
"""
from datetime import datetime, date
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

from sqlalchemy import select, update, func, desc
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from src.vehicle_registry.db.models import (
    TrackedVehicle,
    RegistryRecord,
    RegistrySyncRun,
)
from src.vehicle_registry.utils.logger import get_logger
from src.vehicle_registry.utils.timeutils import utc_now

logger = get_logger(__name__)

T = TypeVar('T')

# Keep IN (...) lists well below driver parameter limits
_IN_CHUNK_SIZE = 500


def _insert_for(session: Session):
    """Dialect-specific INSERT supporting ON CONFLICT."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise NotImplementedError(f"Upsert is not supported on {dialect}")


class BaseRepository:
    """Lookups shared by every registry repository."""

    def __init__(self, model: Type[T]):
        self.model = model

    def get_by_id(self, session: Session, id_value: Any) -> Optional[T]:
        """Row by primary key, or None."""
        result = session.get(self.model, id_value)
        logger.debug(
            "repository_get_by_id",
            model=self.model.__name__,
            id=id_value,
            found=result is not None
        )
        return result

    def count(self, session: Session) -> int:
        return session.scalar(select(func.count()).select_from(self.model))


class TrackedVehicleRepository(BaseRepository):
    """Repository for stock vehicles and their MOT summary projection."""

    def __init__(self):
        super().__init__(TrackedVehicle)

    def get_eligible(self, session: Session, tenant_id: Optional[str] = None) -> List[TrackedVehicle]:
        """
        Active vehicles with a registration, oldest stock first.

        Args:
            session: Database session
            tenant_id: Restrict to one dealer

        Returns:
            Vehicles ordered by created_at (then id, for ties)
        """
        query = select(TrackedVehicle).where(
            TrackedVehicle.is_active == True,  # noqa: E712
            TrackedVehicle.registration.is_not(None),
            TrackedVehicle.registration != '',
        )
        if tenant_id:
            query = query.where(TrackedVehicle.tenant_id == tenant_id)

        query = query.order_by(TrackedVehicle.created_at, TrackedVehicle.id)
        vehicles = session.execute(query).scalars().all()

        # Whitespace-only plates pass the SQL filter
        eligible = [v for v in vehicles if v.registration and v.registration.strip()]
        logger.debug("eligible_vehicles_loaded", tenant_id=tenant_id, count=len(eligible))
        return eligible

    def update_projection(
        self,
        session: Session,
        vehicle_id: str,
        mot_status: Optional[str],
        mot_expiry_date: Optional[date],
        last_checked: datetime,
        raw_data: Optional[Dict[str, Any]],
    ) -> int:
        """
        Write the MOT summary fields onto one vehicle.

        Returns:
            Number of rows updated (0 when the vehicle no longer exists)
        """
        stmt = (
            update(TrackedVehicle)
            .where(TrackedVehicle.id == vehicle_id)
            .values(
                mot_status=mot_status,
                mot_expiry_date=mot_expiry_date,
                registry_last_checked=last_checked,
                registry_data_raw=raw_data,
            )
        )
        result = session.execute(stmt)
        return result.rowcount


class RegistryRecordRepository(BaseRepository):
    """Repository for canonical registry records keyed by registration."""

    def __init__(self):
        super().__init__(RegistryRecord)

    def get_by_registration(self, session: Session, registration: str) -> Optional[RegistryRecord]:
        """
        Get registry record by normalized registration.

        Always reloads from the database so values written by upsert() are visible.
        """
        query = (
            select(RegistryRecord)
            .where(RegistryRecord.registration == registration)
            .execution_options(populate_existing=True)
        )
        return session.execute(query).scalar_one_or_none()

    def get_by_registrations(
        self,
        session: Session,
        registrations: Iterable[str]
    ) -> Dict[str, RegistryRecord]:
        """
        Load records for many plates at once.

        Args:
            session: Database session
            registrations: Normalized plates

        Returns:
            Mapping of registration to record (plates without a record are absent)
        """
        unique = sorted(set(r for r in registrations if r))
        records: Dict[str, RegistryRecord] = {}

        for i in range(0, len(unique), _IN_CHUNK_SIZE):
            chunk = unique[i:i + _IN_CHUNK_SIZE]
            query = select(RegistryRecord).where(RegistryRecord.registration.in_(chunk))
            for record in session.execute(query).scalars():
                records[record.registration] = record

        logger.debug("registry_records_loaded", requested=len(unique), found=len(records))
        return records

    def upsert(
        self,
        session: Session,
        registration: str,
        values: Dict[str, Any],
        last_checked: datetime,
    ) -> RegistryRecord:
        """
        Insert or overwrite the record for a registration.

        Every fact column is replaced with the new value; nothing from the
        previous row is merged in.

        Args:
            session: Database session
            registration: Normalized plate
            values: Fact column values
            last_checked: Time of the successful lookup

        Returns:
            RegistryRecord instance
        """
        if not registration:
            raise ValueError("registration is required for upsert")

        row = {**values, "registration": registration, "last_checked": last_checked}

        insert = _insert_for(session)
        stmt = insert(RegistryRecord).values(**row)
        stmt = stmt.on_conflict_do_update(
            index_elements=['registration'],
            set_={
                **{k: getattr(stmt.excluded, k) for k in row if k != 'registration'},
                'updated_at': func.now(),
            }
        )

        session.execute(stmt)
        session.flush()

        logger.debug("registry_record_upserted", registration=registration)
        return self.get_by_registration(session, registration)


class RegistrySyncRunRepository(BaseRepository):
    """Repository for RegistrySyncRun model (sweep tracking)."""

    def __init__(self):
        super().__init__(RegistrySyncRun)

    def create_run(
        self,
        session: Session,
        tenant_id: Optional[str] = None,
        force_refresh: bool = False,
        started_at: Optional[datetime] = None
    ) -> RegistrySyncRun:
        """
        Create new sweep run.

        Args:
            session: Database session
            tenant_id: Dealer scope of the sweep
            force_refresh: Whether staleness was ignored
            started_at: Start timestamp (defaults to now)

        Returns:
            RegistrySyncRun instance
        """
        run = RegistrySyncRun(
            tenant_id=tenant_id,
            force_refresh=force_refresh,
            status='running',
            started_at=started_at or utc_now()
        )

        session.add(run)
        session.flush()

        logger.info("sync_run_created", run_id=run.id, tenant_id=tenant_id)
        return run

    def complete_run(
        self,
        session: Session,
        run_id: int,
        status: str,
        records_processed: int = 0,
        records_updated: int = 0,
        records_failed: int = 0,
        error_message: Optional[str] = None,
        error_details: Optional[Dict] = None,
        completed_at: Optional[datetime] = None
    ) -> RegistrySyncRun:
        """
        Mark sweep run as complete.

        Args:
            session: Database session
            run_id: Run ID
            status: Final status (success, partial, failure, cancelled)
            records_processed: Vehicles attempted
            records_updated: Vehicles refreshed
            records_failed: Vehicles that failed
            error_message: Error message if the sweep failed
            error_details: Failure counts by error kind

        Returns:
            Updated RegistrySyncRun instance
        """
        run = self.get_by_id(session, run_id)
        if not run:
            raise ValueError(f"RegistrySyncRun {run_id} not found")

        run.status = status
        run.records_processed = records_processed
        run.records_updated = records_updated
        run.records_failed = records_failed
        run.error_message = error_message
        run.error_details = error_details
        run.completed_at = completed_at or utc_now()

        session.flush()

        logger.info(
            "sync_run_completed",
            run_id=run_id,
            status=status,
            processed=records_processed,
            updated=records_updated,
            failed=records_failed
        )
        return run

    def get_recent_runs(self, session: Session, limit: int = 10) -> List[RegistrySyncRun]:
        """Most recent sweeps first."""
        query = select(RegistrySyncRun).order_by(desc(RegistrySyncRun.started_at)).limit(limit)
        return session.execute(query).scalars().all()
