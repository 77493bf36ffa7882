"""
Registry Sweep Orchestrator

Runs one sweep: select stale vehicles once, then refresh them strictly one at
a time in fixed-size groups, pausing between vehicles and between groups so
the registry's informal rate budget is never exceeded.
"""
import threading
import time
import uuid
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from src.vehicle_registry.clients.registry_client import RegistryClient
from src.vehicle_registry.db.repository import RegistrySyncRunRepository
from src.vehicle_registry.exceptions import SelectionError
from src.vehicle_registry.models.sync_results import SweepOptions, SweepReport
from src.vehicle_registry.sync.config import SweepConfig
from src.vehicle_registry.sync.persistence import RegistryPersistenceAdapter
from src.vehicle_registry.sync.refresh import SessionScope, refresh_registration
from src.vehicle_registry.sync.selector import StalenessSelector
from src.vehicle_registry.utils.logger import (
    bind_sweep_context,
    clear_sweep_context,
    get_logger,
)
from src.vehicle_registry.utils.timeutils import utc_now

logger = get_logger(__name__)

Candidate = Tuple[str, str]


def partition(candidates: List[Candidate], batch_size: int) -> List[List[Candidate]]:
    """Split candidates into consecutive groups of at most batch_size."""
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    return [candidates[i:i + batch_size] for i in range(0, len(candidates), batch_size)]


class BatchOrchestrator:
    """
    Sequential, paced registry sweep.

    Single worker: each lookup completes (success or terminal failure) before
    the next starts. Concurrent sweeps must be prevented by the caller.
    """

    def __init__(
        self,
        client: RegistryClient,
        config: Optional[SweepConfig] = None,
        session_scope: Optional[SessionScope] = None,
        selector: Optional[StalenessSelector] = None,
        adapter: Optional[RegistryPersistenceAdapter] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = utc_now,
        track_runs: bool = False,
    ):
        """
        Initialize the orchestrator.

        Args:
            client: Registry client used for every lookup
            config: Pacing and staleness policy (defaults to settings)
            session_scope: Factory for transactional sessions (defaults to get_db_session)
            selector: Candidate selector (built from config when omitted)
            adapter: Persistence adapter
            sleep: Delay function used for pacing pauses
            clock: Source of "now" for selection and lookup timestamps
            track_runs: Record each sweep in registry_sync_runs
        """
        if session_scope is None:
            from src.vehicle_registry.db.session import get_db_session
            session_scope = get_db_session

        self.client = client
        self.config = config or SweepConfig.from_settings()
        self.session_scope = session_scope
        self.selector = selector or StalenessSelector(self.config.refresh_threshold_days)
        self.adapter = adapter or RegistryPersistenceAdapter()
        self.run_repository = RegistrySyncRunRepository()
        self.track_runs = track_runs
        self._sleep = sleep
        self._clock = clock

    def run_sweep(
        self,
        options: Optional[SweepOptions] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> SweepReport:
        """
        Run one sweep and report every attempted vehicle.

        Never raises. If candidates cannot be selected the report comes back
        with success=False and nothing processed. When cancel_event is set the
        sweep stops before the next vehicle or group pause and returns what it
        has so far.

        Args:
            options: Dealer scope, force flag and batch size override
            cancel_event: Cooperative cancellation signal

        Returns:
            SweepReport with counts and per-vehicle outcomes
        """
        options = options or SweepOptions()
        batch_size = options.batch_size or self.config.batch_size
        report = SweepReport(started_at=self._clock())

        bind_sweep_context(sweep_id=uuid.uuid4().hex[:12], tenant_id=options.tenant_id)
        try:
            run_id = self._start_run(options, report.started_at)

            try:
                candidates = self._select(options, report.started_at)
            except (SelectionError, SQLAlchemyError) as e:
                logger.error("sweep_aborted_selection_failed", error=str(e))
                report.success = False
                report.error = str(e)
                report.completed_at = self._clock()
                self._finish_run(run_id, report)
                return report

            report.candidates = len(candidates)
            if not candidates:
                logger.info("sweep_no_vehicles_need_refresh")
                report.completed_at = self._clock()
                self._finish_run(run_id, report)
                return report

            groups = partition(candidates, batch_size)
            logger.info(
                "sweep_started",
                candidates=len(candidates),
                batch_size=batch_size,
                groups=len(groups),
                force_refresh=options.force_refresh
            )

            self._process_groups(groups, report, cancel_event)

            report.completed_at = self._clock()
            self._finish_run(run_id, report)
            logger.info(
                "sweep_complete",
                processed=report.processed,
                updated=report.updated,
                errors=report.errors,
                cancelled=report.cancelled,
                error_counts=report.error_counts()
            )
            return report
        finally:
            clear_sweep_context()

    def _select(self, options: SweepOptions, now: datetime) -> List[Candidate]:
        """Fix the candidate list for the whole sweep."""
        with self.session_scope() as session:
            vehicles = self.selector.select(
                session,
                tenant_id=options.tenant_id,
                force_all=options.force_refresh,
                now=now,
            )
            return [(v.id, v.registration) for v in vehicles]

    def _process_groups(
        self,
        groups: List[List[Candidate]],
        report: SweepReport,
        cancel_event: Optional[threading.Event]
    ) -> None:
        for group_index, group in enumerate(groups):
            logger.info(
                "sweep_batch_started",
                batch=group_index + 1,
                total_batches=len(groups),
                size=len(group)
            )

            for position, (vehicle_id, registration) in enumerate(group):
                if self._cancelled(cancel_event):
                    report.cancelled = True
                    return

                outcome = refresh_registration(
                    self.client,
                    self.adapter,
                    self.session_scope,
                    vehicle_id,
                    registration,
                    clock=self._clock,
                )
                report.record(outcome)

                if not outcome.success:
                    logger.warning(
                        "sweep_vehicle_failed",
                        vehicle_id=vehicle_id,
                        registration=outcome.registration,
                        error=outcome.error.value if outcome.error else None,
                        error_message=outcome.error_message
                    )

                if position < len(group) - 1:
                    if self._cancelled(cancel_event):
                        report.cancelled = True
                        return
                    self._pause(self.config.request_delay_seconds, "request")

            if group_index < len(groups) - 1:
                if self._cancelled(cancel_event):
                    report.cancelled = True
                    return
                self._pause(self.config.batch_delay_seconds, "batch")

    def _pause(self, seconds: float, reason: str) -> None:
        if seconds <= 0:
            return
        logger.debug("sweep_pause", reason=reason, seconds=seconds)
        self._sleep(seconds)

    @staticmethod
    def _cancelled(cancel_event: Optional[threading.Event]) -> bool:
        if cancel_event is not None and cancel_event.is_set():
            logger.warning("sweep_cancelled")
            return True
        return False

    def _start_run(self, options: SweepOptions, started_at: datetime) -> Optional[int]:
        if not self.track_runs:
            return None
        try:
            with self.session_scope() as session:
                run = self.run_repository.create_run(
                    session,
                    tenant_id=options.tenant_id,
                    force_refresh=options.force_refresh,
                    started_at=started_at,
                )
                return run.id
        except SQLAlchemyError as e:
            logger.warning("sync_run_tracking_unavailable", error=str(e))
            return None

    def _finish_run(self, run_id: Optional[int], report: SweepReport) -> None:
        if run_id is None:
            return

        if not report.success:
            status = 'failure'
        elif report.cancelled:
            status = 'cancelled'
        elif report.errors:
            status = 'partial'
        else:
            status = 'success'

        try:
            with self.session_scope() as session:
                self.run_repository.complete_run(
                    session,
                    run_id,
                    status=status,
                    records_processed=report.processed,
                    records_updated=report.updated,
                    records_failed=report.errors,
                    error_message=report.error,
                    error_details=report.error_counts() or None,
                    completed_at=report.completed_at,
                )
        except SQLAlchemyError as e:
            logger.warning("sync_run_tracking_unavailable", run_id=run_id, error=str(e))
