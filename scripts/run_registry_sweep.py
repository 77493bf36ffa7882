"""
Run a Registry Sweep

Refreshes stale DVLA data for tracked vehicles from the command line.
Ctrl-C stops the sweep after the current lookup and prints the partial report.
"""
import argparse
import signal
import sys
import threading
from pathlib import Path
from typing import List, Optional

# Add parent directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.vehicle_registry.clients.registry_client import RegistryClient
from src.vehicle_registry.db.session import create_all_tables
from src.vehicle_registry.exceptions import RegistryConfigurationError
from src.vehicle_registry.models.sync_results import SweepOptions, SweepReport
from src.vehicle_registry.sync.config import SweepConfig
from src.vehicle_registry.sync.orchestrator import BatchOrchestrator
from src.vehicle_registry.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Refresh stale DVLA registry data for tracked vehicles.")
    parser.add_argument("--tenant-id", help="Only sweep vehicles belonging to this dealer.")
    parser.add_argument("--force", action="store_true", help="Refresh every eligible vehicle regardless of staleness.")
    parser.add_argument("--batch-size", type=int, help="Vehicles per group (default from settings).")
    parser.add_argument("--json", action="store_true", help="Print the full report as JSON.")
    parser.add_argument("--create-tables", action="store_true", help="Create missing tables before sweeping (local databases only).")
    args = parser.parse_args(argv)

    if args.batch_size is not None and args.batch_size < 1:
        parser.error("--batch-size must be at least 1")
    return args


def print_summary(report: SweepReport) -> None:
    print("\n" + "="*60)
    print("REGISTRY SWEEP SUMMARY")
    print("="*60)
    if not report.success:
        print(f"Selection failed: {report.error}")
    print(f"Candidates: {report.candidates}")
    print(f"Processed:  {report.processed}")
    print(f"Updated:    {report.updated}")
    print(f"Errors:     {report.errors}")
    for kind, count in sorted(report.error_counts().items()):
        print(f"  {kind}: {count}")
    if report.cancelled:
        print("Sweep was cancelled before completion")
    print("="*60 + "\n")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    args = parse_args(argv)
    setup_logging()

    cancel_event = threading.Event()

    def _request_cancel(signum, frame):
        logger.warning("sweep_cancel_requested", signal=signum)
        cancel_event.set()

    signal.signal(signal.SIGINT, _request_cancel)
    signal.signal(signal.SIGTERM, _request_cancel)

    if args.create_tables:
        create_all_tables()

    config = SweepConfig.from_settings()
    try:
        client = RegistryClient(config=config)
    except RegistryConfigurationError as e:
        print(f"\n✗ {e.message}\n", file=sys.stderr)
        return 2

    with client:
        orchestrator = BatchOrchestrator(client, config=config, track_runs=True)
        report = orchestrator.run_sweep(
            SweepOptions(tenant_id=args.tenant_id, force_refresh=args.force, batch_size=args.batch_size),
            cancel_event=cancel_event,
        )

    if args.json:
        print(report.model_dump_json(indent=2))
    else:
        print_summary(report)

    return 0 if report.success else 1


if __name__ == "__main__":
    sys.exit(main())
