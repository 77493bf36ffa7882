"""
Registry Refresh DAG

Refreshes stale DVLA registry data (MOT status, tax status, technical facts)
for every active tracked vehicle, then reports the sweep to Slack.

Schedule: Daily at 1:00 AM
"""
from datetime import datetime, timedelta
from typing import Any, Dict

from airflow import DAG
from airflow.operators.python import PythonOperator

from dags.utils.notifications import (
    send_slack_notification,
    format_sweep_summary,
    format_access_denied_alert,
)
from src.vehicle_registry.clients.registry_client import RegistryClient
from src.vehicle_registry.exceptions import ErrorKind
from src.vehicle_registry.models.sync_results import SweepOptions, SweepReport
from src.vehicle_registry.sync.config import SweepConfig
from src.vehicle_registry.sync.orchestrator import BatchOrchestrator
from src.vehicle_registry.utils.logger import get_logger

logger = get_logger(__name__)

# DAG default arguments
default_args = {
    'owner': 'vehicle_registry',
    'depends_on_past': False,
    'email_on_failure': False,
    'email_on_retry': False,
    'retries': 1,
    'retry_delay': timedelta(minutes=10),
    'execution_timeout': timedelta(hours=3),
}


def build_sweep_payload(report: SweepReport) -> Dict[str, Any]:
    """
    Reduce a sweep report to the XCom payload read by the reporting task.

    Per-vehicle details are dropped except the plates the registry refused.
    """
    payload = report.model_dump(mode='json', exclude={'details'})
    payload['error_counts'] = report.error_counts()
    payload['access_denied'] = [
        outcome.registration for outcome in report.outcomes_with(ErrorKind.ACCESS_DENIED)
    ]
    return payload


def run_registry_sweep(**context):
    """
    Run one registry sweep across all dealers.

    dag_run.conf may carry tenant_id, force_refresh and batch_size.

    Returns:
        Sweep payload (also pushed to XCom)
    """
    dag_run = context.get('dag_run')
    conf = (dag_run.conf if dag_run and dag_run.conf else {}) or {}
    options = SweepOptions(
        tenant_id=conf.get('tenant_id'),
        force_refresh=bool(conf.get('force_refresh', False)),
        batch_size=conf.get('batch_size'),
    )

    logger.info("registry_sweep_task_started", **options.model_dump())

    config = SweepConfig.from_settings()
    with RegistryClient(config=config) as client:
        orchestrator = BatchOrchestrator(client, config=config, track_runs=True)
        report = orchestrator.run_sweep(options)

    payload = build_sweep_payload(report)
    context['task_instance'].xcom_push(key='sweep_report', value=payload)

    if not report.success:
        # Fail the task so Airflow retries and surfaces the run
        raise RuntimeError(f"Registry sweep failed: {report.error}")

    logger.info("registry_sweep_task_completed",
                processed=report.processed,
                updated=report.updated,
                errors=report.errors)
    return payload


def report_sweep_results(**context):
    """
    Post the sweep summary to Slack and alert on access-denied lookups.
    """
    ti = context['task_instance']
    payload = ti.xcom_pull(task_ids='run_registry_sweep', key='sweep_report')

    if not payload:
        logger.warning("no_sweep_report_found")
        return

    send_slack_notification(format_sweep_summary(payload))

    access_denied = payload.get('access_denied') or []
    if access_denied:
        logger.warning("registry_access_denied_alert", count=len(access_denied))
        send_slack_notification(format_access_denied_alert(access_denied))


# Define the DAG
with DAG(
    'registry_refresh',
    default_args=default_args,
    description='Daily DVLA registry refresh for tracked vehicles',
    schedule='0 1 * * *',  # 1:00 AM daily
    start_date=datetime(2024, 1, 1),
    catchup=False,
    max_active_runs=1,
    tags=['registry', 'dvla', 'mot'],
) as dag:

    run_sweep_task = PythonOperator(
        task_id='run_registry_sweep',
        python_callable=run_registry_sweep,
    )

    report_results_task = PythonOperator(
        task_id='report_sweep_results',
        python_callable=report_sweep_results,
        trigger_rule='all_done',  # Report failed sweeps too
    )

    run_sweep_task >> report_results_task
