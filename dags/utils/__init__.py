"""
Airflow DAG Utilities

Helper functions for DAGs including notifications.
"""
from dags.utils.notifications import (
    send_slack_notification,
    format_sweep_summary,
    format_access_denied_alert,
)

__all__ = [
    "send_slack_notification",
    "format_sweep_summary",
    "format_access_denied_alert",
]
