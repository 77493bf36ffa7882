"""
Notification Utilities

Slack alerts for registry sweeps.
"""
from typing import Any, Dict, List, Optional
import requests

from config.settings import settings
from src.vehicle_registry.utils.logger import get_logger

logger = get_logger(__name__)

# Plates listed in an alert before truncating
_MAX_LISTED = 10


def send_slack_notification(message: str, webhook_url: Optional[str] = None) -> bool:
    """
    Send notification to Slack via webhook.

    Args:
        message: Message to send
        webhook_url: Slack webhook URL (defaults to settings.alert_slack_webhook)

    Returns:
        True if successful, False otherwise
    """
    if not settings.alert_enable_slack:
        logger.info("slack_notifications_disabled")
        return False

    webhook_url = webhook_url or settings.alert_slack_webhook
    if not webhook_url:
        logger.warning("slack_webhook_url_not_configured")
        return False

    try:
        payload = {"text": message}
        response = requests.post(webhook_url, json=payload, timeout=10)
    except requests.RequestException as e:
        logger.error("slack_notification_error", error=str(e))
        return False

    if response.status_code == 200:
        logger.info("slack_notification_sent")
        return True

    logger.error("slack_notification_failed",
                 status_code=response.status_code,
                 response=response.text)
    return False


def format_sweep_summary(report: Dict[str, Any]) -> str:
    """
    Format a sweep report into a notification message.

    Args:
        report: SweepReport as a JSON-compatible dict (plus error_counts)

    Returns:
        Formatted message string
    """
    if not report.get('success', True):
        return "\n".join([
            "*Registry Sweep Failed*",
            "",
            f"Candidate selection failed: {report.get('error') or 'unknown error'}",
        ])

    title = "*Registry Sweep Cancelled*" if report.get('cancelled') else "*Registry Sweep Complete*"
    message_lines = [
        title,
        "",
        f"Candidates: {report.get('candidates', 0):,}",
        f"Processed: {report.get('processed', 0):,}",
        f"Updated: {report.get('updated', 0):,}",
        f"Errors: {report.get('errors', 0):,}",
    ]

    error_counts = report.get('error_counts') or {}
    if error_counts:
        message_lines.append("")
        message_lines.append("*Errors by kind:*")
        for kind, count in sorted(error_counts.items()):
            message_lines.append(f"- {kind}: {count}")

    return "\n".join(message_lines)


def format_access_denied_alert(registrations: List[str]) -> str:
    """
    Format an alert for lookups the registry refused.

    Access denied usually means the API key was revoked or rate-limited at
    the account level, so it needs a human.
    """
    message_lines = [
        f"*DVLA access denied for {len(registrations)} lookup(s)*",
        "",
        "Check the registry API key and account status.",
        "",
    ]
    for registration in registrations[:_MAX_LISTED]:
        message_lines.append(f"- {registration}")
    if len(registrations) > _MAX_LISTED:
        message_lines.append(f"... and {len(registrations) - _MAX_LISTED} more")

    return "\n".join(message_lines)
