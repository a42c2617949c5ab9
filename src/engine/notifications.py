# notifications.py
#
#   Builds the client-facing text for a schedule change.
#   Sending it (SMS, email, ...) is done by whoever commits the change.

from typing import List, Optional

from src.engine.models import CascadeChange, CascadeResult
from src.timezone_utils import format_display_date, format_time

MESSAGE_TEMPLATE = (
    "Hi {client}, your appointment moved to {date} at {time}{reason_clause}. "
    "Reply if you need a different time."
)


def render_client_notification(change: CascadeChange, reason: Optional[str] = None) -> str:
    """
    Message for one changed appointment.
    Args:
        change: the CascadeChange being announced
        reason: optional explanation, falls back to nothing
    """
    reason = (reason or "").strip().rstrip(".")
    return MESSAGE_TEMPLATE.format(
        client=change.client_label or "there",
        date=format_display_date(change.new_start),
        time=format_time(change.new_start),
        reason_clause=f" due to {reason}" if reason else "",
    )


def render_cascade_notifications(result: CascadeResult,
                                 reason: Optional[str] = None) -> List[dict]:
    """
    One message per affected client, in change order.
    A client with several changed jobs is told about the first one.

    Returns:
        list of {"jobId", "clientLabel", "message"}
    """
    messages = []
    notified = set()
    for change in result.changes:
        if not change.client_label or change.client_label in notified:
            continue
        notified.add(change.client_label)
        messages.append({
            "jobId": change.job_id,
            "clientLabel": change.client_label,
            "message": render_client_notification(change, reason),
        })
    return messages
