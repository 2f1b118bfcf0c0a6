"""
Background Tasks

Celery tasks consuming rate change events and sending reminders.
"""

from app.tasks.rate_alerts import (
    match_rate_alerts,
    record_rate_history,
    send_rate_update_reminders,
)

__all__ = [
    "match_rate_alerts",
    "record_rate_history",
    "send_rate_update_reminders",
]
