"""
Celery Application Configuration

Configures Celery for background task processing with Redis broker.
Rate change events are consumed by workers; the daily rate update reminder
runs on the beat schedule.
"""

from celery import Celery
from celery.schedules import crontab

from app.config import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, LOCAL_TIMEZONE, RATE_REMINDER_HOUR

# Create Celery app
celery_app = Celery(
    "exchango_alerts",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
    include=["app.tasks.rate_alerts"],  # Import task modules
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=LOCAL_TIMEZONE,
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,  # 5 minutes max per task
    worker_prefetch_multiplier=1,  # Process one task at a time
    worker_max_tasks_per_child=100,  # Restart worker after 100 tasks (prevent memory leaks)
)

# Beat schedule (periodic tasks)
celery_app.conf.beat_schedule = {
    # Remind offices without a rate change in the last day
    "send-rate-update-reminders": {
        "task": "app.tasks.rate_alerts.send_rate_update_reminders",
        "schedule": crontab(hour=RATE_REMINDER_HOUR, minute=0),
        "options": {
            "expires": 3600,  # Skip if not picked up within an hour
        },
    },
}

if __name__ == "__main__":
    celery_app.start()
