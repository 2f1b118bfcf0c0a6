"""
Rate Alert Background Tasks

Celery tasks consuming rate change events and running reminders:
1. match_rate_alerts: notifies requesters whose alert the new rate satisfies
2. record_rate_history: stores the change in the rate history
3. send_rate_update_reminders: daily reminder for stale offices (beat)

Alert fan-out is best effort: tasks never retry, a dropped notification is
not redelivered.
"""

from app.celery_app import celery_app
from app.database import SessionLocal
from app.dependencies import get_messaging_transport
from app.events.rate_change import RateChangeEvent
from app.services.alert_matcher import AlertMatcher
from app.services.alert_service import AlertService
from app.services.notification_service import NotificationDispatcher
from app.services.rate_history_service import RateHistoryService
from app.services.reminder_service import RateUpdateReminderService
from app.utils.logger import create_logger

logger = create_logger(__name__)


@celery_app.task(bind=True)
def match_rate_alerts(self, payload: dict):
    """
    Match a rate change against stored alerts and send WhatsApp notifications.

    Args:
        payload: RateChangeEvent.to_dict() output

    Returns:
        dict: Matcher summary, or an error status
    """
    db = SessionLocal()

    try:
        event = RateChangeEvent.from_dict(payload)
        matcher = AlertMatcher(
            AlertService(db),
            NotificationDispatcher(get_messaging_transport(), db),
        )
        summary = matcher.handle_rate_change(event)

        logger.info(
            f"Rate alert matching complete for office {event.office.id}: "
            f"{summary['sent']} sent, {summary['failed']} failed"
        )
        return {"status": "success", **summary}

    except Exception as e:
        logger.error(f"Error in match_rate_alerts task: {e}", exc_info=True)
        return {"status": "error", "error": str(e)}

    finally:
        db.close()


@celery_app.task(bind=True)
def record_rate_history(self, payload: dict):
    """
    Store a rate change in the rate history.

    Args:
        payload: RateChangeEvent.to_dict() output
    """
    db = SessionLocal()

    try:
        event = RateChangeEvent.from_dict(payload)
        history = RateHistoryService(db).record_rate_change(event)
        return {"status": "success", "history_id": history.id}

    except Exception as e:
        logger.error(f"Error in record_rate_history task: {e}", exc_info=True)
        db.rollback()
        return {"status": "error", "error": str(e)}

    finally:
        db.close()


@celery_app.task(bind=True)
def send_rate_update_reminders(self):
    """
    Send the daily rate update reminder to stale offices.

    Runs every day at RATE_REMINDER_HOUR local time.
    """
    db = SessionLocal()

    try:
        logger.info("Starting daily rate update reminder")
        summary = RateUpdateReminderService(get_messaging_transport(), db).send_reminders()

        logger.info(
            f"Rate update reminders complete: {summary['sent']} sent, "
            f"{summary['skipped']} skipped, {summary['failed']} failed"
        )
        return {"status": "success", **summary}

    except Exception as e:
        logger.error(f"Error in send_rate_update_reminders task: {e}", exc_info=True)
        return {"status": "error", "error": str(e)}

    finally:
        db.close()
