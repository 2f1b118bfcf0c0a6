from twilio.rest import Client as TwilioClient
from sqlalchemy.orm import Session

from app.config import (
    TWILIO_ACCOUNT_SID,
    TWILIO_AUTH_TOKEN,
    TWILIO_WHATSAPP_NUMBER,
)
from app.events.bus import CeleryEventBus, EventBus, LocalEventBus
from app.events.rate_change import RATE_UPDATE_EVENT
from app.services.messaging import MessagingTransport, TwilioWhatsAppTransport

MATCH_RATE_ALERTS_TASK = "app.tasks.rate_alerts.match_rate_alerts"
RECORD_RATE_HISTORY_TASK = "app.tasks.rate_alerts.record_rate_history"


def get_twilio_client() -> TwilioClient:
    """
    Dependency to provide a Twilio client instance.

    Returns:
        TwilioClient: A Twilio client configured with the application's credentials.
    """
    return TwilioClient(TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN)


def get_messaging_transport() -> MessagingTransport:
    """
    Dependency to provide the WhatsApp transport.

    Returns:
        MessagingTransport: Twilio-backed transport sending from the configured number.
    """
    return TwilioWhatsAppTransport(get_twilio_client(), TWILIO_WHATSAPP_NUMBER)


def get_event_bus() -> EventBus:
    """
    Dependency to provide the worker-backed event bus.

    Every rate change is fanned out to the alert matching and rate history tasks.
    """
    from app.celery_app import celery_app

    bus = CeleryEventBus(celery_app)
    bus.subscribe(RATE_UPDATE_EVENT, MATCH_RATE_ALERTS_TASK)
    bus.subscribe(RATE_UPDATE_EVENT, RECORD_RATE_HISTORY_TASK)
    return bus


def build_local_event_bus(db: Session, transport: MessagingTransport, max_pending: int = None) -> LocalEventBus:
    """
    In-process event bus wired to the alert matcher and rate history recorder.

    Events are delivered when the owner calls drain().
    """
    from app.services.alert_matcher import AlertMatcher
    from app.services.alert_service import AlertService
    from app.services.notification_service import NotificationDispatcher
    from app.services.rate_history_service import RateHistoryService

    bus = LocalEventBus() if max_pending is None else LocalEventBus(max_pending=max_pending)

    matcher = AlertMatcher(AlertService(db), NotificationDispatcher(transport, db))
    bus.subscribe(RATE_UPDATE_EVENT, matcher.handle_rate_change)
    bus.subscribe(RATE_UPDATE_EVENT, RateHistoryService(db).record_rate_change)
    return bus
