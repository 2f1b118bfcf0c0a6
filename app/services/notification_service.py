"""
Notification Service

Composes rate alert messages and dispatches them over WhatsApp.
Logs every dispatch attempt as an AlertNotification row.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from app.events.rate_change import CityRef, OfficeRef
from app.models.alert import Alert, TriggerType
from app.models.alert_notification import AlertNotification
from app.services.messaging import DeliveryResult, MessagingTransport, format_whatsapp_address
from app.templates.whatsapp_templates import (
    CITY_ALERT_TEMPLATE,
    GENERIC_ALERT_TEMPLATE,
    MULTIPLE_OFFICES_ALERT_TEMPLATE,
    OFFICE_ALERT_TEMPLATE,
)
from app.utils.logger import create_logger

logger = create_logger(__name__)


def format_rate(rate) -> str:
    """
    Render a rate without trailing zeros.

    Example:
        Decimal("10.60") -> "10.6", Decimal("11.00") -> "11"
    """
    value = Decimal(str(rate)).normalize()
    return format(value, "f")


def build_notification_message(
    alert: Alert,
    trigger_type: TriggerType,
    current_rate,
    context_office: Optional[OfficeRef] = None,
    context_city: Optional[CityRef] = None,
) -> str:
    """
    Build the WhatsApp message for a triggered alert.

    Template selection:
    - OFFICE with a context office: names that office
    - OFFICE without context: names the alert's office when it has exactly
      one, otherwise announces how many offices it covers
    - CITY: names the context city, or the alert's cities comma-joined
    - anything else: generic message with the rate only

    Args:
        alert: Matched alert (currencies, cities and offices loaded)
        trigger_type: Scope the alert matched on
        current_rate: Rate that satisfied the threshold
        context_office: Office whose rate changed, when known
        context_city: City of that office, when known

    Returns:
        str: Message body
    """
    values = {
        "base_currency": alert.base_currency.code,
        "target_currency": alert.target_currency.code,
        "rate": format_rate(current_rate),
    }

    if trigger_type == TriggerType.OFFICE:
        if context_office is not None and context_office.name:
            return OFFICE_ALERT_TEMPLATE.format(office_name=context_office.name, **values)

        offices = alert.offices or []
        if len(offices) == 1:
            return OFFICE_ALERT_TEMPLATE.format(office_name=offices[0].office_name, **values)
        if len(offices) > 1:
            return MULTIPLE_OFFICES_ALERT_TEMPLATE.format(office_count=len(offices), **values)

    elif trigger_type == TriggerType.CITY:
        if context_city is not None and context_city.name:
            return CITY_ALERT_TEMPLATE.format(city_names=context_city.name, **values)

        cities = alert.cities or []
        if cities:
            city_names = ", ".join(city.name for city in cities)
            return CITY_ALERT_TEMPLATE.format(city_names=city_names, **values)

    return GENERIC_ALERT_TEMPLATE.format(**values)


class NotificationDispatcher:
    """Service for sending alert notifications via WhatsApp."""

    def __init__(self, transport: MessagingTransport, db: Session):
        """
        Initialize notification dispatcher.

        Args:
            transport: Messaging transport used to deliver messages
            db: SQLAlchemy database session
        """
        self.transport = transport
        self.db = db

    def send_alert_notification(
        self,
        alert: Alert,
        trigger_type: TriggerType,
        current_rate: Decimal,
        context_office: Optional[OfficeRef] = None,
        context_city: Optional[CityRef] = None,
    ) -> DeliveryResult:
        """
        Send WhatsApp notification for a matched alert.

        Never raises: a failed send is logged, recorded and returned as an
        unsent DeliveryResult so sibling alerts keep being processed.

        Side effects:
            - Sends WhatsApp message via the transport
            - Logs an AlertNotification row (sent or failed)
            - Leaves alert.is_active untouched
        """
        try:
            message_body = build_notification_message(
                alert, trigger_type, current_rate, context_office, context_city
            )
            address = format_whatsapp_address(alert.whatsapp_number)

            logger.info(f"Sending rate alert to {alert.whatsapp_number} for alert {alert.id}")
            result = self.transport.send(address, message_body)

        except Exception as e:
            logger.error(
                f"Failed to send WhatsApp notification to {alert.whatsapp_number} "
                f"for alert {alert.id}: {e}"
            )
            result = DeliveryResult(recipient=alert.whatsapp_number, sent=False, error=str(e))
            self._log_notification(alert, current_rate, context_office, result)
            return result

        logger.info(
            f"WhatsApp notification sent to {alert.whatsapp_number} "
            f"for alert {alert.id}, SID={result.message_sid}"
        )
        self._log_notification(alert, current_rate, context_office, result)
        return result

    def _log_notification(
        self,
        alert: Alert,
        current_rate: Decimal,
        context_office: Optional[OfficeRef],
        result: DeliveryResult,
    ) -> None:
        """Record the dispatch attempt; a logging failure never affects delivery."""
        try:
            notification = AlertNotification(
                alert_id=alert.id,
                office_id=context_office.id if context_office else None,
                triggered_at=datetime.utcnow(),
                rate=current_rate,
                notification_sent=result.sent,
                message_sid=result.message_sid,
                error_message=result.error,
            )
            self.db.add(notification)
            self.db.commit()
        except Exception as log_error:
            logger.error(f"Failed to log alert notification for alert {alert.id}: {log_error}")
            self.db.rollback()
