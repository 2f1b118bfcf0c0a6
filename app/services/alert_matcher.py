"""
Alert Matcher

Consumes rate change events: selects the comparison rate, finds the CITY and
OFFICE scoped alerts it satisfies and hands each one to the dispatcher.
"""

from typing import Dict, List

from app.config import REFERENCE_CURRENCY_CODE
from app.events.rate_change import RateChangeEvent
from app.models.alert import Alert, TriggerType
from app.services.alert_service import AlertService
from app.services.notification_service import NotificationDispatcher
from app.utils.logger import create_logger

logger = create_logger(__name__)


class AlertMatcher:
    """Matches rate changes against stored alerts and notifies requesters."""

    def __init__(
        self,
        alert_service: AlertService,
        dispatcher: NotificationDispatcher,
        reference_currency_code: str = REFERENCE_CURRENCY_CODE,
    ):
        self.alert_service = alert_service
        self.dispatcher = dispatcher
        self.reference_currency_code = reference_currency_code

    def find_city_matches(self, event: RateChangeEvent) -> List[Alert]:
        """CITY alerts satisfied by the event; empty when the office has no city."""
        if event.office.city is None:
            logger.warning(f"Office {event.office.id} has no city, skipping city alerts")
            return []

        return self.alert_service.find_matching_alerts(
            TriggerType.CITY,
            event.office.city.id,
            event.base_currency.id,
            event.target_currency.id,
            event.comparison_rate(self.reference_currency_code),
        )

    def find_office_matches(self, event: RateChangeEvent) -> List[Alert]:
        return self.alert_service.find_matching_alerts(
            TriggerType.OFFICE,
            event.office.id,
            event.base_currency.id,
            event.target_currency.id,
            event.comparison_rate(self.reference_currency_code),
        )

    def handle_rate_change(self, event: RateChangeEvent) -> Dict:
        """
        Process one rate change event.

        City alerts and office alerts are looked up independently; a failing
        lookup or a failing dispatch is logged and never stops the rest. A failed
        lookup rolls the shared session back so later events still match.

        Args:
            event: Published rate change

        Returns:
            dict: Summary with matched and delivered counts
        """
        direction = event.direction(self.reference_currency_code)
        target_rate = event.comparison_rate(self.reference_currency_code)

        logger.info(
            f"Processing rate update for office {event.office.id}, "
            f"{event.base_currency.code} -> {event.target_currency.code} "
            f"({direction.value} {target_rate})"
        )

        summary = {
            "office_id": event.office.id,
            "direction": direction.value,
            "rate": str(target_rate),
            "city_alerts": 0,
            "office_alerts": 0,
            "sent": 0,
            "failed": 0,
        }

        try:
            city_alerts = self.find_city_matches(event)
            summary["city_alerts"] = len(city_alerts)
            logger.info(f"Found {len(city_alerts)} matching city alerts")

            for alert in city_alerts:
                self._notify(alert, TriggerType.CITY, event, summary)
        except Exception as e:
            logger.error(f"Error processing city alerts for office {event.office.id}: {e}", exc_info=True)
            self.alert_service.db.rollback()

        try:
            office_alerts = self.find_office_matches(event)
            summary["office_alerts"] = len(office_alerts)
            logger.info(f"Found {len(office_alerts)} matching office alerts")

            for alert in office_alerts:
                self._notify(alert, TriggerType.OFFICE, event, summary)
        except Exception as e:
            logger.error(f"Error processing office alerts for office {event.office.id}: {e}", exc_info=True)
            self.alert_service.db.rollback()

        return summary

    def _notify(self, alert: Alert, trigger_type: TriggerType, event: RateChangeEvent, summary: Dict) -> None:
        target_rate = event.comparison_rate(self.reference_currency_code)
        try:
            result = self.dispatcher.send_alert_notification(
                alert,
                trigger_type,
                target_rate,
                context_office=event.office,
                context_city=event.office.city if trigger_type == TriggerType.CITY else None,
            )
        except Exception as e:
            logger.error(f"Unexpected error notifying alert {alert.id}: {e}", exc_info=True)
            self.alert_service.db.rollback()
            summary["failed"] += 1
            return

        if result.sent:
            summary["sent"] += 1
        else:
            summary["failed"] += 1
