"""
Rate Update Reminder Service

Daily WhatsApp reminder for offices whose rates have gone stale.
"""

from datetime import datetime
from typing import Dict

from sqlalchemy.orm import Session

from app.config import RATE_REMINDER_STALE_HOURS
from app.models.office import Office
from app.repositories.rate_history_repository import RateHistoryRepository
from app.services.messaging import MessagingTransport, format_whatsapp_address
from app.templates.whatsapp_templates import RATE_UPDATE_REMINDER_TEMPLATE
from app.utils.logger import create_logger
from app.utils.time_utils import hours_ago

logger = create_logger(__name__)


class RateUpdateReminderService:
    """Service for rate update reminders."""

    def __init__(self, transport: MessagingTransport, db: Session, stale_hours: int = RATE_REMINDER_STALE_HOURS):
        """
        Initialize reminder service.

        Args:
            transport: Messaging transport used to deliver reminders
            db: SQLAlchemy database session
            stale_hours: Hours without a rate change before an office is reminded
        """
        self.transport = transport
        self.db = db
        self.stale_hours = stale_hours
        self.histories = RateHistoryRepository(db)

    def send_reminders(self, now: datetime = None) -> Dict:
        """
        Remind every stale office to update its rates.

        Offices must be active, verified and opted in. An office without a
        WhatsApp number is skipped; a failed send does not stop the others.

        Returns:
            dict: Counts of checked, sent, skipped and failed offices
        """
        cutoff = hours_ago(self.stale_hours, now)
        offices = self.histories.offices_without_updates_since(cutoff)

        logger.info(f"Found {len(offices)} offices without recent rate updates")

        summary = {"offices_checked": len(offices), "sent": 0, "skipped": 0, "failed": 0}

        for office in offices:
            if not office.whatsapp_number:
                logger.warning(f"No WhatsApp number found for office: {office.office_name}")
                summary["skipped"] += 1
                continue

            if self._send_reminder(office):
                summary["sent"] += 1
            else:
                summary["failed"] += 1

        return summary

    def _send_reminder(self, office: Office) -> bool:
        try:
            body = RATE_UPDATE_REMINDER_TEMPLATE.format(
                office_name=office.office_name, stale_hours=self.stale_hours
            )
            address = format_whatsapp_address(office.whatsapp_number)
            self.transport.send(address, body)

            logger.info(f"WhatsApp reminder sent to {office.whatsapp_number} for office: {office.office_name}")
            return True

        except Exception as e:
            logger.error(f"Failed to send WhatsApp reminder for office {office.office_name}: {e}")
            return False
