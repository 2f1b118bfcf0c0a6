"""
Rate History Service

Second subscriber of rate change events: keeps one history row per change.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.events.rate_change import RateChangeEvent
from app.models.rate_history import RateHistory
from app.repositories.rate_history_repository import RateHistoryRepository
from app.utils.logger import create_logger

logger = create_logger(__name__)


class RateHistoryService:
    """Service for rate change history."""

    def __init__(self, db: Session):
        self.db = db
        self.histories = RateHistoryRepository(db)

    def record_rate_change(self, event: RateChangeEvent) -> RateHistory:
        """
        Persist a rate change.

        Args:
            event: Published rate change

        Returns:
            RateHistory: Created history row

        Raises:
            Exception: The insert failed; the session is rolled back first
        """
        try:
            history = self.histories.create(
                RateHistory(
                    office_id=event.office.id,
                    base_currency_id=event.base_currency.id,
                    target_currency_id=event.target_currency.id,
                    old_buy_rate=event.old_buy_rate,
                    old_sell_rate=event.old_sell_rate,
                    new_buy_rate=event.new_buy_rate,
                    new_sell_rate=event.new_sell_rate,
                    is_active=event.is_active,
                )
            )
        except Exception as e:
            logger.error(f"Failed to record rate history for office {event.office.id}: {e}")
            self.db.rollback()
            raise

        logger.info(
            f"Rate history recorded for office {event.office.id} "
            f"{event.base_currency.code}->{event.target_currency.code}"
        )
        return history

    def latest_update_for_office(self, office_id: str) -> Optional[datetime]:
        """Timestamp of the office's most recent rate change, None if it never changed."""
        latest = self.histories.latest_for_office(office_id)
        return latest.created_at if latest else None

    def history_for_office(self, office_id: str, since: Optional[datetime] = None) -> List[RateHistory]:
        return self.histories.find_for_office(office_id, since)
