"""
Rate History Repository - Data access layer
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.models.office import Office
from app.models.rate_history import RateHistory


class RateHistoryRepository:
    """Repository for rate history records."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, history: RateHistory) -> RateHistory:
        self.db.add(history)
        self.db.commit()
        self.db.refresh(history)
        return history

    def latest_for_office(self, office_id: str) -> Optional[RateHistory]:
        return (
            self.db.query(RateHistory)
            .filter(RateHistory.office_id == office_id)
            .order_by(RateHistory.created_at.desc())
            .first()
        )

    def find_for_office(self, office_id: str, since: Optional[datetime] = None) -> List[RateHistory]:
        query = self.db.query(RateHistory).filter(RateHistory.office_id == office_id)
        if since is not None:
            query = query.filter(RateHistory.created_at >= since)
        return query.order_by(RateHistory.created_at.desc()).all()

    def offices_without_updates_since(self, cutoff: datetime) -> List[Office]:
        """
        Active, verified offices opted into reminders with no rate change after cutoff.

        Args:
            cutoff: Oldest change that still counts as recent
        """
        recent_update = (
            self.db.query(RateHistory.id)
            .filter(RateHistory.office_id == Office.id, RateHistory.created_at > cutoff)
            .exists()
        )

        return (
            self.db.query(Office)
            .filter(
                Office.is_active == True,  # noqa: E712
                Office.is_verified == True,  # noqa: E712
                Office.rate_reminder_enabled == True,  # noqa: E712
                ~recent_update,
            )
            .order_by(Office.office_name.asc())
            .all()
        )
