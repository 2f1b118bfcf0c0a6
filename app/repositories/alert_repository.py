"""
Alert Repository - Data access layer

Abstract repository plus the SQLAlchemy implementation used by the services.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.alert import Alert, TriggerType, alert_offices
from app.models.city import City
from app.models.office import Office


class AlertRepository(ABC):
    """Persistence interface for alert subscriptions."""

    @abstractmethod
    def create(self, alert: Alert) -> Alert:
        pass

    @abstractmethod
    def find_all(self, page: int = 1, limit: int = 10) -> List[Alert]:
        pass

    @abstractmethod
    def find_by_id(self, alert_id: str) -> Optional[Alert]:
        pass

    @abstractmethod
    def find_by_ids(self, alert_ids: List[str]) -> List[Alert]:
        pass

    @abstractmethod
    def save(self, alert: Alert) -> Alert:
        pass

    @abstractmethod
    def remove(self, alert: Alert) -> None:
        pass

    @abstractmethod
    def find_matching(
        self,
        trigger_type: TriggerType,
        scope_id: str,
        base_currency_id: str,
        target_currency_id: str,
        min_target_rate: Decimal,
    ) -> List[Alert]:
        pass

    @abstractmethod
    def count_active_for_office(self, office_id: str) -> int:
        pass

    @abstractmethod
    def count_active_for_office_in_period(self, office_id: str, start: datetime, end: datetime) -> int:
        pass

    @abstractmethod
    def count_created_for_office(self, office_id: str, start: datetime, end: datetime) -> int:
        pass

    @abstractmethod
    def count_created_in_period(self, start: datetime, end: datetime) -> int:
        pass

    @abstractmethod
    def count_active_in_period(self, start: datetime, end: datetime) -> int:
        pass

    @abstractmethod
    def bulk_created_counts(self, office_ids: List[str], start: datetime, end: datetime) -> Dict[str, int]:
        pass


class SqlAlchemyAlertRepository(AlertRepository):
    """Repository for alert database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, alert: Alert) -> Alert:
        self.db.add(alert)
        self.db.commit()
        self.db.refresh(alert)
        return alert

    def find_all(self, page: int = 1, limit: int = 10) -> List[Alert]:
        offset = (page - 1) * limit
        return (
            self.db.query(Alert)
            .order_by(Alert.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def find_by_id(self, alert_id: str) -> Optional[Alert]:
        return self.db.query(Alert).filter(Alert.id == alert_id).first()

    def find_by_ids(self, alert_ids: List[str]) -> List[Alert]:
        if not alert_ids:
            return []
        return self.db.query(Alert).filter(Alert.id.in_(alert_ids)).all()

    def save(self, alert: Alert) -> Alert:
        self.db.add(alert)
        self.db.commit()
        self.db.refresh(alert)
        return alert

    def remove(self, alert: Alert) -> None:
        self.db.delete(alert)
        self.db.commit()

    def find_matching(
        self,
        trigger_type: TriggerType,
        scope_id: str,
        base_currency_id: str,
        target_currency_id: str,
        min_target_rate: Decimal,
    ) -> List[Alert]:
        """
        Find active alerts satisfied by an available rate.

        An alert matches when its scope contains scope_id, its currency pair
        is exactly (base, target) and the available rate has reached its
        threshold (threshold <= min_target_rate). The full scope collections
        are loaded, not only the matched entry.
        """
        query = self.db.query(Alert).filter(
            Alert.trigger_type == trigger_type,
            Alert.base_currency_id == base_currency_id,
            Alert.target_currency_id == target_currency_id,
            Alert.target_currency_amount <= min_target_rate,
            Alert.is_active == True,  # noqa: E712
        )

        if trigger_type == TriggerType.CITY:
            query = query.filter(Alert.cities.any(City.id == scope_id))
        else:
            query = query.filter(Alert.offices.any(Office.id == scope_id))

        return query.all()

    def count_active_for_office(self, office_id: str) -> int:
        return (
            self.db.query(Alert)
            .filter(Alert.offices.any(Office.id == office_id), Alert.is_active == True)  # noqa: E712
            .count()
        )

    def count_active_for_office_in_period(self, office_id: str, start: datetime, end: datetime) -> int:
        return (
            self.db.query(Alert)
            .filter(
                Alert.offices.any(Office.id == office_id),
                Alert.is_active == True,  # noqa: E712
                Alert.created_at >= start,
                Alert.created_at <= end,
            )
            .count()
        )

    def count_created_for_office(self, office_id: str, start: datetime, end: datetime) -> int:
        return (
            self.db.query(Alert)
            .filter(
                Alert.offices.any(Office.id == office_id),
                Alert.created_at >= start,
                Alert.created_at <= end,
            )
            .count()
        )

    def count_created_in_period(self, start: datetime, end: datetime) -> int:
        return (
            self.db.query(Alert)
            .filter(Alert.created_at >= start, Alert.created_at <= end)
            .count()
        )

    def count_active_in_period(self, start: datetime, end: datetime) -> int:
        return (
            self.db.query(Alert)
            .filter(
                Alert.is_active == True,  # noqa: E712
                Alert.created_at >= start,
                Alert.created_at <= end,
            )
            .count()
        )

    def bulk_created_counts(self, office_ids: List[str], start: datetime, end: datetime) -> Dict[str, int]:
        """
        Count alerts created in a period for several offices at once.

        Returns:
            dict: office_id -> count, offices without alerts are omitted
        """
        if not office_ids:
            return {}

        rows = (
            self.db.query(alert_offices.c.office_id, func.count(Alert.id))
            .join(Alert, Alert.id == alert_offices.c.alert_id)
            .filter(
                alert_offices.c.office_id.in_(office_ids),
                Alert.created_at >= start,
                Alert.created_at <= end,
            )
            .group_by(alert_offices.c.office_id)
            .all()
        )

        return {office_id: int(count) for office_id, count in rows}
