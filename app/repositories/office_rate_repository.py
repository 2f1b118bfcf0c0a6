"""
Office Rate Repository - Data access layer
"""

from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy.orm import Session

from app.models.office_rate import OfficeRate


class OfficeRateRepository(ABC):
    """Persistence interface for office rates."""

    @abstractmethod
    def find_by_id(self, rate_id: str) -> Optional[OfficeRate]:
        pass

    @abstractmethod
    def find_by_office_and_currency(self, office_id: str, target_currency_id: str) -> Optional[OfficeRate]:
        pass

    @abstractmethod
    def create(self, rate: OfficeRate) -> OfficeRate:
        pass

    @abstractmethod
    def save(self, rate: OfficeRate) -> OfficeRate:
        pass


class SqlAlchemyOfficeRateRepository(OfficeRateRepository):
    """Repository for office rate database operations."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, rate_id: str) -> Optional[OfficeRate]:
        return self.db.query(OfficeRate).filter(OfficeRate.id == rate_id).first()

    def find_by_office_and_currency(self, office_id: str, target_currency_id: str) -> Optional[OfficeRate]:
        return (
            self.db.query(OfficeRate)
            .filter(
                OfficeRate.office_id == office_id,
                OfficeRate.target_currency_id == target_currency_id,
            )
            .first()
        )

    def create(self, rate: OfficeRate) -> OfficeRate:
        self.db.add(rate)
        self.db.commit()
        self.db.refresh(rate)
        return rate

    def save(self, rate: OfficeRate) -> OfficeRate:
        self.db.add(rate)
        self.db.commit()
        self.db.refresh(rate)
        return rate
