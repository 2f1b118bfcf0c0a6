"""
Reference Directories

Read-only lookups for currencies, cities and offices. These entities are
owned by other parts of the platform; the alert engine only resolves them.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from app.models.city import City
from app.models.currency import Currency
from app.models.office import Office


class SqlAlchemyDirectory:
    """Lookup by primary key for a single model."""

    model = None

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, entity_id: str):
        return self.db.query(self.model).filter(self.model.id == entity_id).first()

    def find_by_ids(self, entity_ids: List[str]) -> List:
        if not entity_ids:
            return []
        return self.db.query(self.model).filter(self.model.id.in_(entity_ids)).all()


class CurrencyDirectory(SqlAlchemyDirectory):
    model = Currency

    def find_by_code(self, code: str) -> Optional[Currency]:
        return self.db.query(Currency).filter(Currency.code == code.upper()).first()


class CityDirectory(SqlAlchemyDirectory):
    model = City


class OfficeDirectory(SqlAlchemyDirectory):
    model = Office

    def find_by_slugs(self, slugs: List[str]) -> List[Office]:
        if not slugs:
            return []
        return self.db.query(Office).filter(Office.slug.in_(slugs)).all()
