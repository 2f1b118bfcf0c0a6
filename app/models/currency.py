"""
Currency Model

Reference currencies (ISO 4217 codes) used by office rates and alerts.
"""

from sqlalchemy import Column, String

from app.database import Base, generate_uuid


class Currency(Base):
    """Currency reference model."""

    __tablename__ = "currencies"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    code = Column(String(3), unique=True, nullable=False, index=True)  # e.g., "MAD" (stored uppercase)
    name = Column(String, nullable=True)

    def __repr__(self):
        return f"<Currency(id={self.id}, code={self.code})>"
