"""
Office Rate Model

Buy and sell prices offered by an office for one currency pair.
The base currency is always the platform reference currency.
"""

from datetime import datetime
from sqlalchemy import Column, String, Numeric, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.database import Base, generate_uuid


class OfficeRate(Base):
    """Office rate model for one (office, base currency, target currency) tuple."""

    __tablename__ = "office_rates"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    office_id = Column(String(36), ForeignKey("offices.id"), nullable=False, index=True)
    base_currency_id = Column(String(36), ForeignKey("currencies.id"), nullable=False)
    target_currency_id = Column(String(36), ForeignKey("currencies.id"), nullable=False)

    # Price data
    buy_rate = Column(Numeric(10, 2), nullable=False)
    sell_rate = Column(Numeric(10, 2), nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    office = relationship("Office", back_populates="rates", lazy="joined")
    base_currency = relationship("Currency", foreign_keys=[base_currency_id], lazy="joined")
    target_currency = relationship("Currency", foreign_keys=[target_currency_id], lazy="joined")

    __table_args__ = (
        UniqueConstraint("office_id", "target_currency_id", name="office_rate_office_currency_unique"),
    )

    def __repr__(self):
        return (
            f"<OfficeRate(id={self.id}, office_id={self.office_id}, "
            f"buy={self.buy_rate}, sell={self.sell_rate}, active={self.is_active})>"
        )
