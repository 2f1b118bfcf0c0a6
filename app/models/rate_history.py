"""
Rate History Model

One row per published rate change. Provides the audit trail of office rate
movements and the "last update" signal used by the daily reminder.
"""

from datetime import datetime
from sqlalchemy import Column, String, Numeric, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from app.database import Base, generate_uuid


class RateHistory(Base):
    """Historical record of a rate change."""

    __tablename__ = "rate_histories"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    office_id = Column(String(36), ForeignKey("offices.id"), nullable=False)
    base_currency_id = Column(String(36), ForeignKey("currencies.id"), nullable=False)
    target_currency_id = Column(String(36), ForeignKey("currencies.id"), nullable=False)

    old_buy_rate = Column(Numeric(10, 2), nullable=False)
    old_sell_rate = Column(Numeric(10, 2), nullable=False)
    new_buy_rate = Column(Numeric(10, 2), nullable=False)
    new_sell_rate = Column(Numeric(10, 2), nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    office = relationship("Office")
    target_currency = relationship("Currency", foreign_keys=[target_currency_id])

    __table_args__ = (
        # For "latest update per office" queries
        Index("ix_rate_history_office_created", "office_id", "created_at"),
    )

    def __repr__(self):
        return (
            f"<RateHistory(office_id={self.office_id}, "
            f"buy={self.old_buy_rate}->{self.new_buy_rate}, "
            f"sell={self.old_sell_rate}->{self.new_sell_rate})>"
        )
