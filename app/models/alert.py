"""
Alert Model

Represents a rate alert subscription configured by a WhatsApp user.
Supports two trigger scopes:
- CITY: fires for any office located in one of the selected cities
- OFFICE: fires only for the selected offices
"""

import enum
from datetime import datetime
from sqlalchemy import Column, String, Numeric, Boolean, DateTime, Enum, ForeignKey, Table
from sqlalchemy.orm import relationship

from app.database import Base, generate_uuid


class TriggerType(str, enum.Enum):
    """Scope an alert monitors."""

    CITY = "CITY"
    OFFICE = "OFFICE"


alert_cities = Table(
    "alert_cities",
    Base.metadata,
    Column("alert_id", String(36), ForeignKey("alerts.id", ondelete="CASCADE"), primary_key=True),
    Column("city_id", String(36), ForeignKey("cities.id", ondelete="CASCADE"), primary_key=True),
)

alert_offices = Table(
    "alert_offices",
    Base.metadata,
    Column("alert_id", String(36), ForeignKey("alerts.id", ondelete="CASCADE"), primary_key=True),
    Column("office_id", String(36), ForeignKey("offices.id", ondelete="CASCADE"), primary_key=True),
)


class Alert(Base):
    """Rate alert subscription model."""

    __tablename__ = "alerts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    trigger_type = Column(Enum(TriggerType, name="trigger_type"), nullable=False, index=True)
    whatsapp_number = Column(String(255), nullable=False)  # Recipient contact as entered by the user

    base_currency_id = Column(String(36), ForeignKey("currencies.id"), nullable=False, index=True)
    target_currency_id = Column(String(36), ForeignKey("currencies.id"), nullable=False, index=True)

    # "1 <base> = <threshold> <target>": the rate the requester is waiting for
    base_currency_amount = Column(Numeric(12, 4), default=1, nullable=False)
    target_currency_amount = Column(Numeric(12, 4), nullable=False)

    # Alert state
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    cities = relationship("City", secondary=alert_cities, lazy="selectin")
    offices = relationship("Office", secondary=alert_offices, lazy="selectin")
    base_currency = relationship("Currency", foreign_keys=[base_currency_id], lazy="joined")
    target_currency = relationship("Currency", foreign_keys=[target_currency_id], lazy="joined")
    notifications = relationship(
        "AlertNotification", back_populates="alert", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return (
            f"<Alert(id={self.id}, type={self.trigger_type}, "
            f"threshold={self.target_currency_amount}, active={self.is_active})>"
        )
