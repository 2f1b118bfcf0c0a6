"""
Office Model

Represents a currency exchange office listed on the platform.
"""

from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.database import Base, generate_uuid


class Office(Base):
    """Exchange office model."""

    __tablename__ = "offices"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    office_name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    city_id = Column(String(36), ForeignKey("cities.id"), nullable=True, index=True)
    whatsapp_number = Column(String(255), nullable=True)

    # Office state
    is_active = Column(Boolean, default=True, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    rate_reminder_enabled = Column(Boolean, default=True, nullable=False)  # Daily WhatsApp reminder opt-in
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    city = relationship("City", back_populates="offices", lazy="joined")
    rates = relationship("OfficeRate", back_populates="office", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Office(id={self.id}, name={self.office_name}, city_id={self.city_id})>"
