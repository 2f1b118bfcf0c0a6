"""
City Model
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from app.database import Base, generate_uuid


class City(Base):
    """City in which exchange offices operate."""

    __tablename__ = "cities"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String, nullable=False, index=True)

    # Relationships
    offices = relationship("Office", back_populates="city")

    def __repr__(self):
        return f"<City(id={self.id}, name={self.name})>"
