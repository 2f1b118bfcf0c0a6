"""
Alert Notification Model

Represents historical records of dispatched alert notifications.
Audit trail only: failed rows are never picked up for redelivery.
"""

from datetime import datetime
from sqlalchemy import Column, String, Numeric, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from app.database import Base, generate_uuid


class AlertNotification(Base):
    """Alert notification model for logging dispatch attempts."""

    __tablename__ = "alert_notifications"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    alert_id = Column(String(36), ForeignKey("alerts.id", ondelete="CASCADE"), nullable=False, index=True)
    office_id = Column(String(36), ForeignKey("offices.id"), nullable=True)  # Office whose rate fired the alert
    triggered_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Rate at trigger time
    rate = Column(Numeric(10, 2), nullable=False)

    # Notification status
    notification_sent = Column(Boolean, default=False, nullable=False)
    message_sid = Column(String, nullable=True)  # Twilio message SID
    error_message = Column(Text, nullable=True)  # Error details if notification failed

    # Relationships
    alert = relationship("Alert", back_populates="notifications")

    def __repr__(self):
        return (
            f"<AlertNotification(id={self.id}, alert_id={self.alert_id}, "
            f"triggered_at={self.triggered_at}, rate={self.rate}, "
            f"sent={self.notification_sent})>"
        )
