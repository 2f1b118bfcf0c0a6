"""
Database Models

All SQLAlchemy models for the application.
"""

from app.models.currency import Currency
from app.models.city import City
from app.models.office import Office
from app.models.office_rate import OfficeRate
from app.models.rate_history import RateHistory
from app.models.alert import Alert, TriggerType, alert_cities, alert_offices
from app.models.alert_notification import AlertNotification

__all__ = [
    "Currency",
    "City",
    "Office",
    "OfficeRate",
    "RateHistory",
    "Alert",
    "TriggerType",
    "alert_cities",
    "alert_offices",
    "AlertNotification",
]
