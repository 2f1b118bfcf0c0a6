"""
Domain Events

Rate change event and the buses that carry it.
"""

from app.events.rate_change import (
    RATE_UPDATE_EVENT,
    CityRef,
    CurrencyRef,
    OfficeRef,
    RateChangeEvent,
    RateDirection,
)
from app.events.bus import CeleryEventBus, EventBus, LocalEventBus

__all__ = [
    "RATE_UPDATE_EVENT",
    "CityRef",
    "CurrencyRef",
    "OfficeRef",
    "RateChangeEvent",
    "RateDirection",
    "EventBus",
    "LocalEventBus",
    "CeleryEventBus",
]
