"""
Application Errors

Error taxonomy shared by the alert and rate services. Each error carries a
human readable message and a field -> error key mapping suitable for a
structured API error body.
"""

from typing import Dict, Optional


class ExchangoError(Exception):
    """Base class for all application errors."""

    def __init__(self, message: str, errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or {}

    def to_dict(self) -> Dict:
        return {"error": self.__class__.__name__, "message": self.message, "errors": self.errors}


class ValidationError(ExchangoError):
    """Malformed input (missing scope, bad currency code, non-positive rate)."""


class NotFoundError(ExchangoError):
    """A referenced office, city, currency, rate or alert does not exist."""


class ConflictError(ExchangoError):
    """A rate already exists for the office and currency pair."""


class EventPublicationError(ExchangoError):
    """The event bus rejected a publish call."""


class DispatchError(ExchangoError):
    """The messaging transport failed to deliver a message."""

    def __init__(self, message: str, recipient: Optional[str] = None, errors: Optional[Dict[str, str]] = None):
        super().__init__(message, errors)
        self.recipient = recipient
