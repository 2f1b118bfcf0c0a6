"""
Messaging Transport

Outbound WhatsApp channel used by the notification dispatcher and the
reminder service.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from twilio.base.exceptions import TwilioException
from twilio.rest import Client as TwilioClient

from app.exceptions import DispatchError
from app.utils.logger import create_logger

logger = create_logger(__name__)

WHATSAPP_PREFIX = "whatsapp:"


@dataclass
class DeliveryResult:
    """Outcome of one send call."""

    recipient: str
    sent: bool
    message_sid: Optional[str] = None
    error: Optional[str] = None


def format_whatsapp_address(contact: str) -> str:
    """
    Normalize a phone number to a Twilio WhatsApp address.

    Args:
        contact: Phone number as entered (spaces, dashes, "+" or "whatsapp:" prefix allowed)

    Returns:
        str: Address such as "whatsapp:+212612345678"

    Raises:
        DispatchError: If the contact holds no digits
    """
    digits = re.sub(r"\D", "", contact or "")
    if not digits:
        raise DispatchError(
            f"Invalid WhatsApp number: {contact!r}",
            recipient=contact,
            errors={"whatsAppNumber": "invalidPhoneNumber"},
        )
    return f"{WHATSAPP_PREFIX}+{digits}"


class MessagingTransport(ABC):
    """Single send operation over a messaging channel."""

    @abstractmethod
    def send(self, recipient_address: str, body: str) -> DeliveryResult:
        """
        Deliver a message.

        Raises:
            DispatchError: If the channel rejects the message
        """
        pass


class TwilioWhatsAppTransport(MessagingTransport):
    """WhatsApp transport backed by the Twilio messages API."""

    def __init__(self, twilio_client: TwilioClient, sender_number: str):
        """
        Args:
            twilio_client: Twilio client for sending messages
            sender_number: Twilio WhatsApp sender, without the "whatsapp:" prefix
        """
        self.twilio = twilio_client
        self.sender_number = sender_number

    def send(self, recipient_address: str, body: str) -> DeliveryResult:
        try:
            response = self.twilio.messages.create(
                from_=f"{WHATSAPP_PREFIX}{self.sender_number}",
                body=body,
                to=recipient_address,
            )
        except TwilioException as e:
            raise DispatchError(
                f"Twilio rejected message to {recipient_address}: {e}",
                recipient=recipient_address,
            ) from e

        logger.debug(f"Twilio accepted message to {recipient_address}, SID={response.sid}")
        return DeliveryResult(recipient=recipient_address, sent=True, message_sid=response.sid)
