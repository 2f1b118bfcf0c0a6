from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.alert import TriggerType


class AlertCreate(BaseModel):
    triggerType: TriggerType = Field(..., description="Scope of the alert: CITY or OFFICE.")
    whatsAppNumber: str = Field(
        ..., description="WhatsApp number in international format (e.g., +212600000000)."
    )
    cities: Optional[List[str]] = Field(
        None, description="City IDs for city-based alerts (required when triggerType is CITY)."
    )
    offices: Optional[List[str]] = Field(
        None, description="Office IDs for office-based alerts (required when triggerType is OFFICE)."
    )
    currency: str = Field(..., description="Base currency code (e.g., MAD).")
    targetCurrency: str = Field(..., description="Target currency code (e.g., EUR).")
    baseCurrencyAmount: Decimal = Field(Decimal("1"), description="Reference amount of base currency.")
    targetCurrencyAmount: Decimal = Field(
        ..., description="Rate the requester is waiting for (target units per base amount)."
    )


class AlertUpdate(BaseModel):
    whatsAppNumber: Optional[str] = Field(None, description="New recipient WhatsApp number.")
    baseCurrencyAmount: Optional[Decimal] = Field(None, description="New reference amount.")
    targetCurrencyAmount: Optional[Decimal] = Field(None, description="New target rate.")
    isActive: Optional[bool] = Field(None, description="Enable or disable the alert.")
