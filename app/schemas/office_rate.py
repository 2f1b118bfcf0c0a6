from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class OfficeRateCreate(BaseModel):
    officeId: str = Field(..., description="Office owning the rate.")
    targetCurrency: str = Field(..., description="Target currency code (e.g., EUR).")
    buyRate: Decimal = Field(..., description="Price at which the office buys the target currency.")
    sellRate: Decimal = Field(..., description="Price at which the office sells the target currency.")
    isActive: bool = Field(True, description="Whether the rate is published.")


class OfficeRateUpdate(BaseModel):
    buyRate: Optional[Decimal] = Field(None, description="New buy rate.")
    sellRate: Optional[Decimal] = Field(None, description="New sell rate.")
    isActive: Optional[bool] = Field(None, description="New active flag.")


class CurrencyRate(BaseModel):
    currency: str = Field(..., description="Target currency code.")
    buy: Decimal = Field(..., description="Buy rate.")
    sell: Decimal = Field(..., description="Sell rate.")


class BulkRateUpdate(BaseModel):
    rates: List[CurrencyRate] = Field(..., description="Currency rates to apply to every office.")
    officeSlugs: List[str] = Field(..., description="Slugs of the offices to update.")
