"""
Rate Change Event

Ephemeral value object published after an office rate's buy or sell price
changes. Carries everything the alert matcher and the rate history recorder
need, so subscribers never have to reload the rate row.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

RATE_UPDATE_EVENT = "rate.update"


class RateDirection(str, Enum):
    """Which side of the office rate an alert is compared against."""

    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True)
class CurrencyRef:
    id: str
    code: str


@dataclass(frozen=True)
class CityRef:
    id: str
    name: str


@dataclass(frozen=True)
class OfficeRef:
    id: str
    name: str
    city: Optional[CityRef] = None  # None when the office has no city attached


@dataclass(frozen=True)
class RateChangeEvent:
    """Pre-image and post-image of an office rate around a committed update."""

    office: OfficeRef
    base_currency: CurrencyRef
    target_currency: CurrencyRef
    old_buy_rate: Decimal
    old_sell_rate: Decimal
    new_buy_rate: Decimal
    new_sell_rate: Decimal
    is_active: bool

    @property
    def has_changed(self) -> bool:
        return self.old_buy_rate != self.new_buy_rate or self.old_sell_rate != self.new_sell_rate

    def direction(self, reference_currency_code: str) -> RateDirection:
        """
        Pick the rate side compared against alert thresholds.

        When the base currency is the platform reference currency the buy
        rate is used, otherwise the sell rate.
        """
        if self.base_currency.code == reference_currency_code:
            return RateDirection.BUY
        return RateDirection.SELL

    def comparison_rate(self, reference_currency_code: str) -> Decimal:
        if self.direction(reference_currency_code) == RateDirection.BUY:
            return self.new_buy_rate
        return self.new_sell_rate

    @classmethod
    def from_rate(cls, rate, old_buy_rate, old_sell_rate) -> "RateChangeEvent":
        """
        Build an event from a persisted OfficeRate and its previous prices.

        Args:
            rate: OfficeRate after the update was committed
            old_buy_rate: Buy rate before the update
            old_sell_rate: Sell rate before the update
        """
        office = rate.office
        city = office.city
        return cls(
            office=OfficeRef(
                id=office.id,
                name=office.office_name,
                city=CityRef(id=city.id, name=city.name) if city else None,
            ),
            base_currency=CurrencyRef(id=rate.base_currency.id, code=rate.base_currency.code),
            target_currency=CurrencyRef(id=rate.target_currency.id, code=rate.target_currency.code),
            old_buy_rate=Decimal(old_buy_rate),
            old_sell_rate=Decimal(old_sell_rate),
            new_buy_rate=Decimal(rate.buy_rate),
            new_sell_rate=Decimal(rate.sell_rate),
            is_active=rate.is_active,
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe representation (decimals as strings) for task queues."""
        city = self.office.city
        return {
            "office": {
                "id": self.office.id,
                "name": self.office.name,
                "city": {"id": city.id, "name": city.name} if city else None,
            },
            "base_currency": {"id": self.base_currency.id, "code": self.base_currency.code},
            "target_currency": {"id": self.target_currency.id, "code": self.target_currency.code},
            "old_buy_rate": str(self.old_buy_rate),
            "old_sell_rate": str(self.old_sell_rate),
            "new_buy_rate": str(self.new_buy_rate),
            "new_sell_rate": str(self.new_sell_rate),
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RateChangeEvent":
        office = data["office"]
        city = office.get("city")
        return cls(
            office=OfficeRef(
                id=office["id"],
                name=office["name"],
                city=CityRef(**city) if city else None,
            ),
            base_currency=CurrencyRef(**data["base_currency"]),
            target_currency=CurrencyRef(**data["target_currency"]),
            old_buy_rate=Decimal(data["old_buy_rate"]),
            old_sell_rate=Decimal(data["old_sell_rate"]),
            new_buy_rate=Decimal(data["new_buy_rate"]),
            new_sell_rate=Decimal(data["new_sell_rate"]),
            is_active=bool(data["is_active"]),
        )
