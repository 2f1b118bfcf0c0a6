"""
Office Rate Service

Rate store operations for exchange offices. Every update that changes a buy
or sell price publishes a RateChangeEvent after the change is committed;
a publication failure is logged and never undoes the update.
"""

import re
from decimal import Decimal
from typing import Dict, Optional

from sqlalchemy.orm import Session

from app.config import REFERENCE_CURRENCY_CODE
from app.events.bus import EventBus
from app.events.rate_change import RATE_UPDATE_EVENT, RateChangeEvent
from app.exceptions import ConflictError, EventPublicationError, NotFoundError, ValidationError
from app.models.currency import Currency
from app.models.office_rate import OfficeRate
from app.repositories.office_rate_repository import OfficeRateRepository, SqlAlchemyOfficeRateRepository
from app.repositories.reference_repository import CurrencyDirectory, OfficeDirectory
from app.schemas.office_rate import BulkRateUpdate, OfficeRateCreate, OfficeRateUpdate
from app.utils.logger import create_logger

logger = create_logger(__name__)

CURRENCY_CODE_PATTERN = re.compile(r"^[A-Za-z]{3}$")


class OfficeRateService:
    """Service for office rates and rate change detection."""

    def __init__(
        self,
        db: Session,
        event_bus: EventBus,
        rate_repository: Optional[OfficeRateRepository] = None,
        reference_currency_code: str = REFERENCE_CURRENCY_CODE,
    ):
        """
        Initialize office rate service.

        Args:
            db: SQLAlchemy database session
            event_bus: Bus receiving rate change events
            rate_repository: Rate persistence (defaults to the SQLAlchemy repository)
            reference_currency_code: Base currency of every office rate
        """
        self.db = db
        self.event_bus = event_bus
        self.rates = rate_repository or SqlAlchemyOfficeRateRepository(db)
        self.currencies = CurrencyDirectory(db)
        self.offices = OfficeDirectory(db)
        self.reference_currency_code = reference_currency_code

    def find_by_id(self, rate_id: str) -> Optional[OfficeRate]:
        return self.rates.find_by_id(rate_id)

    def create_rate(self, data: OfficeRateCreate) -> OfficeRate:
        """
        Create a rate for an office and target currency.

        No event is published for new rates.

        Raises:
            ValidationError: Malformed code, non-positive rates, buy >= sell,
                target is the reference currency
            NotFoundError: Office, target or reference currency missing
            ConflictError: The office already has a rate for this currency
        """
        code = (data.targetCurrency or "").upper()
        if not CURRENCY_CODE_PATTERN.match(code):
            raise ValidationError(
                f"Invalid currency code: {data.targetCurrency!r}",
                errors={"targetCurrency": "invalidCurrencyFormat"},
            )

        self._validate_prices(data.buyRate, data.sellRate)

        office = self.offices.find_by_id(data.officeId)
        if not office:
            raise NotFoundError(f"Office not found: {data.officeId}", errors={"office": "officeNotFound"})

        target_currency = self.currencies.find_by_code(code)
        if not target_currency:
            raise NotFoundError(
                f"Currency not found: {code}", errors={"targetCurrency": "targetCurrencyNotFound"}
            )

        if target_currency.code == self.reference_currency_code:
            raise ValidationError(
                f"{code} is the base currency and cannot be a target",
                errors={"targetCurrency": "cannotUseBaseCurrencyAsTarget"},
            )

        base_currency = self._reference_currency()

        if self.rates.find_by_office_and_currency(office.id, target_currency.id):
            raise ConflictError(
                f"Office {office.id} already has a {code} rate",
                errors={"rate": "rateAlreadyExistsForCurrency"},
            )

        rate = self.rates.create(
            OfficeRate(
                office_id=office.id,
                base_currency_id=base_currency.id,
                target_currency_id=target_currency.id,
                buy_rate=data.buyRate,
                sell_rate=data.sellRate,
                is_active=data.isActive,
            )
        )

        logger.info(
            f"Rate created: office={office.id}, {base_currency.code}->{code}, "
            f"buy={rate.buy_rate}, sell={rate.sell_rate}"
        )
        return rate

    def update_rate(self, rate_id: str, data: OfficeRateUpdate) -> OfficeRate:
        """
        Apply a partial update to a rate and publish a change event.

        The event is published only when buy or sell actually changed. The
        updated rate is returned whatever happens on the event bus.

        Args:
            rate_id: Rate to update
            data: Fields to change

        Returns:
            OfficeRate: Updated rate

        Raises:
            NotFoundError: Rate does not exist
            ValidationError: A supplied buy or sell rate is not positive
        """
        rate = self.rates.find_by_id(rate_id)
        if not rate:
            raise NotFoundError(f"Rate not found: {rate_id}", errors={"rate": "rateNotFound"})

        changes = data.model_dump(exclude_unset=True)

        if changes.get("buyRate") is not None and changes["buyRate"] <= 0:
            raise ValidationError("Buy rate must be positive", errors={"buyRate": "invalidBuyRate"})
        if changes.get("sellRate") is not None and changes["sellRate"] <= 0:
            raise ValidationError("Sell rate must be positive", errors={"sellRate": "invalidSellRate"})

        old_buy_rate = Decimal(rate.buy_rate)
        old_sell_rate = Decimal(rate.sell_rate)

        if changes.get("buyRate") is not None:
            rate.buy_rate = changes["buyRate"]
        if changes.get("sellRate") is not None:
            rate.sell_rate = changes["sellRate"]
        if changes.get("isActive") is not None:
            rate.is_active = changes["isActive"]

        rate = self.rates.save(rate)

        self._publish_if_changed(rate, old_buy_rate, old_sell_rate)
        return rate

    def bulk_update_rates(self, data: BulkRateUpdate) -> Dict:
        """
        Apply the same currency rates to several offices.

        Each (office, currency) pair is processed independently: an invalid
        pair is recorded as an error detail and the rest continues.

        Returns:
            dict: {"results": {"updated", "created", "errors"}, "details": [...]}

        Raises:
            NotFoundError: None of the slugs resolve, or the reference currency is missing
        """
        offices = self.offices.find_by_slugs(data.officeSlugs)
        if not offices:
            raise NotFoundError(
                "No offices found with the provided slugs",
                errors={"offices": "noOfficesFoundWithProvidedSlugs"},
            )

        base_currency = self._reference_currency()

        results = {"updated": 0, "created": 0, "errors": 0}
        details = []

        for office in offices:
            for rate_data in data.rates:
                detail = {"officeSlug": office.slug, "currency": rate_data.currency}
                try:
                    if rate_data.buy <= 0 or rate_data.sell <= 0:
                        detail.update(action="error", message="ratesMustBePositive")
                        results["errors"] += 1
                        details.append(detail)
                        continue

                    if rate_data.buy >= rate_data.sell:
                        detail.update(action="error", message="buyRateMustBeLowerThanSellRate")
                        results["errors"] += 1
                        details.append(detail)
                        continue

                    target_currency = self.currencies.find_by_code(rate_data.currency)
                    if not target_currency or target_currency.id == base_currency.id:
                        detail.update(action="error", message="currencyNotFound")
                        results["errors"] += 1
                        details.append(detail)
                        continue

                    existing = self.rates.find_by_office_and_currency(office.id, target_currency.id)
                    if existing:
                        old_buy_rate = Decimal(existing.buy_rate)
                        old_sell_rate = Decimal(existing.sell_rate)

                        existing.buy_rate = rate_data.buy
                        existing.sell_rate = rate_data.sell
                        existing.is_active = True
                        existing = self.rates.save(existing)

                        self._publish_if_changed(existing, old_buy_rate, old_sell_rate)
                        detail.update(action="updated", message="rateUpdatedSuccessfully")
                        results["updated"] += 1
                    else:
                        self.rates.create(
                            OfficeRate(
                                office_id=office.id,
                                base_currency_id=base_currency.id,
                                target_currency_id=target_currency.id,
                                buy_rate=rate_data.buy,
                                sell_rate=rate_data.sell,
                                is_active=True,
                            )
                        )
                        detail.update(action="created", message="rateCreatedSuccessfully")
                        results["created"] += 1

                except Exception as e:
                    logger.error(
                        f"Error processing rate for office {office.slug} and currency {rate_data.currency}: {e}",
                        exc_info=True,
                    )
                    self.db.rollback()
                    detail.update(action="error", message=str(e) or "unknownError")
                    results["errors"] += 1

                details.append(detail)

        logger.info(
            f"Bulk rate update for {len(offices)} office(s): "
            f"{results['updated']} updated, {results['created']} created, {results['errors']} errors"
        )
        return {"results": results, "details": details}

    def _publish_if_changed(self, rate: OfficeRate, old_buy_rate: Decimal, old_sell_rate: Decimal) -> bool:
        """
        Publish a RateChangeEvent when buy or sell moved.

        Returns:
            bool: True if an event was handed to the bus
        """
        try:
            event = RateChangeEvent.from_rate(rate, old_buy_rate, old_sell_rate)
            if not event.has_changed:
                logger.debug(f"Rate {rate.id} prices unchanged, no event published")
                return False

            self.event_bus.publish(RATE_UPDATE_EVENT, event)
        except EventPublicationError as e:
            logger.warning(f"Rate {rate.id} updated but change event was not published: {e.message}")
            return False
        except Exception as e:
            logger.warning(
                f"Rate {rate.id} updated but change event was not published: unexpected error {e}",
                exc_info=True,
            )
            return False

        logger.info(
            f"Published {RATE_UPDATE_EVENT} for office {event.office.id} "
            f"{event.target_currency.code}: buy {old_buy_rate}->{event.new_buy_rate}, "
            f"sell {old_sell_rate}->{event.new_sell_rate}"
        )
        return True

    def _validate_prices(self, buy_rate: Decimal, sell_rate: Decimal) -> None:
        if buy_rate is None or buy_rate <= 0:
            raise ValidationError("Buy rate must be positive", errors={"buyRate": "invalidBuyRate"})
        if sell_rate is None or sell_rate <= 0:
            raise ValidationError("Sell rate must be positive", errors={"sellRate": "invalidSellRate"})
        if buy_rate >= sell_rate:
            raise ValidationError(
                "Buy rate must be lower than sell rate",
                errors={"rates": "buyRateMustBeLowerThanSellRate"},
            )

    def _reference_currency(self) -> Currency:
        currency = self.currencies.find_by_code(self.reference_currency_code)
        if not currency:
            raise NotFoundError(
                f"Reference currency {self.reference_currency_code} is not configured",
                errors={"baseCurrency": "baseCurrencyNotConfigured"},
            )
        return currency
