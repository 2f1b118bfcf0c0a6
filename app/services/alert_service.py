"""
Alert Service

Alert store operations: creation with scope validation, CRUD, scoped
matching lookups and the counts used by office analytics.
"""

import re
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.exceptions import NotFoundError, ValidationError
from app.models.alert import Alert, TriggerType
from app.models.currency import Currency
from app.repositories.alert_repository import AlertRepository, SqlAlchemyAlertRepository
from app.repositories.reference_repository import CityDirectory, CurrencyDirectory, OfficeDirectory
from app.schemas.alert import AlertCreate, AlertUpdate
from app.utils.logger import create_logger

logger = create_logger(__name__)

CURRENCY_CODE_PATTERN = re.compile(r"^[A-Za-z]{3}$")


class AlertService:
    """Service for alert subscriptions."""

    def __init__(self, db: Session, alert_repository: Optional[AlertRepository] = None):
        """
        Initialize alert service.

        Args:
            db: SQLAlchemy database session
            alert_repository: Alert persistence (defaults to the SQLAlchemy repository)
        """
        self.db = db
        self.alerts = alert_repository or SqlAlchemyAlertRepository(db)
        self.currencies = CurrencyDirectory(db)
        self.cities = CityDirectory(db)
        self.offices = OfficeDirectory(db)

    def create(self, data: AlertCreate) -> Alert:
        """
        Create an alert subscription.

        Every check runs before the first write: a rejected input leaves the
        store untouched.

        Args:
            data: Alert creation payload

        Returns:
            Alert: Persisted alert, active

        Raises:
            ValidationError: Scope does not match trigger type, malformed
                currency code, same base and target currency, non-positive amount
            NotFoundError: A currency, city or office does not exist
        """
        city_ids = list(dict.fromkeys(data.cities or []))
        office_ids = list(dict.fromkeys(data.offices or []))

        self._validate_scope(data.triggerType, city_ids, office_ids)
        self._validate_amounts(data.baseCurrencyAmount, data.targetCurrencyAmount)

        if not data.whatsAppNumber or not data.whatsAppNumber.strip():
            raise ValidationError(
                "WhatsApp number is required", errors={"whatsAppNumber": "required"}
            )

        base_currency = self._resolve_currency(data.currency, "currency")
        target_currency = self._resolve_currency(data.targetCurrency, "targetCurrency")

        if base_currency.id == target_currency.id:
            raise ValidationError(
                "Base and target currency must differ",
                errors={"targetCurrency": "sameAsBaseCurrency"},
            )

        cities = self._resolve_all(self.cities, city_ids, "cities", "cityNotFound")
        offices = self._resolve_all(self.offices, office_ids, "offices", "officeNotFound")

        alert = Alert(
            trigger_type=data.triggerType,
            whatsapp_number=data.whatsAppNumber.strip(),
            base_currency_id=base_currency.id,
            target_currency_id=target_currency.id,
            base_currency_amount=data.baseCurrencyAmount,
            target_currency_amount=data.targetCurrencyAmount,
            is_active=True,
        )
        alert.cities = cities
        alert.offices = offices

        alert = self.alerts.create(alert)

        logger.info(
            f"Alert created: id={alert.id}, type={alert.trigger_type.value}, "
            f"{base_currency.code}->{target_currency.code} >= {alert.target_currency_amount}"
        )
        return alert

    def find_all(self, page: int = 1, limit: int = 10) -> List[Alert]:
        if page < 1 or limit < 1:
            raise ValidationError(
                "Page and limit must be positive", errors={"pagination": "invalidPagination"}
            )
        return self.alerts.find_all(page, limit)

    def find_by_id(self, alert_id: str) -> Optional[Alert]:
        return self.alerts.find_by_id(alert_id)

    def find_by_ids(self, alert_ids: List[str]) -> List[Alert]:
        return self.alerts.find_by_ids(alert_ids)

    def update(self, alert_id: str, data: AlertUpdate) -> Alert:
        """
        Apply a partial update to an alert.

        Raises:
            NotFoundError: Alert does not exist
            ValidationError: Non-positive amount or empty WhatsApp number
        """
        alert = self._get_or_raise(alert_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("baseCurrencyAmount") is not None and changes["baseCurrencyAmount"] <= 0:
            raise ValidationError(
                "Base currency amount must be positive", errors={"baseCurrencyAmount": "mustBePositive"}
            )
        if changes.get("targetCurrencyAmount") is not None and changes["targetCurrencyAmount"] <= 0:
            raise ValidationError(
                "Target currency amount must be positive",
                errors={"targetCurrencyAmount": "mustBePositive"},
            )

        if changes.get("whatsAppNumber") is not None:
            number = changes["whatsAppNumber"].strip()
            if not number:
                raise ValidationError(
                    "WhatsApp number is required", errors={"whatsAppNumber": "required"}
                )
            alert.whatsapp_number = number
        if changes.get("baseCurrencyAmount") is not None:
            alert.base_currency_amount = changes["baseCurrencyAmount"]
        if changes.get("targetCurrencyAmount") is not None:
            alert.target_currency_amount = changes["targetCurrencyAmount"]
        if changes.get("isActive") is not None:
            alert.is_active = changes["isActive"]

        alert = self.alerts.save(alert)
        logger.info(f"Alert updated: id={alert.id}, fields={sorted(changes)}")
        return alert

    def remove(self, alert_id: str) -> None:
        """
        Delete an alert.

        Raises:
            NotFoundError: Alert does not exist
        """
        alert = self._get_or_raise(alert_id)
        self.alerts.remove(alert)
        logger.info(f"Alert removed: id={alert_id}")

    def find_matching_alerts(
        self,
        trigger_type: TriggerType,
        scope_id: str,
        base_currency_id: str,
        target_currency_id: str,
        min_target_rate: Decimal,
    ) -> List[Alert]:
        """
        Active alerts whose scope contains scope_id, whose currency pair matches
        and whose threshold is at most min_target_rate. Unordered.
        """
        return self.alerts.find_matching(
            trigger_type, scope_id, base_currency_id, target_currency_id, min_target_rate
        )

    def count_active_for_office(self, office_id: str) -> int:
        return self.alerts.count_active_for_office(office_id)

    def count_active_for_office_in_period(self, office_id: str, start: datetime, end: datetime) -> int:
        return self.alerts.count_active_for_office_in_period(office_id, start, end)

    def count_created_for_office(self, office_id: str, start: datetime, end: datetime) -> int:
        return self.alerts.count_created_for_office(office_id, start, end)

    def count_created_in_period(self, start: datetime, end: datetime) -> int:
        return self.alerts.count_created_in_period(start, end)

    def count_active_in_period(self, start: datetime, end: datetime) -> int:
        return self.alerts.count_active_in_period(start, end)

    def bulk_created_counts(self, office_ids: List[str], start: datetime, end: datetime) -> Dict[str, int]:
        return self.alerts.bulk_created_counts(office_ids, start, end)

    def _get_or_raise(self, alert_id: str) -> Alert:
        alert = self.alerts.find_by_id(alert_id)
        if not alert:
            raise NotFoundError(f"Alert not found: {alert_id}", errors={"alert": "alertNotFound"})
        return alert

    def _validate_scope(self, trigger_type: TriggerType, city_ids: List[str], office_ids: List[str]) -> None:
        """Exactly one scope set is populated, the one named by trigger_type."""
        if trigger_type == TriggerType.CITY:
            if not city_ids:
                raise ValidationError(
                    "City alerts require at least one city", errors={"cities": "required"}
                )
            if office_ids:
                raise ValidationError(
                    "City alerts cannot target offices", errors={"offices": "notAllowedForCityAlert"}
                )
        elif trigger_type == TriggerType.OFFICE:
            if not office_ids:
                raise ValidationError(
                    "Office alerts require at least one office", errors={"offices": "required"}
                )
            if city_ids:
                raise ValidationError(
                    "Office alerts cannot target cities", errors={"cities": "notAllowedForOfficeAlert"}
                )
        else:
            raise ValidationError(
                f"Unknown trigger type: {trigger_type}", errors={"triggerType": "invalidTriggerType"}
            )

    def _validate_amounts(self, base_amount: Decimal, target_amount: Decimal) -> None:
        if base_amount is None or base_amount <= 0:
            raise ValidationError(
                "Base currency amount must be positive", errors={"baseCurrencyAmount": "mustBePositive"}
            )
        if target_amount is None or target_amount <= 0:
            raise ValidationError(
                "Target currency amount must be positive",
                errors={"targetCurrencyAmount": "mustBePositive"},
            )

    def _resolve_currency(self, code: str, field: str) -> Currency:
        if not code or not CURRENCY_CODE_PATTERN.match(code):
            raise ValidationError(
                f"Invalid currency code: {code!r}", errors={field: "invalidCurrencyCode"}
            )

        currency = self.currencies.find_by_code(code)
        if not currency:
            raise NotFoundError(
                f"Currency not found: {code.upper()}", errors={field: "currencyNotFound"}
            )
        return currency

    def _resolve_all(self, directory, ids: List[str], field: str, error_key: str) -> List:
        """Resolve every id or raise NotFoundError naming the missing ones."""
        if not ids:
            return []

        found = directory.find_by_ids(ids)
        found_ids = {entity.id for entity in found}
        missing = [entity_id for entity_id in ids if entity_id not in found_ids]
        if missing:
            raise NotFoundError(
                f"{field.capitalize()} not found: {', '.join(missing)}", errors={field: error_key}
            )
        return found
