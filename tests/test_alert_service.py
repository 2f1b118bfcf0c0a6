"""Tests for the alert store: creation rules, CRUD, matching lookups and counts."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from app.exceptions import NotFoundError, ValidationError
from app.models import Alert
from app.models.alert import TriggerType
from app.schemas.alert import AlertCreate, AlertUpdate
from app.services.alert_service import AlertService

from conftest import city_alert_input, office_alert_input


@pytest.fixture
def service(db):
    return AlertService(db)


class TestAlertCreation:
    """Scope rules and reference resolution on create."""

    def test_create_city_alert_round_trip(self, db, ref, service):
        created = service.create(city_alert_input([ref.rabat.id]))
        db.expire_all()

        alert = service.find_by_id(created.id)

        assert alert is not None
        assert alert.is_active is True
        assert alert.trigger_type == TriggerType.CITY
        assert [city.id for city in alert.cities] == [ref.rabat.id]
        assert alert.offices == []
        assert alert.base_currency_id == ref.mad.id
        assert alert.target_currency_id == ref.eur.id
        assert alert.target_currency_amount == Decimal("10.50")

    def test_create_office_alert_resolves_all_offices(self, ref, service):
        alert = service.create(office_alert_input([ref.agdal.id, ref.hassan.id]))

        assert {office.id for office in alert.offices} == {ref.agdal.id, ref.hassan.id}
        assert alert.cities == []

    def test_lowercase_currency_codes_are_accepted(self, ref, service):
        alert = service.create(city_alert_input([ref.rabat.id], currency="mad", target="eur"))

        assert alert.base_currency.code == "MAD"
        assert alert.target_currency.code == "EUR"

    def test_city_alert_without_cities_is_rejected(self, db, ref, service):
        with pytest.raises(ValidationError) as exc_info:
            service.create(city_alert_input([]))

        assert exc_info.value.errors == {"cities": "required"}
        assert db.query(Alert).count() == 0

    def test_city_alert_with_offices_is_rejected(self, db, ref, service):
        data = AlertCreate(
            triggerType=TriggerType.CITY,
            whatsAppNumber="+212611111111",
            cities=[ref.rabat.id],
            offices=[ref.agdal.id],
            currency="MAD",
            targetCurrency="EUR",
            targetCurrencyAmount=Decimal("10.5"),
        )

        with pytest.raises(ValidationError):
            service.create(data)
        assert db.query(Alert).count() == 0

    def test_office_alert_without_offices_is_rejected(self, db, ref, service):
        with pytest.raises(ValidationError) as exc_info:
            service.create(office_alert_input(None))

        assert "offices" in exc_info.value.errors
        assert db.query(Alert).count() == 0

    def test_office_alert_with_cities_is_rejected(self, ref, service):
        data = AlertCreate(
            triggerType=TriggerType.OFFICE,
            whatsAppNumber="+212611111111",
            cities=[ref.rabat.id],
            offices=[ref.agdal.id],
            currency="MAD",
            targetCurrency="EUR",
            targetCurrencyAmount=Decimal("10.5"),
        )

        with pytest.raises(ValidationError):
            service.create(data)

    def test_malformed_currency_code_is_rejected(self, ref, service):
        with pytest.raises(ValidationError) as exc_info:
            service.create(city_alert_input([ref.rabat.id], target="EURO"))

        assert exc_info.value.errors == {"targetCurrency": "invalidCurrencyCode"}

    def test_unknown_currency_is_not_found(self, db, ref, service):
        with pytest.raises(NotFoundError):
            service.create(city_alert_input([ref.rabat.id], target="GBP"))
        assert db.query(Alert).count() == 0

    def test_unknown_city_is_not_found(self, db, ref, service):
        with pytest.raises(NotFoundError) as exc_info:
            service.create(city_alert_input([ref.rabat.id, "missing-city"]))

        assert "missing-city" in exc_info.value.message
        assert db.query(Alert).count() == 0

    def test_same_base_and_target_currency_is_rejected(self, ref, service):
        with pytest.raises(ValidationError):
            service.create(city_alert_input([ref.rabat.id], currency="EUR", target="EUR"))

    def test_non_positive_threshold_is_rejected(self, ref, service):
        with pytest.raises(ValidationError):
            service.create(city_alert_input([ref.rabat.id], threshold="0"))


class TestAlertCrud:
    """Listing, partial update and removal."""

    def test_find_all_is_paginated_newest_first(self, db, ref, service):
        old = service.create(city_alert_input([ref.rabat.id], number="+212600000010"))
        new = service.create(city_alert_input([ref.rabat.id], number="+212600000011"))
        old.created_at = datetime(2024, 1, 1)
        new.created_at = datetime(2024, 2, 1)
        db.commit()

        assert [a.id for a in service.find_all(page=1, limit=1)] == [new.id]
        assert [a.id for a in service.find_all(page=2, limit=1)] == [old.id]
        assert service.find_all(page=3, limit=1) == []

    def test_find_all_rejects_invalid_pagination(self, service):
        with pytest.raises(ValidationError):
            service.find_all(page=0, limit=10)

    def test_find_by_ids(self, ref, service):
        first = service.create(city_alert_input([ref.rabat.id]))
        service.create(city_alert_input([ref.casablanca.id]))

        assert [a.id for a in service.find_by_ids([first.id])] == [first.id]
        assert service.find_by_ids([]) == []

    def test_update_deactivates_alert(self, ref, service):
        alert = service.create(city_alert_input([ref.rabat.id]))

        updated = service.update(alert.id, AlertUpdate(isActive=False, targetCurrencyAmount=Decimal("11")))

        assert updated.is_active is False
        assert updated.target_currency_amount == Decimal("11")

    def test_update_missing_alert_raises(self, service):
        with pytest.raises(NotFoundError):
            service.update("missing", AlertUpdate(isActive=False))

    def test_update_rejects_non_positive_threshold(self, ref, service):
        alert = service.create(city_alert_input([ref.rabat.id]))

        with pytest.raises(ValidationError):
            service.update(alert.id, AlertUpdate(targetCurrencyAmount=Decimal("-1")))

    def test_remove_deletes_alert(self, ref, service):
        alert = service.create(city_alert_input([ref.rabat.id]))

        service.remove(alert.id)

        assert service.find_by_id(alert.id) is None

    def test_remove_missing_alert_raises(self, service):
        with pytest.raises(NotFoundError):
            service.remove("missing")


class TestFindMatchingAlerts:
    """
    Threshold direction: an alert matches once the available rate reaches
    its threshold, for its own scope and currency pair only.
    """

    def _match_city(self, service, ref, rate, city=None, target=None):
        return service.find_matching_alerts(
            TriggerType.CITY,
            (city or ref.rabat).id,
            ref.mad.id,
            (target or ref.eur).id,
            Decimal(rate),
        )

    def test_rate_above_threshold_matches(self, ref, service):
        alert = service.create(city_alert_input([ref.rabat.id], threshold="10.50"))

        assert [a.id for a in self._match_city(service, ref, "10.60")] == [alert.id]

    def test_rate_equal_to_threshold_matches(self, ref, service):
        alert = service.create(city_alert_input([ref.rabat.id], threshold="10.50"))

        assert [a.id for a in self._match_city(service, ref, "10.50")] == [alert.id]

    def test_rate_below_threshold_does_not_match(self, ref, service):
        service.create(city_alert_input([ref.rabat.id], threshold="10.50"))

        assert self._match_city(service, ref, "10.49") == []

    def test_inactive_alert_does_not_match(self, ref, service):
        alert = service.create(city_alert_input([ref.rabat.id]))
        service.update(alert.id, AlertUpdate(isActive=False))

        assert self._match_city(service, ref, "12") == []

    def test_other_city_does_not_match(self, ref, service):
        service.create(city_alert_input([ref.casablanca.id]))

        assert self._match_city(service, ref, "12") == []

    def test_other_target_currency_does_not_match(self, ref, service):
        service.create(city_alert_input([ref.rabat.id], target="EUR"))

        assert self._match_city(service, ref, "12", target=ref.usd) == []

    def test_office_scope_match_loads_every_office(self, ref, service):
        alert = service.create(office_alert_input([ref.agdal.id, ref.hassan.id]))

        matches = service.find_matching_alerts(
            TriggerType.OFFICE, ref.hassan.id, ref.mad.id, ref.eur.id, Decimal("11")
        )

        assert [a.id for a in matches] == [alert.id]
        assert len(matches[0].offices) == 2

    def test_city_alert_is_not_returned_for_office_scope(self, ref, service):
        service.create(city_alert_input([ref.rabat.id]))

        assert service.find_matching_alerts(
            TriggerType.OFFICE, ref.agdal.id, ref.mad.id, ref.eur.id, Decimal("11")
        ) == []


class TestAlertCounts:
    """Counts used by office analytics."""

    def test_count_active_for_office(self, ref, service):
        service.create(office_alert_input([ref.agdal.id]))
        inactive = service.create(office_alert_input([ref.agdal.id, ref.hassan.id]))
        service.update(inactive.id, AlertUpdate(isActive=False))
        service.create(city_alert_input([ref.rabat.id]))

        assert service.count_active_for_office(ref.agdal.id) == 1
        assert service.count_active_for_office(ref.hassan.id) == 0

    def test_counts_in_period(self, db, ref, service):
        inside = service.create(office_alert_input([ref.agdal.id]))
        outside = service.create(office_alert_input([ref.agdal.id]))
        city = service.create(city_alert_input([ref.rabat.id]))
        inside.created_at = datetime(2024, 6, 5)
        outside.created_at = datetime(2024, 5, 1)
        city.created_at = datetime(2024, 6, 6)
        db.commit()

        start, end = datetime(2024, 6, 1), datetime(2024, 6, 30)

        assert service.count_created_for_office(ref.agdal.id, start, end) == 1
        assert service.count_active_for_office_in_period(ref.agdal.id, start, end) == 1
        assert service.count_created_in_period(start, end) == 2
        assert service.count_active_in_period(start, end) == 2

    def test_bulk_created_counts(self, ref, service):
        service.create(office_alert_input([ref.agdal.id, ref.hassan.id]))
        service.create(office_alert_input([ref.agdal.id]))

        now = datetime.utcnow()
        counts = service.bulk_created_counts(
            [ref.agdal.id, ref.hassan.id, ref.maarif.id],
            now - timedelta(days=1),
            now + timedelta(days=1),
        )

        assert counts == {ref.agdal.id: 2, ref.hassan.id: 1}

    def test_bulk_created_counts_with_no_offices(self, service):
        now = datetime.utcnow()
        assert service.bulk_created_counts([], now - timedelta(days=1), now) == {}
