"""Tests for alert message composition and dispatch."""

from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock

from app.events.rate_change import CityRef, OfficeRef
from app.exceptions import DispatchError
from app.models import AlertNotification
from app.models.alert import TriggerType
from app.services.alert_service import AlertService
from app.services.messaging import DeliveryResult
from app.services.notification_service import (
    NotificationDispatcher,
    build_notification_message,
    format_rate,
)

from conftest import city_alert_input


def make_alert(offices=(), cities=(), number="+212600000099"):
    return SimpleNamespace(
        id="alert-1",
        whatsapp_number=number,
        base_currency=SimpleNamespace(code="MAD"),
        target_currency=SimpleNamespace(code="EUR"),
        offices=[SimpleNamespace(office_name=name) for name in offices],
        cities=[SimpleNamespace(name=name) for name in cities],
    )


class TestFormatRate:
    def test_trailing_zeros_are_dropped(self):
        assert format_rate(Decimal("10.60")) == "10.6"
        assert format_rate(Decimal("11.00")) == "11"
        assert format_rate(Decimal("0.25")) == "0.25"

    def test_whole_hundreds_keep_plain_notation(self):
        assert format_rate(Decimal("100.00")) == "100"


class TestBuildNotificationMessage:
    """Template selection per trigger type and context."""

    def test_context_office_is_named(self):
        alert = make_alert(offices=["Agdal Change", "Hassan Exchange"])

        body = build_notification_message(
            alert, TriggerType.OFFICE, Decimal("10.60"), context_office=OfficeRef(id="o1", name="Agdal Change")
        )

        assert "Bureau : Agdal Change" in body
        assert "1 MAD = 10.6 EUR" in body

    def test_single_alert_office_is_named_without_context(self):
        body = build_notification_message(make_alert(offices=["Agdal Change"]), TriggerType.OFFICE, Decimal("10.6"))

        assert "Bureau : Agdal Change" in body

    def test_multiple_offices_without_context_report_a_count(self):
        body = build_notification_message(
            make_alert(offices=["Agdal Change", "Hassan Exchange"]), TriggerType.OFFICE, Decimal("10.6")
        )

        assert "Nombre de bureaux : 2" in body
        assert "Agdal Change" not in body
        assert "Hassan Exchange" not in body

    def test_city_alert_names_context_city(self):
        body = build_notification_message(
            make_alert(cities=["Rabat", "Casablanca"]),
            TriggerType.CITY,
            Decimal("10.6"),
            context_city=CityRef(id="c1", name="Rabat"),
        )

        assert "Zone : Rabat\n" in body

    def test_city_alert_without_context_joins_cities(self):
        body = build_notification_message(make_alert(cities=["Rabat", "Casablanca"]), TriggerType.CITY, Decimal("10.6"))

        assert "Zone : Rabat, Casablanca" in body

    def test_generic_message_without_any_context(self):
        body = build_notification_message(make_alert(), TriggerType.OFFICE, Decimal("10.6"))

        assert "1 MAD = 10.6 EUR" in body
        assert "📍" not in body


class TestNotificationDispatcher:
    """Delivery and audit logging."""

    def test_successful_send_is_recorded(self, db, ref, transport):
        alert = AlertService(db).create(city_alert_input([ref.rabat.id]))
        dispatcher = NotificationDispatcher(transport, db)

        result = dispatcher.send_alert_notification(
            alert,
            TriggerType.CITY,
            Decimal("10.60"),
            context_office=OfficeRef(id=ref.agdal.id, name="Agdal Change"),
        )

        assert result.sent is True
        assert transport.recipients == ["whatsapp:+212611111111"]
        notification = db.query(AlertNotification).one()
        assert notification.alert_id == alert.id
        assert notification.office_id == ref.agdal.id
        assert notification.notification_sent is True
        assert notification.message_sid == "SM1"
        assert notification.rate == Decimal("10.60")

    def test_invalid_number_is_not_sent(self):
        alert = make_alert(number="n/a")
        transport = MagicMock()
        dispatcher = NotificationDispatcher(transport, MagicMock())

        result = dispatcher.send_alert_notification(alert, TriggerType.CITY, Decimal("10.6"))

        assert result.sent is False
        assert "Invalid WhatsApp number" in result.error
        transport.send.assert_not_called()

    def test_transport_failure_is_returned_not_raised(self):
        transport = MagicMock()
        transport.send.side_effect = DispatchError("Twilio rejected message", recipient="whatsapp:+212600000099")
        session = MagicMock()
        dispatcher = NotificationDispatcher(transport, session)

        result = dispatcher.send_alert_notification(make_alert(cities=["Rabat"]), TriggerType.CITY, Decimal("10.6"))

        assert result.sent is False
        assert result.error == "Twilio rejected message"
        session.add.assert_called_once()
        logged = session.add.call_args.args[0]
        assert logged.notification_sent is False

    def test_audit_failure_does_not_affect_delivery(self):
        transport = MagicMock()
        transport.send.return_value = DeliveryResult(recipient="whatsapp:+212600000099", sent=True, message_sid="SM9")
        session = MagicMock()
        session.commit.side_effect = RuntimeError("database locked")
        dispatcher = NotificationDispatcher(transport, session)

        result = dispatcher.send_alert_notification(make_alert(cities=["Rabat"]), TriggerType.CITY, Decimal("10.6"))

        assert result.sent is True
        session.rollback.assert_called_once()
