"""Shared fixtures: in-memory database, reference data and a recording transport."""

from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base
from app.exceptions import DispatchError
from app.models import City, Currency, Office, OfficeRate
from app.models.alert import TriggerType
from app.schemas.alert import AlertCreate
from app.services.messaging import DeliveryResult, MessagingTransport


class FakeTransport(MessagingTransport):
    """Records sent messages; raises DispatchError for addresses in `failing`."""

    def __init__(self, failing=()):
        self.sent = []
        self.failing = set(failing)

    def send(self, recipient_address, body):
        if recipient_address in self.failing:
            raise DispatchError(f"Simulated failure for {recipient_address}", recipient=recipient_address)
        self.sent.append((recipient_address, body))
        return DeliveryResult(recipient=recipient_address, sent=True, message_sid=f"SM{len(self.sent)}")

    @property
    def recipients(self):
        return [address for address, _ in self.sent]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def ref(db):
    """Currencies MAD/EUR/USD, cities Rabat/Casablanca and three offices."""
    mad = Currency(code="MAD", name="Moroccan Dirham")
    eur = Currency(code="EUR", name="Euro")
    usd = Currency(code="USD", name="US Dollar")

    rabat = City(name="Rabat")
    casablanca = City(name="Casablanca")

    agdal = Office(
        office_name="Agdal Change",
        slug="agdal-change",
        city=rabat,
        whatsapp_number="+212 600-000001",
        is_verified=True,
    )
    hassan = Office(
        office_name="Hassan Exchange",
        slug="hassan-exchange",
        city=rabat,
        whatsapp_number="+212600000002",
        is_verified=True,
    )
    maarif = Office(
        office_name="Maarif Change",
        slug="maarif-change",
        city=casablanca,
        whatsapp_number="+212600000003",
        is_verified=False,
    )

    db.add_all([mad, eur, usd, rabat, casablanca, agdal, hassan, maarif])
    db.commit()

    return SimpleNamespace(
        mad=mad,
        eur=eur,
        usd=usd,
        rabat=rabat,
        casablanca=casablanca,
        agdal=agdal,
        hassan=hassan,
        maarif=maarif,
    )


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def make_rate(db, ref):
    """Create an OfficeRate with MAD as base currency."""

    def _make_rate(office, target_currency, buy, sell, is_active=True):
        rate = OfficeRate(
            office_id=office.id,
            base_currency_id=ref.mad.id,
            target_currency_id=target_currency.id,
            buy_rate=Decimal(buy),
            sell_rate=Decimal(sell),
            is_active=is_active,
        )
        db.add(rate)
        db.commit()
        db.refresh(rate)
        return rate

    return _make_rate


def city_alert_input(city_ids, currency="MAD", target="EUR", threshold="10.50", number="+212 611-111111"):
    return AlertCreate(
        triggerType=TriggerType.CITY,
        whatsAppNumber=number,
        cities=city_ids,
        currency=currency,
        targetCurrency=target,
        targetCurrencyAmount=Decimal(threshold),
    )


def office_alert_input(office_ids, currency="MAD", target="EUR", threshold="10.50", number="+212 622-222222"):
    return AlertCreate(
        triggerType=TriggerType.OFFICE,
        whatsAppNumber=number,
        offices=office_ids,
        currency=currency,
        targetCurrency=target,
        targetCurrencyAmount=Decimal(threshold),
    )
