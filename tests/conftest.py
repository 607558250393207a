from datetime import date, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from audit import AuditLogger
from cart_session import CartSession
from cart_store import Base, SqlCartStore
from catalog import default_products
from config import StorefrontConfig
from promotions import DiscountType, PromoCode
from storefront import Storefront
from sync import SyncChannel

from helpers import TODAY


class FixedClock:
    """Callable 'today' that tests can move forward."""

    def __init__(self, today: date = TODAY) -> None:
        self.today = today

    def __call__(self) -> date:
        return self.today


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def settings():
    return StorefrontConfig(checkout_delay_seconds=0)


@pytest.fixture
def products():
    return default_products()


@pytest.fixture
def chair(products):
    return next(p for p in products if p.id == "prod-001")


@pytest.fixture
def promo_codes():
    return [
        PromoCode("WELCOME10", DiscountType.PERCENTAGE, 10, TODAY + timedelta(days=300), min_purchase=5000),
        PromoCode("SAVE500", DiscountType.FIXED, 500, TODAY + timedelta(days=30), min_purchase=10000),
        PromoCode("MEGA25", DiscountType.PERCENTAGE, 25, TODAY + timedelta(days=30), min_purchase=25000),
        PromoCode("LASTDAY", DiscountType.FIXED, 250, TODAY),
        PromoCode("GONE", DiscountType.PERCENTAGE, 50, TODAY - timedelta(days=1)),
        PromoCode("HUGE", DiscountType.FIXED, 100000, TODAY + timedelta(days=30)),
    ]


@pytest.fixture
def storefront(products, promo_codes, clock, settings):
    return Storefront(products=products, promo_codes=promo_codes, today=clock, settings=settings)


@pytest.fixture
def engine():
    """In-memory SQLite shared across threads."""
    _engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield _engine
    Base.metadata.drop_all(_engine)
    _engine.dispose()


@pytest.fixture
def store(engine, settings):
    return SqlCartStore(engine=engine, settings=settings)


@pytest.fixture
def channel():
    return SyncChannel()


@pytest.fixture
def audit():
    return AuditLogger()


@pytest.fixture
def make_session(store, storefront, channel, audit):
    sessions = []

    def factory(cart_store=None):
        session = CartSession(
            cart_store or store,
            storefront.calculator,
            storefront.promotions,
            storefront.bundles,
            channel=channel,
            audit=audit,
        )
        sessions.append(session)
        return session

    yield factory
    for session in sessions:
        session.close()
