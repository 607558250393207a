import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from cart_store import CartStoreError
from checkout import CheckoutForm, CheckoutService, PaymentDetails, validate_form
from shipping import Address, ShippingService

from helpers import make_line


def _form(**overrides):
    form = CheckoutForm(
        shipping=Address(
            full_name="Rahim Uddin",
            email="rahim@example.com",
            phone="01700000000",
            address="12 Lake Road",
            city="Dhaka",
            state="Dhaka",
            zip_code="1205",
        ),
        payment=PaymentDetails(card_number="4242 4242 4242 4242", card_name="Rahim Uddin", expiry_date="12/28", cvv="123"),
        agreed_to_terms=True,
    )
    for name, value in overrides.items():
        setattr(form, name, value)
    return form


@pytest.fixture
def session(make_session):
    return make_session()


@pytest.fixture
def checkout(session, storefront, audit, settings):
    return CheckoutService(session, storefront.catalog, ShippingService(settings), audit, settings)


def test_valid_form_has_no_errors():
    assert validate_form(_form()) == {}


def test_missing_fields_are_reported():
    form = _form(agreed_to_terms=False)
    form.shipping.full_name = " "
    form.shipping.email = "not-an-email"
    form.payment.card_number = "4242"
    form.payment.expiry_date = "1228"
    form.payment.cvv = ""

    errors = validate_form(form)

    assert errors == {
        "full_name": "Full name is required",
        "email": "Invalid email format",
        "card_number": "Card number must be 16 digits",
        "expiry_date": "Invalid format (MM/YY)",
        "cvv": "CVV is required",
        "terms": "You must agree to terms & conditions",
    }


def test_card_fields_only_checked_for_card_payments():
    form = _form(payment_method="cod", payment=PaymentDetails())
    assert validate_form(form) == {}


def test_shipping_costs():
    shipping = ShippingService()
    assert shipping.cost(19999, "standard") == 100
    assert shipping.cost(19999, "express") == 300
    assert shipping.cost(20000, "express") == 0
    with pytest.raises(ValueError):
        shipping.cost(100, "drone")


def test_empty_cart_cannot_check_out(checkout):
    result = asyncio.run(checkout.place_order(_form()))
    assert result.status == "empty_cart"


def test_invalid_form_does_not_touch_cart(checkout, session):
    asyncio.run(session.add(make_line("prod-003")))

    result = asyncio.run(checkout.place_order(_form(agreed_to_terms=False)))

    assert result.status == "invalid"
    assert "terms" in result.errors
    assert len(session.items) == 1


def test_unsupported_shipping_method_is_a_form_error(checkout, session):
    asyncio.run(session.add(make_line("prod-003")))

    result = asyncio.run(checkout.place_order(_form(shipping_method="drone")))

    assert result.status == "invalid"
    assert result.errors == {"shipping_method": "Unsupported shipping method: drone"}


def test_small_order_pays_for_shipping(checkout, session):
    asyncio.run(session.add(make_line("prod-003", 2)))

    quote = checkout.quote("express")

    assert quote.summary.total == 9998
    assert quote.shipping_cost == 300
    assert quote.grand_total == 10298


def test_place_order(checkout, session, store, audit):
    asyncio.run(session.add(make_line("prod-001", 5)))
    session.apply_promo("WELCOME10")

    result = asyncio.run(checkout.place_order(_form()))

    assert result.status == "placed"
    assert result.order_id.startswith("ORD-")
    assert result.shipping_cost == 0
    assert result.grand_total == 64795
    assert result.payload["pricing"] == {
        "subtotal": 79995,
        "quantity_discount": 8000,
        "promo_code": "WELCOME10",
        "promo_discount": 7200,
        "shipping": 0,
        "total": 64795,
    }
    assert result.payload["items"][0]["product_name"] == "Premium Office Chair"
    assert "card_number" not in str(result.payload)
    assert session.items == []
    assert asyncio.run(store.get_cart()) == []
    assert audit.entries("order_placed")[0].subject == result.order_id


def test_failed_cart_clear_records_no_order(checkout, session, store, audit):
    asyncio.run(session.add(make_line("prod-003", 1)))

    with patch.object(store, "clear_cart", AsyncMock(side_effect=CartStoreError("locked"))):
        with pytest.raises(CartStoreError):
            asyncio.run(checkout.place_order(_form()))

    assert audit.entries("order_placed") == []
    assert len(session.items) == 1
    assert len(asyncio.run(store.get_cart())) == 1

    result = asyncio.run(checkout.place_order(_form()))

    assert result.status == "placed"
    assert [entry.subject for entry in audit.entries("order_placed")] == [result.order_id]
