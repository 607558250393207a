"""Checkout: form validation and simulated order submission.

There is no payment gateway. Submission waits for a configurable delay,
empties the cart, then logs the order payload and records it in the audit trail.
"""
from __future__ import annotations

import asyncio
import logging
import re
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from audit import AuditLogger
from cart import CartSummary
from cart_session import CartSession
from catalog import ProductSource
from config import StorefrontConfig, config as default_config
from shipping import Address, ShippingService

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")
EXPIRY_PATTERN = re.compile(r"^\d{2}/\d{2}$")


@dataclass
class PaymentDetails:
    card_number: str = ""
    card_name: str = ""
    expiry_date: str = ""
    cvv: str = ""


@dataclass
class CheckoutForm:
    shipping: Address
    payment: PaymentDetails = field(default_factory=PaymentDetails)
    payment_method: str = "card"
    shipping_method: str = "standard"
    agreed_to_terms: bool = False


@dataclass
class CheckoutResult:
    status: str
    order_id: Optional[str] = None
    summary: Optional[CartSummary] = None
    shipping_cost: int = 0
    grand_total: int = 0
    errors: Dict[str, str] = field(default_factory=dict)
    payload: Optional[Dict[str, Any]] = None


def validate_form(form: CheckoutForm) -> Dict[str, str]:
    """Return a field -> message map of everything wrong with ``form``."""
    errors: Dict[str, str] = {}
    ship = form.shipping

    if not ship.full_name.strip():
        errors["full_name"] = "Full name is required"
    if not ship.email.strip():
        errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.search(ship.email):
        errors["email"] = "Invalid email format"
    if not ship.phone.strip():
        errors["phone"] = "Phone is required"
    if not ship.address.strip():
        errors["address"] = "Address is required"
    if not ship.city.strip():
        errors["city"] = "City is required"
    if not ship.zip_code.strip():
        errors["zip_code"] = "ZIP code is required"

    if form.payment_method == "card":
        pay = form.payment
        digits = re.sub(r"\s", "", pay.card_number)
        if not digits:
            errors["card_number"] = "Card number is required"
        elif len(digits) != 16:
            errors["card_number"] = "Card number must be 16 digits"
        if not pay.card_name.strip():
            errors["card_name"] = "Cardholder name is required"
        if not pay.expiry_date.strip():
            errors["expiry_date"] = "Expiry date is required"
        elif not EXPIRY_PATTERN.match(pay.expiry_date):
            errors["expiry_date"] = "Invalid format (MM/YY)"
        if not pay.cvv.strip():
            errors["cvv"] = "CVV is required"
        elif len(pay.cvv) != 3:
            errors["cvv"] = "CVV must be 3 digits"

    if not form.agreed_to_terms:
        errors["terms"] = "You must agree to terms & conditions"

    return errors


class CheckoutService:
    """Coordinates form validation, cart totals, shipping, and order hand-off."""

    def __init__(
        self,
        session: CartSession,
        catalog: ProductSource,
        shipping: ShippingService,
        audit: AuditLogger,
        settings: StorefrontConfig = default_config,
    ) -> None:
        self._session = session
        self._catalog = catalog
        self._shipping = shipping
        self._audit = audit
        self._delay = settings.checkout_delay_seconds

    def quote(self, shipping_method: str = "standard") -> CheckoutResult:
        summary = self._session.summary()
        shipping_cost = self._shipping.cost(summary.total, shipping_method)
        return CheckoutResult(
            status="quoted",
            summary=summary,
            shipping_cost=shipping_cost,
            grand_total=summary.total + shipping_cost,
        )

    async def place_order(self, form: CheckoutForm) -> CheckoutResult:
        if not self._session.items:
            return CheckoutResult(status="empty_cart", errors={"cart": "Your cart is empty"})

        errors = validate_form(form)
        if form.shipping_method not in self._shipping.methods:
            errors["shipping_method"] = f"Unsupported shipping method: {form.shipping_method}"
        if errors:
            return CheckoutResult(status="invalid", errors=errors)

        quoted = self.quote(form.shipping_method)
        await asyncio.sleep(self._delay)

        order_id = f"ORD-{int(time.time() * 1000)}"
        payload = self._payload(order_id, form, quoted)

        # Nothing is recorded until the cart is emptied.
        await self._session.clear()

        logger.info("Order placed: %s", payload)
        self._audit.log(
            "order_placed",
            order_id,
            f"total={quoted.grand_total}, items={quoted.summary.cart_count}",
        )

        return CheckoutResult(
            status="placed",
            order_id=order_id,
            summary=quoted.summary,
            shipping_cost=quoted.shipping_cost,
            grand_total=quoted.grand_total,
            payload=payload,
        )

    def _payload(self, order_id: str, form: CheckoutForm, quoted: CheckoutResult) -> Dict[str, Any]:
        items: List[Dict[str, Any]] = []
        for line in self._session.items:
            product = self._catalog.get(line.product_id)
            items.append(
                {
                    "product_id": line.product_id,
                    "product_name": product.name if product else None,
                    "variants": line.selection.as_dict(),
                    "quantity": line.quantity,
                }
            )
        summary = quoted.summary
        promo = self._session.applied_promo
        return {
            "order_id": order_id,
            "items": items,
            "shipping_info": asdict(form.shipping),
            "payment_method": form.payment_method,
            "shipping_method": form.shipping_method,
            "pricing": {
                "subtotal": summary.subtotal,
                "quantity_discount": summary.quantity_discount,
                "promo_code": promo.code if promo else None,
                "promo_discount": summary.promo_discount,
                "shipping": quoted.shipping_cost,
                "total": quoted.grand_total,
            },
        }
