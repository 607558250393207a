"""Pricing helpers for configured products."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from catalog import Product, ProductSource, Selection
from money import percent_of

# (minimum quantity, percent off), checked highest first; tiers do not stack.
QUANTITY_TIERS: Tuple[Tuple[int, int], ...] = (
    (10, 15),
    (5, 10),
    (3, 5),
)


@dataclass(frozen=True)
class QuantityDiscount:
    unit_price: int
    quantity: int
    subtotal: int
    percent: int
    discount: int

    @property
    def final_price(self) -> int:
        return self.subtotal - self.discount


@dataclass(frozen=True)
class LineQuote:
    product: Product
    selection: Selection
    pricing: QuantityDiscount

    @property
    def total(self) -> int:
        return self.pricing.final_price


def unit_price(product: Product, selection: Selection) -> int:
    """Base price plus the three variant modifiers.

    Unknown variant ids add nothing. The result is not floored, so a large
    negative modifier can take it below the base price or to zero.
    """
    price = product.base_price
    for variant in product.selected_variants(selection).values():
        if variant is not None:
            price += variant.price_modifier
    return price


def quantity_discount_percent(quantity: int) -> int:
    for minimum, percent in QUANTITY_TIERS:
        if quantity >= minimum:
            return percent
    return 0


def apply_quantity_discount(price: int, quantity: int) -> QuantityDiscount:
    if quantity <= 0:
        raise ValueError("Quantity must be positive")

    subtotal = price * quantity
    percent = quantity_discount_percent(quantity)
    return QuantityDiscount(
        unit_price=price,
        quantity=quantity,
        subtotal=subtotal,
        percent=percent,
        discount=percent_of(subtotal, percent),
    )


class PricingService:
    """Prices product configurations from the catalog."""

    def __init__(self, catalog: ProductSource) -> None:
        self._catalog = catalog

    def calculate_product_price(self, product: Product, selection: Selection, quantity: int = 1) -> int:
        return apply_quantity_discount(unit_price(product, selection), quantity).final_price

    def quote(self, product_id: str, selection: Selection, quantity: int = 1) -> Optional[LineQuote]:
        product = self._catalog.get(product_id)
        if product is None:
            return None
        return LineQuote(
            product=product,
            selection=selection,
            pricing=apply_quantity_discount(unit_price(product, selection), quantity),
        )
