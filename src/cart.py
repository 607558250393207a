"""Cart line items and cart-level totals."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from catalog import ProductSource, Selection
from inventory import StockLevel, selection_stock, stock_level
from pricing import QuantityDiscount, apply_quantity_discount, unit_price
from promotions import PromotionService

logger = logging.getLogger(__name__)


def line_key(product_id: str, selection: Selection) -> str:
    return f"{product_id}-{selection.color}-{selection.material}-{selection.size}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CartLine:
    """One product configuration in the cart (or the saved-for-later list).

    Lines are identified by ``key``; adding an identical configuration
    again raises the quantity of the existing line.
    """

    product_id: str
    selection: Selection
    quantity: int = 1
    added_at: datetime = field(default_factory=_utcnow)
    selected_image: Optional[str] = None
    id: Optional[int] = None

    def __post_init__(self) -> None:
        if self.quantity <= 0:
            raise ValueError("Quantity must be positive")

    @property
    def key(self) -> str:
        return line_key(self.product_id, self.selection)

    def copy(self) -> "CartLine":
        return replace(self)


@dataclass(frozen=True)
class AppliedPromo:
    code: str
    discount: int


@dataclass(frozen=True)
class LinePricing:
    key: str
    product_id: str
    product_name: str
    pricing: QuantityDiscount

    @property
    def total(self) -> int:
        return self.pricing.final_price


@dataclass(frozen=True)
class LowStockWarning:
    key: str
    product_name: str
    stock: int
    requested: int
    level: StockLevel


@dataclass(frozen=True)
class CartSummary:
    cart_count: int
    subtotal: int
    quantity_discount: int
    promo_discount: int
    total: int
    lines: List[LinePricing] = field(default_factory=list)
    low_stock: List[LowStockWarning] = field(default_factory=list)
    applied_promo: Optional[AppliedPromo] = None
    unknown_products: List[str] = field(default_factory=list)

    @property
    def after_quantity_discount(self) -> int:
        return self.subtotal - self.quantity_discount

    @property
    def total_savings(self) -> int:
        return self.quantity_discount + self.promo_discount


class CartCalculator:
    """Runs the line pricing pipeline over a whole cart.

    Quantity tiers are applied per line, from that line's own quantity. An
    applied promo is validated again against the current cart on every
    call, so an expired or no-longer-qualifying code contributes nothing.
    The promo discount is capped at the remaining total, which keeps the
    cart total from going below zero.
    """

    def __init__(self, catalog: ProductSource, promotions: PromotionService) -> None:
        self._catalog = catalog
        self._promotions = promotions

    def summarize(self, lines: Iterable[CartLine], applied_promo: Optional[AppliedPromo] = None) -> CartSummary:
        cart_count = 0
        priced: List[LinePricing] = []
        warnings: List[LowStockWarning] = []
        unknown: List[str] = []

        for line in lines:
            cart_count += line.quantity
            product = self._catalog.get(line.product_id)
            if product is None:
                logger.warning("Skipping cart line %s: unknown product %s", line.key, line.product_id)
                unknown.append(line.key)
                continue

            pricing = apply_quantity_discount(unit_price(product, line.selection), line.quantity)
            priced.append(LinePricing(key=line.key, product_id=product.id, product_name=product.name, pricing=pricing))

            stock = selection_stock(product, line.selection)
            if stock < line.quantity:
                warnings.append(
                    LowStockWarning(
                        key=line.key,
                        product_name=product.name,
                        stock=stock,
                        requested=line.quantity,
                        level=stock_level(stock),
                    )
                )

        subtotal = sum(item.pricing.subtotal for item in priced)
        quantity_discount = sum(item.pricing.discount for item in priced)
        after_quantity_discount = subtotal - quantity_discount

        promo_discount = 0
        if applied_promo is not None:
            result = self._promotions.validate(applied_promo.code, after_quantity_discount)
            if result.valid:
                promo_discount = min(result.discount, max(after_quantity_discount, 0))
            else:
                logger.info("Applied promo %s no longer valid: %s", applied_promo.code, result.message)

        return CartSummary(
            cart_count=cart_count,
            subtotal=subtotal,
            quantity_discount=quantity_discount,
            promo_discount=promo_discount,
            total=after_quantity_discount - promo_discount,
            lines=priced,
            low_stock=warnings,
            applied_promo=applied_promo,
            unknown_products=unknown,
        )
